from __future__ import annotations

from collections import Counter
from typing import Any

from ..votes.models import SLOT_POINTS, VoteSlot


def compute_vote_analytics(
    votes: list[dict[str, Any]],
    names_by_id: dict[str, str],
) -> dict[str, Any]:
    """Summarise the signed-in vote log for the admin console."""
    voters = {v["user_id"] for v in votes}

    slot_counter: Counter[str] = Counter(v["vote_type"] for v in votes)

    category_counter: Counter[str] = Counter()
    for v in votes:
        if v["vote_type"] != VoteSlot.overall.value:
            category_counter[v["category"]] += 1
    busiest_categories = [
        {"name": n, "votes": c} for n, c in category_counter.most_common(10)
    ]

    overall_counter: Counter[str] = Counter(
        v["restaurant_id"] for v in votes if v["vote_type"] == VoteSlot.overall.value
    )
    top_overall_picks = [
        {"restaurant_id": rid, "name": names_by_id.get(rid, rid), "picks": c}
        for rid, c in overall_counter.most_common(10)
    ]

    # Points currently backed by an active vote, per restaurant
    points: Counter[str] = Counter()
    for v in votes:
        points[v["restaurant_id"]] += SLOT_POINTS[VoteSlot(v["vote_type"])]
    most_backed = [
        {"restaurant_id": rid, "name": names_by_id.get(rid, rid), "points": p}
        for rid, p in points.most_common(10)
    ]

    return {
        "total_votes": len(votes),
        "total_voters": len(voters),
        "votes_by_slot": {slot.value: slot_counter.get(slot.value, 0) for slot in VoteSlot},
        "busiest_categories": busiest_categories,
        "top_overall_picks": top_overall_picks,
        "most_backed_restaurants": most_backed,
        "avg_votes_per_voter": round(len(votes) / len(voters), 1) if voters else 0.0,
    }
