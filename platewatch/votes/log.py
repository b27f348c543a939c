"""Authenticated vote log.

One entry per filled ballot slot, keyed by ``(user, category, slot)``;
overall picks use a ``None`` category. Each entry also carries the
``{user}_{category}_{slot}`` / ``{user}_overall`` label shown to admins.
Replaying a user's entries rebuilds their ballot on any device.
"""
from __future__ import annotations

import time
from typing import Any

from .models import CategoryVote, ScoreDelta, UserVoteRecord, VoteSlot

VoteKey = tuple[str, str | None, str]

_votes: dict[VoteKey, dict[str, Any]] = {}


def _vote_key(user_id: str, slot: VoteSlot, category: str | None) -> VoteKey:
    if slot is VoteSlot.overall:
        return (user_id, None, slot.value)
    return (user_id, category, slot.value)


def _vote_label(user_id: str, slot: VoteSlot, category: str | None) -> str:
    if slot is VoteSlot.overall:
        return f"{user_id}_overall"
    return f"{user_id}_{category}_{slot.value}"


def record_deltas(user_id: str, deltas: list[ScoreDelta], user_name: str | None = None) -> None:
    """Write the slot changes carried by *deltas* to the log."""
    for d in deltas:
        key = _vote_key(user_id, d.slot, d.category)
        if d.is_removal:
            entry = _votes.get(key)
            if entry and entry["restaurant_id"] == d.restaurant_id:
                del _votes[key]
            continue
        _votes[key] = {
            "vote_id": _vote_label(user_id, d.slot, d.category),
            "user_id": user_id,
            "user_name": user_name or user_id,
            "restaurant_id": d.restaurant_id,
            "category": d.category,
            "vote_type": d.slot.value,
            "timestamp": time.time(),
        }


def replay(user_id: str) -> UserVoteRecord:
    record = UserVoteRecord()
    for entry in _votes.values():
        if entry["user_id"] != user_id:
            continue
        slot = VoteSlot(entry["vote_type"])
        if slot is VoteSlot.overall:
            record.overall_top_pick = entry["restaurant_id"]
            continue
        vote = record.category_votes.setdefault(entry["category"], CategoryVote())
        if slot is VoteSlot.top:
            vote.top_id = entry["restaurant_id"]
        else:
            vote.runner_up_id = entry["restaurant_id"]
    return record


def purge_restaurant(restaurant_id: str, category: str | None = None) -> list[dict[str, Any]]:
    """Remove votes for *restaurant_id*.

    With *category*, only category votes cast under that label are removed
    and overall picks are kept. Returns the removed entries.
    """
    removed: list[dict[str, Any]] = []
    for key, entry in list(_votes.items()):
        if entry["restaurant_id"] != restaurant_id:
            continue
        if category is not None and entry["category"] != category:
            continue
        removed.append(_votes.pop(key))
    return removed


def delete_user_votes(user_id: str) -> list[dict[str, Any]]:
    removed: list[dict[str, Any]] = []
    for key, entry in list(_votes.items()):
        if entry["user_id"] == user_id:
            removed.append(_votes.pop(key))
    return removed


def get_votes() -> list[dict[str, Any]]:
    return list(_votes.values())


def clear_votes() -> None:
    _votes.clear()
