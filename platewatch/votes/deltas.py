"""
Score delta calculation.

Every vote transition is expressed as an ordered list of ``ScoreDelta``
values. The same list is folded into the user's ledger, written to the vote
log and pushed to the community tally, so the three never disagree about
what a transition did.

Removals always come before additions: if only a prefix of the list is
applied, no restaurant is ever charged for two slots at once.
"""
from __future__ import annotations

from collections import defaultdict

from .models import CategoryVote, ScoreDelta, UserVoteRecord, VoteSlot


def _remove(restaurant_id: str, slot: VoteSlot, category: str | None) -> ScoreDelta:
    return ScoreDelta(restaurant_id, -slot.points, slot, category)


def _add(restaurant_id: str, slot: VoteSlot, category: str | None) -> ScoreDelta:
    return ScoreDelta(restaurant_id, slot.points, slot, category)


def category_vote_deltas(
    current: CategoryVote | None,
    category: str,
    restaurant_id: str,
    slot: VoteSlot,
) -> list[ScoreDelta]:
    """Deltas for putting *restaurant_id* into *slot* of *category*.

    Selecting the restaurant that already holds the slot toggles it off.
    """
    current = current or CategoryVote()

    if current.holder(slot) == restaurant_id:
        return [_remove(restaurant_id, slot, category)]

    deltas: list[ScoreDelta] = []
    other = slot.other
    if current.holder(other) == restaurant_id:
        deltas.append(_remove(restaurant_id, other, category))

    previous = current.holder(slot)
    if previous is not None:
        deltas.append(_remove(previous, slot, category))

    deltas.append(_add(restaurant_id, slot, category))
    return deltas


def overall_pick_deltas(current_pick: str | None, restaurant_id: str) -> list[ScoreDelta]:
    """Deltas for making *restaurant_id* the overall pick (or toggling it off)."""
    if current_pick == restaurant_id:
        return [_remove(restaurant_id, VoteSlot.overall, None)]

    deltas: list[ScoreDelta] = []
    if current_pick is not None:
        deltas.append(_remove(current_pick, VoteSlot.overall, None))
    deltas.append(_add(restaurant_id, VoteSlot.overall, None))
    return deltas


def _slots(record: UserVoteRecord) -> dict[tuple[str | None, VoteSlot], str]:
    slots: dict[tuple[str | None, VoteSlot], str] = {}
    for category, vote in record.category_votes.items():
        if vote.top_id is not None:
            slots[(category, VoteSlot.top)] = vote.top_id
        if vote.runner_up_id is not None:
            slots[(category, VoteSlot.runner_up)] = vote.runner_up_id
    if record.overall_top_pick is not None:
        slots[(None, VoteSlot.overall)] = record.overall_top_pick
    return slots


def record_deltas(old: UserVoteRecord, new: UserVoteRecord) -> list[ScoreDelta]:
    """Deltas that turn the contribution of *old* into that of *new*."""
    old_slots = _slots(old)
    new_slots = _slots(new)

    removals = [
        _remove(rid, slot, category)
        for (category, slot), rid in old_slots.items()
        if new_slots.get((category, slot)) != rid
    ]
    additions = [
        _add(rid, slot, category)
        for (category, slot), rid in new_slots.items()
        if old_slots.get((category, slot)) != rid
    ]
    return removals + additions


def apply_delta(record: UserVoteRecord, delta: ScoreDelta) -> None:
    """Fold one delta into *record* in place."""
    if delta.slot is VoteSlot.overall:
        if delta.is_removal:
            if record.overall_top_pick == delta.restaurant_id:
                record.overall_top_pick = None
        else:
            record.overall_top_pick = delta.restaurant_id
        return

    vote = record.category_votes.setdefault(delta.category, CategoryVote())
    if delta.is_removal:
        if vote.holder(delta.slot) != delta.restaurant_id:
            return
        value = None
    else:
        value = delta.restaurant_id

    if delta.slot is VoteSlot.top:
        vote.top_id = value
    else:
        vote.runner_up_id = value


def net_points(deltas: list[ScoreDelta]) -> dict[str, int]:
    """Sum deltas per restaurant."""
    totals: dict[str, int] = defaultdict(int)
    for d in deltas:
        totals[d.restaurant_id] += d.delta
    return dict(totals)
