from __future__ import annotations

from collections.abc import Mapping

from .deltas import apply_delta, category_vote_deltas, overall_pick_deltas
from .models import ScoreDelta, UserVoteRecord, VoteSlot, VoteTransition


def _fold(record: UserVoteRecord, deltas: list[ScoreDelta]) -> VoteTransition:
    updated = record.model_copy(deep=True)
    for d in deltas:
        apply_delta(updated, d)
    updated.category_votes = {
        category: vote for category, vote in updated.category_votes.items() if not vote.is_empty()
    }
    return VoteTransition(record=updated, deltas=deltas)


def set_category_vote(
    record: UserVoteRecord,
    category: str,
    restaurant_id: str,
    slot: VoteSlot,
) -> VoteTransition:
    """Put *restaurant_id* into *slot* of *category*, or toggle it off.

    Returns the new record and the deltas that produced it. *record* itself
    is left untouched. Categories that have never been voted in are created.
    """
    current = record.category_votes.get(category)
    return _fold(record, category_vote_deltas(current, category, restaurant_id, slot))


def set_overall_pick(record: UserVoteRecord, restaurant_id: str) -> VoteTransition:
    """Make *restaurant_id* the single overall pick, or toggle it off."""
    return _fold(record, overall_pick_deltas(record.overall_top_pick, restaurant_id))


def prune_record(record: UserVoteRecord, categories_by_id: Mapping[str, str]) -> UserVoteRecord:
    """Drop votes that no longer match the catalog.

    A category vote survives only if its restaurant still exists and still
    belongs to the category the vote was cast in. The overall pick survives
    if its restaurant exists.
    """
    pruned = UserVoteRecord()
    for category, vote in record.category_votes.items():
        kept = vote.model_copy()
        if kept.top_id is not None and categories_by_id.get(kept.top_id) != category:
            kept.top_id = None
        if kept.runner_up_id is not None and categories_by_id.get(kept.runner_up_id) != category:
            kept.runner_up_id = None
        if not kept.is_empty():
            pruned.category_votes[category] = kept

    if record.overall_top_pick in categories_by_id:
        pruned.overall_top_pick = record.overall_top_pick
    return pruned


def active_vote_count(record: UserVoteRecord) -> int:
    """Number of filled Top Choice / Runner-Up slots."""
    count = 0
    for vote in record.category_votes.values():
        if vote.top_id:
            count += 1
        if vote.runner_up_id:
            count += 1
    return count
