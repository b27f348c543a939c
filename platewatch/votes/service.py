"""Ballot access for the current viewer.

Signed-in users keep their ballot in the vote log (and their deltas feed
the community tally); guests keep theirs in the session only.
"""
from __future__ import annotations

from typing import Any, MutableMapping

from ..restaurants import catalog
from ..scoring.compositor import ballot_impact
from . import log as vote_log
from .deltas import record_deltas
from .ledger import active_vote_count, prune_record, set_category_vote, set_overall_pick
from .models import BallotSummary, ScoreDelta, UserVoteRecord, VoteSlot, VoteTransition
from .session import clear_local_record, load_local_record, save_local_record

Session = MutableMapping[str, Any]


def load_ballot(session: Session, user: dict | None) -> UserVoteRecord:
    if user:
        return prune_record(vote_log.replay(user["username"]), catalog.categories_by_id())

    record = load_local_record(session)
    pruned = prune_record(record, catalog.categories_by_id())
    if pruned != record:
        # Pruned votes are gone for good, even if the restaurant moves back.
        save_local_record(session, pruned)
    return pruned


def _persist(session: Session, user: dict | None, transition: VoteTransition) -> None:
    if user:
        vote_log.record_deltas(user["username"], transition.deltas, user.get("display_name"))
    else:
        save_local_record(session, transition.record)


def cast_category_vote(
    session: Session, user: dict | None, restaurant_id: str, slot: VoteSlot
) -> VoteTransition:
    """Vote in the restaurant's own category.

    Raises ``RestaurantNotFound`` for unknown ids.
    """
    restaurant = catalog.get_restaurant(restaurant_id)
    record = load_ballot(session, user)
    transition = set_category_vote(record, restaurant.category, restaurant.id, slot)
    _persist(session, user, transition)
    return transition


def cast_overall_vote(session: Session, user: dict | None, restaurant_id: str) -> VoteTransition:
    restaurant = catalog.get_restaurant(restaurant_id)
    record = load_ballot(session, user)
    transition = set_overall_pick(record, restaurant.id)
    _persist(session, user, transition)
    return transition


def retract_ballot(session: Session, user: dict | None) -> list[ScoreDelta]:
    """Clear every vote; returns the deltas that undo the ballot."""
    record = load_ballot(session, user)
    deltas = record_deltas(record, UserVoteRecord())
    if user:
        vote_log.delete_user_votes(user["username"])
    else:
        clear_local_record(session)
    return deltas


def ballot_summary(record: UserVoteRecord, user: dict | None) -> BallotSummary:
    return BallotSummary(
        active_votes=active_vote_count(record),
        ballot_impact=ballot_impact(record),
        authenticated=bool(user),
    )
