from __future__ import annotations

from collections.abc import Mapping

from ..restaurants.models import Restaurant
from ..votes.models import (
    OVERALL_PICK_POINTS,
    RUNNER_UP_POINTS,
    TOP_CHOICE_POINTS,
    UserVoteRecord,
)


def local_user_contribution(restaurant: Restaurant, record: UserVoteRecord) -> int:
    """Points the viewer's own ballot gives *restaurant*.

    Category slots only count in the restaurant's own category; the overall
    pick counts regardless of category.
    """
    points = 0
    vote = record.category_votes.get(restaurant.category)
    if vote is not None:
        if vote.top_id == restaurant.id:
            points += TOP_CHOICE_POINTS
        if vote.runner_up_id == restaurant.id:
            points += RUNNER_UP_POINTS
    if record.overall_top_pick == restaurant.id:
        points += OVERALL_PICK_POINTS
    return points


def community_points(restaurant: Restaurant, snapshot: Mapping[str, int] | None) -> int:
    if snapshot is None:
        return 0
    return int(snapshot.get(restaurant.id, 0))


def compute_total(
    restaurant: Restaurant,
    record: UserVoteRecord,
    snapshot: Mapping[str, int] | None,
) -> int:
    """Displayed total: base + community tally + the viewer's own votes.

    ``snapshot`` is ``None`` in local-only mode.
    """
    return (
        restaurant.base_points
        + community_points(restaurant, snapshot)
        + local_user_contribution(restaurant, record)
    )


def score_breakdown(
    restaurant: Restaurant,
    record: UserVoteRecord,
    snapshot: Mapping[str, int] | None,
) -> dict[str, int | None]:
    user = local_user_contribution(restaurant, record)
    community = community_points(restaurant, snapshot)
    return {
        "base": restaurant.base_points,
        "community": community if snapshot is not None else None,
        "user": user,
        "total": restaurant.base_points + community + user,
    }


def ballot_impact(record: UserVoteRecord) -> int:
    """Total points the ballot hands out across all restaurants."""
    total = 0
    for vote in record.category_votes.values():
        if vote.top_id:
            total += TOP_CHOICE_POINTS
        if vote.runner_up_id:
            total += RUNNER_UP_POINTS
    if record.overall_top_pick:
        total += OVERALL_PICK_POINTS
    return total
