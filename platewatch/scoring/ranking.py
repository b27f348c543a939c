from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from ..restaurants.models import Restaurant
from ..votes.models import UserVoteRecord
from .compositor import compute_total

RestaurantFilter = Callable[[Restaurant], bool]


def make_search_filter(query: str | None) -> RestaurantFilter | None:
    """Every whitespace-separated term must appear in name, category or address."""
    terms = (query or "").lower().split()
    if not terms:
        return None

    def _matches(restaurant: Restaurant) -> bool:
        haystack = " | ".join(
            (restaurant.name, restaurant.category, restaurant.address)
        ).lower()
        return all(term in haystack for term in terms)

    return _matches


def _filtered(
    restaurants: Iterable[Restaurant], predicate: RestaurantFilter | None
) -> list[Restaurant]:
    if predicate is None:
        return list(restaurants)
    return [r for r in restaurants if predicate(r)]


def rank(
    restaurants: Iterable[Restaurant],
    record: UserVoteRecord,
    snapshot: Mapping[str, int] | None,
) -> list[Restaurant]:
    """Sort by total, highest first. Equal totals keep their input order."""
    return sorted(
        restaurants,
        key=lambda r: compute_total(r, record, snapshot),
        reverse=True,
    )


def group_and_rank(
    restaurants: Iterable[Restaurant],
    record: UserVoteRecord,
    snapshot: Mapping[str, int] | None,
    predicate: RestaurantFilter | None = None,
) -> dict[str, list[Restaurant]]:
    """Bucket by category and rank each bucket.

    The filter runs before grouping, so excluded restaurants never reach a
    bucket. Category keys come back in alphabetical order.
    """
    groups: dict[str, list[Restaurant]] = {}
    for restaurant in _filtered(restaurants, predicate):
        groups.setdefault(restaurant.category, []).append(restaurant)

    return {
        category: rank(groups[category], record, snapshot)
        for category in sorted(groups)
    }


def top_n(
    restaurants: Iterable[Restaurant],
    record: UserVoteRecord,
    snapshot: Mapping[str, int] | None,
    n: int,
    predicate: RestaurantFilter | None = None,
) -> list[Restaurant]:
    """Highest totals across every category ("Best This Week")."""
    return rank(_filtered(restaurants, predicate), record, snapshot)[: max(n, 0)]


def select_categories(
    grouped: dict[str, list[Restaurant]], selected: list[str] | None
) -> dict[str, list[Restaurant]]:
    if not selected:
        return grouped
    wanted = set(selected)
    return {category: items for category, items in grouped.items() if category in wanted}


def paginate(items: list, page: int, page_size: int) -> list:
    """1-indexed page of *items*."""
    start = (page - 1) * page_size
    return items[start : start + page_size]
