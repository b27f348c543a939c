from __future__ import annotations

import logging
import time

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import Restaurant, SuggestionRequest, make_restaurant_id

logger = logging.getLogger(__name__)

# Insertion order is the tie-break order for equal scores.
_restaurants: dict[str, Restaurant] | None = None
_suggestions: dict[str, Restaurant] = {}


class RestaurantNotFound(Exception):
    """No restaurant (or suggestion) with the requested id."""
    pass


class DuplicateRestaurant(Exception):
    """A restaurant with the same id or name is already listed."""
    pass


def _load(config: CatalogConfig) -> dict[str, Restaurant]:
    df = pd.read_csv(config.seed_path)
    df["address"] = df["address"].fillna("")
    df["google_maps_uri"] = df["google_maps_uri"].fillna("")
    df["base_points"] = (
        pd.to_numeric(df["base_points"], errors="coerce")
        .fillna(config.default_base_points)
        .astype(int)
    )
    df["rating"] = pd.to_numeric(df["rating"], errors="coerce").fillna(0.0)
    df["user_ratings_total"] = (
        pd.to_numeric(df["user_ratings_total"], errors="coerce").fillna(0).astype(int)
    )

    loaded: dict[str, Restaurant] = {}
    for _, row in df.iterrows():
        rid = make_restaurant_id(row["name"], config.location)
        loaded[rid] = Restaurant(
            id=rid,
            name=row["name"],
            category=row["category"],
            address=row["address"],
            base_points=int(row["base_points"]),
            rating=float(row["rating"]),
            user_ratings_total=int(row["user_ratings_total"]),
            google_maps_uri=row["google_maps_uri"],
            google_place_type=row["google_place_type"] if pd.notna(row["google_place_type"]) else None,
            source="seeded",
        )
    logger.info("Loaded %d seeded restaurants from %s", len(loaded), config.seed_path)
    return loaded


def _store() -> dict[str, Restaurant]:
    global _restaurants
    if _restaurants is None:
        _restaurants = _load(DEFAULT_CATALOG_CONFIG)
    return _restaurants


def get_restaurants() -> list[Restaurant]:
    """Return every listed restaurant, loading the seed file on first call."""
    return list(_store().values())


def get_restaurant(restaurant_id: str) -> Restaurant:
    restaurant = _store().get(restaurant_id)
    if restaurant is None:
        raise RestaurantNotFound(restaurant_id)
    return restaurant


def get_categories() -> list[str]:
    return sorted({r.category for r in _store().values()})


def categories_by_id() -> dict[str, str]:
    return {rid: r.category for rid, r in _store().items()}


def _revise(restaurant: Restaurant, **changes) -> Restaurant:
    """Copy *restaurant* with *changes*, running field validation again."""
    return Restaurant.model_validate({**restaurant.model_dump(), **changes})


def upsert_restaurant(restaurant: Restaurant) -> Restaurant:
    """Add *restaurant*, merging over an existing entry with the same id.

    Category and base points of an existing entry are admin-controlled and
    are kept.
    """
    store = _store()
    existing = store.get(restaurant.id)
    if existing is not None:
        merged = _revise(
            existing, **restaurant.model_dump(exclude={"id", "category", "base_points"})
        )
        store[restaurant.id] = merged
        return merged
    store[restaurant.id] = restaurant
    return restaurant


def recategorize(restaurant_id: str, category: str) -> tuple[Restaurant, str]:
    """Move a restaurant to *category*. Returns ``(restaurant, old_category)``.

    Raises ``pydantic.ValidationError`` for a blank category.
    """
    store = _store()
    restaurant = get_restaurant(restaurant_id)
    old_category = restaurant.category
    updated = _revise(restaurant, category=category)
    store[restaurant_id] = updated
    logger.info("Recategorized %s from %r to %r", restaurant_id, old_category, updated.category)
    return updated, old_category


def set_base_points(restaurant_id: str, points: int) -> Restaurant:
    store = _store()
    updated = _revise(get_restaurant(restaurant_id), base_points=points)
    store[restaurant_id] = updated
    return updated


def delete_restaurant(restaurant_id: str) -> Restaurant:
    store = _store()
    if restaurant_id not in store:
        raise RestaurantNotFound(restaurant_id)
    logger.info("Deleting restaurant %s", restaurant_id)
    return store.pop(restaurant_id)


# ── Suggestions ──────────────────────────────────────────────────────────


def _is_listed(restaurant_id: str, name: str) -> bool:
    name_lower = name.lower()
    return any(
        r.id == restaurant_id or r.name.lower() == name_lower
        for r in _store().values()
    )


def submit_suggestion(
    body: SuggestionRequest,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> Restaurant:
    rid = make_restaurant_id(body.name, config.location)
    if _is_listed(rid, body.name):
        raise DuplicateRestaurant(f'"{body.name}" is already on the leaderboard!')
    suggestion = Restaurant(
        id=rid,
        base_points=config.default_base_points,
        source="user-submitted",
        submitted_at=time.time(),
        **body.model_dump(),
    )
    _suggestions[rid] = suggestion
    return suggestion


def get_suggestions() -> list[Restaurant]:
    return list(_suggestions.values())


def approve_suggestion(restaurant_id: str) -> Restaurant:
    suggestion = _suggestions.pop(restaurant_id, None)
    if suggestion is None:
        raise RestaurantNotFound(restaurant_id)
    return upsert_restaurant(suggestion)


def reject_suggestion(restaurant_id: str) -> None:
    if _suggestions.pop(restaurant_id, None) is None:
        raise RestaurantNotFound(restaurant_id)


def reset_catalog() -> None:
    """Forget all edits; the seed file is reloaded on next access."""
    global _restaurants
    _restaurants = None
    _suggestions.clear()
