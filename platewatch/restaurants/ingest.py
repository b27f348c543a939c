from __future__ import annotations

import time
from urllib.parse import quote_plus

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import PlaceRecord, Restaurant, make_restaurant_id

FALLBACK_CATEGORY = "Restaurants"

PLACE_TYPE_CATEGORIES: dict[str, str] = {
    "american_restaurant": "American",
    "bakery": "Bakery",
    "bar": "Bars & Pubs",
    "bar_and_grill": "Bars & Pubs",
    "barbecue_restaurant": "BBQ",
    "brazilian_restaurant": "Brazilian",
    "breakfast_restaurant": "Breakfast & Brunch",
    "brunch_restaurant": "Breakfast & Brunch",
    "cafe": "Cafes",
    "chinese_restaurant": "Chinese",
    "coffee_shop": "Coffee Shops",
    "deli": "Delis & Sandwiches",
    "sandwich_shop": "Delis & Sandwiches",
    "dessert_shop": "Dessert",
    "diner": "Diners",
    "fast_food_restaurant": "Fast Food",
    "fine_dining_restaurant": "Fine Dining",
    "hamburger_restaurant": "Best Burgers",
    "ice_cream_shop": "Ice Cream Shops",
    "indian_restaurant": "Indian",
    "italian_restaurant": "Italian",
    "japanese_restaurant": "Japanese",
    "mexican_restaurant": "New Mexican Food",
    "pizza_restaurant": "Best Pizza",
    "ramen_restaurant": "Japanese",
    "seafood_restaurant": "Seafood",
    "steak_house": "Steakhouses",
    "sushi_restaurant": "Sushi",
    "thai_restaurant": "Thai",
    "vegan_restaurant": "Vegetarian & Vegan",
    "vegetarian_restaurant": "Vegetarian & Vegan",
    "vietnamese_restaurant": "Vietnamese",
}

_FOOD_TYPES = set(PLACE_TYPE_CATEGORIES) | {"restaurant", "meal_takeaway", "food"}


def map_place_types_to_category(types: list[str]) -> str:
    """First type with a known category wins."""
    for t in types:
        category = PLACE_TYPE_CATEGORIES.get(t)
        if category:
            return category
    return FALLBACK_CATEGORY


def _is_food_place(place: PlaceRecord) -> bool:
    if place.business_status == "CLOSED_PERMANENTLY":
        return False
    if place.primary_type in _FOOD_TYPES:
        return True
    return any(t in _FOOD_TYPES for t in place.types)


def place_to_restaurant(
    place: PlaceRecord,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    category: str | None = None,
) -> Restaurant | None:
    """Map a lookup result to a Restaurant, or ``None`` if it isn't a food place."""
    if not _is_food_place(place):
        return None

    types = [place.primary_type, *place.types] if place.primary_type else list(place.types)
    address = place.formatted_address or config.location
    maps_uri = place.google_maps_uri or (
        "https://www.google.com/maps/search/" + quote_plus(f"{place.name} {address}")
    )
    return Restaurant(
        id=make_restaurant_id(place.name, config.location),
        name=place.name,
        category=category or map_place_types_to_category(types),
        address=address,
        base_points=config.default_base_points,
        rating=place.rating or 0.0,
        user_ratings_total=place.user_rating_count or 0,
        google_maps_uri=maps_uri,
        google_place_type=types[0] if types else "restaurant",
        source="places-hydrate",
        submitted_at=time.time(),
    )


def places_to_restaurants(
    places: list[PlaceRecord],
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
    category: str | None = None,
) -> list[Restaurant]:
    restaurants: list[Restaurant] = []
    for place in places:
        restaurant = place_to_restaurant(place, config, category)
        if restaurant is not None:
            restaurants.append(restaurant)
    return restaurants
