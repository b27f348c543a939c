from __future__ import annotations

import base64
import re

from pydantic import BaseModel, Field, field_validator

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def make_restaurant_id(name: str, location: str) -> str:
    """Stable id for a restaurant so re-submitting the same place is idempotent."""
    base = f"{name}-{location}".lower().strip()
    encoded = base64.b64encode(base.encode("utf-8")).decode("ascii")
    return _NON_ALNUM.sub("", encoded)[:24]


class Restaurant(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    address: str = ""
    base_points: int = 100
    rating: float = 0.0
    user_ratings_total: int = 0
    google_maps_uri: str = ""
    google_place_type: str | None = None
    source: str = "seeded"
    submitted_at: float | None = None

    @field_validator("category")
    @classmethod
    def _strip_category(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("category must not be blank")
        return value


class SuggestionRequest(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    address: str = ""
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    user_ratings_total: int = Field(default=0, ge=0)
    google_maps_uri: str = ""
    google_place_type: str | None = None


class RestaurantUpdate(BaseModel):
    category: str | None = Field(default=None, min_length=1)
    base_points: int | None = None

    @field_validator("category")
    @classmethod
    def _strip_category(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("category must not be blank")
        return value


class PlaceRecord(BaseModel):
    """A candidate returned by the external places lookup."""

    name: str = Field(..., min_length=1)
    formatted_address: str = ""
    types: list[str] = Field(default_factory=list)
    primary_type: str | None = None
    rating: float | None = None
    user_rating_count: int | None = None
    google_maps_uri: str | None = None
    business_status: str | None = None


class HydrateRequest(BaseModel):
    places: list[PlaceRecord]
    category: str | None = Field(
        default=None, description="Force every place into this category"
    )
