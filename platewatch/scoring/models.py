from __future__ import annotations

from pydantic import BaseModel

from ..restaurants.models import Restaurant
from ..votes.models import BallotSummary


class RankedRestaurant(BaseModel):
    restaurant: Restaurant
    rank: int
    total: int
    base_points: int
    community_points: int | None
    user_points: int
    is_top_choice: bool = False
    is_runner_up: bool = False
    is_overall_pick: bool = False


class CategoryRanking(BaseModel):
    category: str
    restaurants: list[RankedRestaurant]


class LeaderboardResponse(BaseModel):
    mode: str
    categories: list[CategoryRanking]
    best_this_week: list[RankedRestaurant]
    summary: BallotSummary


class CategoryPage(BaseModel):
    category: str
    page: int
    page_size: int
    total_restaurants: int
    restaurants: list[RankedRestaurant]
