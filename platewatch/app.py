from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_vote_analytics
from .auth.dependencies import get_current_user, require_admin, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .restaurants import catalog
from .restaurants.catalog import DuplicateRestaurant, RestaurantNotFound
from .restaurants.config import DEFAULT_CATALOG_CONFIG
from .restaurants.ingest import places_to_restaurants
from .restaurants.models import (
    HydrateRequest,
    Restaurant,
    RestaurantUpdate,
    SuggestionRequest,
)
from .scoring.compositor import score_breakdown
from .scoring.models import (
    CategoryPage,
    CategoryRanking,
    LeaderboardResponse,
    RankedRestaurant,
)
from .scoring.ranking import (
    group_and_rank,
    make_search_filter,
    paginate,
    select_categories,
    top_n,
)
from .sync.aggregate import get_sync
from .votes import log as vote_log
from .votes.models import (
    CategoryVoteRequest,
    OverallVoteRequest,
    UserVoteRecord,
    VoteResponse,
    VoteTransition,
)
from .votes.service import (
    ballot_summary,
    cast_category_vote,
    cast_overall_vote,
    load_ballot,
    retract_ballot,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    sync = get_sync()
    sync.start()
    yield
    await sync.stop()


app = FastAPI(title="Plate Watchers Leaderboard API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "platewatch-secret-change-in-production"),
)


def _ranked(
    restaurants: list[Restaurant],
    record: UserVoteRecord,
    snapshot: dict[str, int] | None,
    start_rank: int = 1,
) -> list[RankedRestaurant]:
    items: list[RankedRestaurant] = []
    for position, restaurant in enumerate(restaurants, start=start_rank):
        breakdown = score_breakdown(restaurant, record, snapshot)
        vote = record.category_votes.get(restaurant.category)
        items.append(RankedRestaurant(
            restaurant=restaurant,
            rank=position,
            total=breakdown["total"],
            base_points=breakdown["base"],
            community_points=breakdown["community"],
            user_points=breakdown["user"],
            is_top_choice=vote is not None and vote.top_id == restaurant.id,
            is_runner_up=vote is not None and vote.runner_up_id == restaurant.id,
            is_overall_pick=record.overall_top_pick == restaurant.id,
        ))
    return items


def _vote_response(transition: VoteTransition, user: dict | None) -> VoteResponse:
    return VoteResponse(
        record=transition.record,
        deltas=[d.to_dict() for d in transition.deltas],
        summary=ballot_summary(transition.record, user),
    )


def _not_found(restaurant_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Restaurant {restaurant_id} not found")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return {
        "location": DEFAULT_CATALOG_CONFIG.location,
        "categories": catalog.get_categories(),
        "restaurant_count": len(catalog.get_restaurants()),
    }


@app.get("/sync/status")
def sync_status() -> dict:
    return get_sync().status()


@app.get("/leaderboard", response_model=LeaderboardResponse)
def leaderboard(
    request: Request,
    q: str | None = None,
    categories: list[str] | None = Query(default=None),
    top: int = Query(default=DEFAULT_CATALOG_CONFIG.best_this_week_size, ge=0, le=50),
    user: dict | None = Depends(get_current_user),
) -> LeaderboardResponse:
    sync = get_sync()
    snapshot = sync.snapshot()
    record = load_ballot(request.session, user)
    restaurants = catalog.get_restaurants()
    predicate = make_search_filter(q)

    grouped = select_categories(
        group_and_rank(restaurants, record, snapshot, predicate), categories,
    )
    best = top_n(restaurants, record, snapshot, top, predicate)

    return LeaderboardResponse(
        mode=sync.status()["mode"],
        categories=[
            CategoryRanking(category=name, restaurants=_ranked(items, record, snapshot))
            for name, items in grouped.items()
        ],
        best_this_week=_ranked(best, record, snapshot),
        summary=ballot_summary(record, user),
    )


@app.get("/leaderboard/{category}", response_model=CategoryPage)
def category_leaderboard(
    category: str,
    request: Request,
    q: str | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    user: dict | None = Depends(get_current_user),
) -> CategoryPage:
    if category not in catalog.get_categories():
        raise HTTPException(status_code=404, detail=f"Unknown category: {category}")

    snapshot = get_sync().snapshot()
    record = load_ballot(request.session, user)
    grouped = group_and_rank(catalog.get_restaurants(), record, snapshot, make_search_filter(q))
    ranked = grouped.get(category, [])

    return CategoryPage(
        category=category,
        page=page,
        page_size=page_size,
        total_restaurants=len(ranked),
        restaurants=_ranked(
            paginate(ranked, page, page_size), record, snapshot,
            start_rank=(page - 1) * page_size + 1,
        ),
    )


@app.get("/restaurants")
def all_restaurants(q: str | None = None) -> dict:
    predicate = make_search_filter(q)
    restaurants = [r for r in catalog.get_restaurants() if predicate is None or predicate(r)]
    restaurants.sort(key=lambda r: (r.category.lower(), r.name.lower()))
    return {"total": len(restaurants), "restaurants": restaurants}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Voting ───────────────────────────────────────────────────────────────
# Vote handlers are coroutines so every ballot change runs on the event loop
# one at a time. Tally pushes run after the response as background tasks.


@app.get("/votes/me")
def my_votes(request: Request, user: dict | None = Depends(get_current_user)) -> dict:
    record = load_ballot(request.session, user)
    return {"record": record, "summary": ballot_summary(record, user)}


@app.post("/votes/category", response_model=VoteResponse)
async def vote_category(
    body: CategoryVoteRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    user: dict | None = Depends(get_current_user),
) -> VoteResponse:
    try:
        transition = cast_category_vote(request.session, user, body.restaurant_id, body.slot)
    except RestaurantNotFound:
        raise _not_found(body.restaurant_id)

    if user:
        background_tasks.add_task(get_sync().push_many, transition.deltas)
    return _vote_response(transition, user)


@app.post("/votes/overall", response_model=VoteResponse)
async def vote_overall(
    body: OverallVoteRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    user: dict | None = Depends(get_current_user),
) -> VoteResponse:
    try:
        transition = cast_overall_vote(request.session, user, body.restaurant_id)
    except RestaurantNotFound:
        raise _not_found(body.restaurant_id)

    if user:
        background_tasks.add_task(get_sync().push_many, transition.deltas)
    return _vote_response(transition, user)


@app.delete("/votes/me")
async def delete_my_votes(
    request: Request,
    background_tasks: BackgroundTasks,
    user: dict | None = Depends(get_current_user),
) -> dict:
    deltas = retract_ballot(request.session, user)
    if user:
        background_tasks.add_task(get_sync().push_many, deltas)
        logger.info("Deleted all votes for %s", user["username"])
    return {"status": "deleted", "retracted": [d.to_dict() for d in deltas]}


@app.post("/suggestions")
def suggest(body: SuggestionRequest, user: dict = Depends(require_user)) -> dict:
    try:
        suggestion = catalog.submit_suggestion(body)
    except DuplicateRestaurant as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"status": "pending", "suggestion": suggestion}


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/admin/suggestions")
def list_suggestions(user: dict = Depends(require_admin)) -> list[Restaurant]:
    return catalog.get_suggestions()


@app.post("/admin/suggestions/{restaurant_id}/approve")
async def approve_suggestion(restaurant_id: str, user: dict = Depends(require_admin)) -> Restaurant:
    try:
        restaurant = catalog.approve_suggestion(restaurant_id)
    except RestaurantNotFound:
        raise _not_found(restaurant_id)
    await get_sync().catalog_loaded()
    return restaurant


@app.delete("/admin/suggestions/{restaurant_id}")
def reject_suggestion(restaurant_id: str, user: dict = Depends(require_admin)) -> dict:
    try:
        catalog.reject_suggestion(restaurant_id)
    except RestaurantNotFound:
        raise _not_found(restaurant_id)
    return {"status": "rejected"}


@app.post("/admin/hydrate")
async def hydrate(body: HydrateRequest, user: dict = Depends(require_admin)) -> dict:
    restaurants = places_to_restaurants(body.places, category=body.category)
    for restaurant in restaurants:
        catalog.upsert_restaurant(restaurant)
    await get_sync().catalog_loaded()
    logger.info("Hydrated %d of %d places", len(restaurants), len(body.places))
    return {
        "saved": len(restaurants),
        "skipped": len(body.places) - len(restaurants),
        "categories": sorted({r.category for r in restaurants}),
    }


@app.patch("/admin/restaurants/{restaurant_id}")
async def update_restaurant(
    restaurant_id: str,
    body: RestaurantUpdate,
    user: dict = Depends(require_admin),
) -> dict:
    try:
        restaurant = catalog.get_restaurant(restaurant_id)
    except RestaurantNotFound:
        raise _not_found(restaurant_id)

    purged: list[dict] = []
    stale_points = 0
    if body.category is not None and body.category != restaurant.category:
        # Votes are scoped to (restaurant, category): the old ones must go.
        restaurant, old_category = catalog.recategorize(restaurant_id, body.category)
        purged = vote_log.purge_restaurant(restaurant_id, old_category)
        stale_points = get_sync().last_known().get(restaurant_id, 0)
        await get_sync().catalog_loaded()

    if body.base_points is not None and body.base_points != restaurant.base_points:
        restaurant = catalog.set_base_points(restaurant_id, body.base_points)

    return {
        "restaurant": restaurant,
        "purged_votes": len(purged),
        "stale_community_points": stale_points,
    }


@app.delete("/admin/restaurants/{restaurant_id}")
async def delete_restaurant(restaurant_id: str, user: dict = Depends(require_admin)) -> dict:
    try:
        catalog.delete_restaurant(restaurant_id)
    except RestaurantNotFound:
        raise _not_found(restaurant_id)
    purged = vote_log.purge_restaurant(restaurant_id)
    sync = get_sync()
    await sync.reset(restaurant_id)
    await sync.catalog_loaded()
    return {"status": "deleted", "purged_votes": len(purged)}


@app.get("/admin/standings")
def standings(user: dict = Depends(require_admin)) -> dict:
    sync = get_sync()
    tally = sync.last_known()
    ranked = top_n(
        catalog.get_restaurants(), UserVoteRecord(), tally,
        DEFAULT_CATALOG_CONFIG.standings_size,
    )
    return {
        "mode": sync.status()["mode"],
        "standings": _ranked(ranked, UserVoteRecord(), tally),
    }


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    names = {r.id: r.name for r in catalog.get_restaurants()}
    return compute_vote_analytics(vote_log.get_votes(), names)
