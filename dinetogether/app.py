from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import (
    ensure_group_member,
    require_admin,
    require_group_member,
    require_user,
)
from .auth.users import LoginRequest, authenticate
from .enrichment.reviews import enrich_with_external_reviews
from .enrichment.website import WebsiteResolver, get_website_resolver
from .preferences.aggregator import (
    analyze_user_dining_patterns,
    build_group_preferences,
    build_user_preferences,
)
from .preferences.models import (
    AttendanceInput,
    AttendanceRecord,
    DiningAnalysis,
    RatingInput,
    RatingRecord,
    UserPreferences,
)
from .preferences.store import (
    get_group_attendance,
    get_group_ratings,
    get_user_attendance,
    get_user_ratings,
    record_attendance,
    record_rating,
)
from .recommendations.engine import (
    generate_custom_recommendations,
    generate_group_recommendations,
    generate_restaurant_recommendations,
    search_with_natural_language,
)
from .recommendations.models import (
    CustomRecommendationRequest,
    NaturalLanguageSearchRequest,
    RecommendationResponse,
    RestaurantRecommendation,
    WebsiteResponse,
)

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="DineTogether Recommendation API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "dinetogether-secret-change-in-production"),
)


def _user_history(user: dict, location: str | None = None) -> UserPreferences:
    return build_user_preferences(
        user["id"],
        get_user_ratings(user["id"]),
        get_user_attendance(user["id"]),
        location,
    )


def _respond(recommendations: list[RestaurantRecommendation]) -> RecommendationResponse:
    source = "llm" if any(r.source == "llm" for r in recommendations) else "fallback"
    return RecommendationResponse(
        recommendations=enrich_with_external_reviews(recommendations),
        source=source,
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


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


# ── Recommendation endpoints ─────────────────────────────────────────────


@app.get("/recommendations", response_model=RecommendationResponse)
def recommendations(
    location: str | None = Query(default=None, max_length=200),
    lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    lng: float | None = Query(default=None, ge=-180.0, le=180.0),
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    preferences = _user_history(user, location)
    recs = generate_restaurant_recommendations(
        preferences,
        location=location or "current area",
        latitude=lat,
        longitude=lng,
    )
    return _respond(recs)


@app.get("/dining-analysis", response_model=DiningAnalysis)
def dining_analysis(user: dict = Depends(require_user)) -> DiningAnalysis:
    return analyze_user_dining_patterns(_user_history(user))


@app.post("/recommendations/custom", response_model=RecommendationResponse)
def custom_recommendations(
    body: CustomRecommendationRequest,
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    recs = generate_custom_recommendations(
        body,
        history=_user_history(user, body.location),
        latitude=body.latitude,
        longitude=body.longitude,
    )
    return _respond(recs)


@app.post("/recommendations/group/{group_id}/custom", response_model=RecommendationResponse)
def group_recommendations(
    group_id: str,
    body: CustomRecommendationRequest,
    user: dict = Depends(require_group_member),
) -> RecommendationResponse:
    history = build_group_preferences(
        group_id,
        get_group_ratings(group_id),
        get_group_attendance(group_id),
    )
    recs = generate_group_recommendations(
        body,
        history,
        latitude=body.latitude,
        longitude=body.longitude,
    )
    return _respond(recs)


@app.post("/recommendations/search", response_model=RecommendationResponse)
def search(
    body: NaturalLanguageSearchRequest,
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    recs = search_with_natural_language(body.query, body.latitude, body.longitude)
    return _respond(recs)


@app.get("/restaurant-website", response_model=WebsiteResponse)
def restaurant_website(
    name: str = Query(..., min_length=1, max_length=200),
    address: str | None = Query(default=None, max_length=300),
    user: dict = Depends(require_user),
    resolver: WebsiteResolver = Depends(get_website_resolver),
) -> WebsiteResponse:
    return WebsiteResponse(url=resolver.resolve(name, address))


# ── History endpoints ────────────────────────────────────────────────────


@app.post("/history/ratings", response_model=RatingRecord, status_code=201)
def add_rating(body: RatingInput, user: dict = Depends(require_user)) -> RatingRecord:
    if body.group_id:
        ensure_group_member(user, body.group_id)
    record = RatingRecord(**body.model_dump(), user_id=user["id"])
    record_rating(record)
    return record


@app.post("/history/attendance", response_model=AttendanceRecord, status_code=201)
def add_attendance(body: AttendanceInput, user: dict = Depends(require_user)) -> AttendanceRecord:
    if body.group_id:
        ensure_group_member(user, body.group_id)
    record = AttendanceRecord(**body.model_dump(), user_id=user["id"])
    record_attendance(record)
    return record


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats(
    user: dict = Depends(require_admin),
    resolver: WebsiteResolver = Depends(get_website_resolver),
) -> dict:
    return resolver.cache.stats()
