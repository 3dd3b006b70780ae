from __future__ import annotations

import json
import logging
from typing import Iterable

import pandas as pd
from pydantic import ValidationError

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import complete_json
from .models import (
    AttendanceRecord,
    DiningAnalysis,
    RatedRestaurant,
    RatingRecord,
    UserPreferences,
    VisitRecord,
)

logger = logging.getLogger(__name__)

LIKED_RATING = 4.0
MAX_PREFERRED_CUISINES = 5
MAX_PRIMARY_CUISINES = 3

_PRICE_SYMBOL_TO_PREFERENCE = {
    "$": "budget",
    "$$": "moderate",
    "$$$": "upscale",
    "$$$$": "fine-dining",
}

_PREFERENCE_TO_SENSITIVITY = {
    "budget": "budget",
    "moderate": "moderate",
    "upscale": "premium",
    "fine-dining": "luxury",
}

ANALYSIS_SYSTEM_PROMPT = (
    "You are a dining pattern analyst. Analyze user preferences and provide "
    "structured insights.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"primaryCuisines": ["top 3 cuisines"], "averageRating": 4.1, '
    '"priceSensitivity": "budget|moderate|premium|luxury", '
    '"adventurousness": 0.6, '
    '"preferredDiningStyle": "casual|fine-dining|family-friendly|trendy|authentic"}\n'
    "adventurousness is a number between 0 and 1."
)


# ---------------------------------------------------------------------------
# Rows → UserPreferences
# ---------------------------------------------------------------------------


def _ranked(values: pd.Series, limit: int) -> list[str]:
    """Most frequent first; ties keep first-seen order."""
    values = values.dropna()
    values = values[values.astype(str).str.strip() != ""]
    if values.empty:
        return []
    counts = values.value_counts(sort=False).sort_values(ascending=False, kind="stable")
    return [str(v) for v in counts.index[:limit]]


def _visit_history(attendance: list[AttendanceRecord]) -> list[VisitRecord]:
    confirmed = [a for a in attendance if a.rsvp_status == "confirmed"]
    if not confirmed:
        return []

    df = pd.DataFrame([a.model_dump() for a in confirmed])
    # Keyed by the name string: "Joe's Diner" and "Joes Diner" stay separate.
    grouped = (
        df.groupby("restaurant_name", sort=False)
        .agg(
            visit_count=("event_id", "count"),
            last_visit=("date_time", "max"),
            cuisine=("cuisine", "first"),
        )
        .reset_index()
        .sort_values(["visit_count", "last_visit"], ascending=False, kind="stable")
    )

    visits: list[VisitRecord] = []
    for row in grouped.itertuples(index=False):
        visits.append(VisitRecord(
            restaurant_name=row.restaurant_name,
            visit_count=int(row.visit_count),
            last_visit=pd.Timestamp(row.last_visit).to_pydatetime(),
            cuisine=row.cuisine if isinstance(row.cuisine, str) else None,
        ))
    return visits


def _preferred_cuisines(
    ratings: list[RatingRecord],
    visits: list[VisitRecord],
    limit: int = MAX_PREFERRED_CUISINES,
) -> list[str]:
    liked = [r.cuisine for r in ratings if r.rating >= LIKED_RATING]
    visited = [v.cuisine for v in visits for _ in range(v.visit_count)]
    return _ranked(pd.Series(liked + visited, dtype="object"), limit)


def _price_preference(ratings: list[RatingRecord]) -> str | None:
    liked = [r.price_range for r in ratings if r.rating >= LIKED_RATING]
    ranked = _ranked(pd.Series(liked, dtype="object"), 1)
    if not ranked:
        return None
    return _PRICE_SYMBOL_TO_PREFERENCE.get(ranked[0])


def build_user_preferences(
    user_id: str,
    ratings: Iterable[RatingRecord],
    attendance: Iterable[AttendanceRecord],
    location: str | None = None,
) -> UserPreferences:
    """Reduce raw rating and attendance rows into a preference snapshot."""
    ratings = sorted(ratings, key=lambda r: r.created_at, reverse=True)
    visits = _visit_history(list(attendance))

    rated = [
        RatedRestaurant(
            restaurant_name=r.restaurant_name,
            rating=r.rating,
            cuisine=r.cuisine,
            price_range=r.price_range,
            location=r.location,
        )
        for r in ratings
    ]

    return UserPreferences(
        user_id=user_id,
        rated_restaurants=rated,
        visit_history=visits,
        preferred_cuisines=_preferred_cuisines(ratings, visits),
        price_preference=_price_preference(ratings),
        location_preference=location,
    )


def build_group_preferences(
    group_id: str,
    ratings: Iterable[RatingRecord],
    attendance: Iterable[AttendanceRecord],
) -> UserPreferences:
    """Same reduction over every member's rows, identified by the group."""
    return build_user_preferences(f"group:{group_id}", ratings, attendance)


# ---------------------------------------------------------------------------
# UserPreferences → DiningAnalysis
# ---------------------------------------------------------------------------


def _heuristic_analysis(preferences: UserPreferences) -> DiningAnalysis:
    cuisines = [r.cuisine for r in preferences.rated_restaurants]
    cuisines += [v.cuisine for v in preferences.visit_history for _ in range(v.visit_count)]
    ratings = pd.Series([r.rating for r in preferences.rated_restaurants], dtype="float64")
    average = round(float(ratings.mean()), 1) if not ratings.empty else 0.0

    return DiningAnalysis(
        primary_cuisines=_ranked(pd.Series(cuisines, dtype="object"), MAX_PRIMARY_CUISINES),
        average_rating=average,
        price_sensitivity=_PREFERENCE_TO_SENSITIVITY.get(preferences.price_preference or "", "moderate"),
        adventurousness=0.5,
        preferred_dining_style="casual",
    )


def _build_analysis_message(preferences: UserPreferences) -> str:
    rated = [r.model_dump(by_alias=True, exclude_none=True) for r in preferences.rated_restaurants]
    visits = [
        v.model_dump(by_alias=True, exclude_none=True, mode="json")
        for v in preferences.visit_history
    ]
    return (
        "Analyze this user's dining patterns and preferences:\n\n"
        f"Rated Restaurants: {json.dumps(rated)}\n"
        f"Visit History: {json.dumps(visits)}\n"
        f"Preferred Cuisines: {', '.join(preferences.preferred_cuisines)}"
    )


def analyze_user_dining_patterns(
    preferences: UserPreferences,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> DiningAnalysis:
    """
    Summarize a user's dining history.

    Uses the LLM when configured and validates its reply; any failure or
    out-of-range value (e.g. adventurousness outside [0, 1]) falls back to
    a heuristic summary with placeholder style values.
    """
    if not config.active:
        logger.info("LLM not configured, using heuristic dining analysis")
        return _heuristic_analysis(preferences)

    parsed = complete_json(
        ANALYSIS_SYSTEM_PROMPT,
        _build_analysis_message(preferences),
        config=config,
        temperature=0.3,
    )
    if parsed is None:
        return _heuristic_analysis(preferences)

    try:
        return DiningAnalysis.model_validate(parsed)
    except ValidationError:
        logger.warning("LLM dining analysis failed validation, using heuristic", exc_info=True)
        return _heuristic_analysis(preferences)
