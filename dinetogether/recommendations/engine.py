from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import complete_json
from ..places import gateway
from ..places.config import DEFAULT_PLACES_CONFIG, METERS_PER_MILE, PlacesConfig
from ..places.distance import describe_distance
from ..places.models import CandidateRestaurant, PlaceDetails, PlacesResult
from ..places.normalize import (
    extract_menu_highlights,
    filter_and_normalize,
    format_opening_hours,
)
from ..preferences.models import UserPreferences
from . import fallback
from .intent import parse_query
from .models import CustomPreferences, RestaurantRecommendation, price_symbol_for
from .prompts import (
    PICK_SYSTEM_PROMPT,
    SUGGEST_SYSTEM_PROMPT,
    build_custom_message,
    build_search_message,
    build_user_message,
)
from .semantic import rank_by_query

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_MILES = 10.0
USER_FALLBACK_LIMIT = 6
CUSTOM_CANDIDATE_LIMIT = 6
MAX_LLM_RESULTS = 8
MAX_SEARCH_RESULTS = 6
VERIFY_RADIUS_M = 30000.0


class _Pick(BaseModel):
    id: str
    reason: str = ""
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------


def _candidates(
    result: PlacesResult,
    origin: tuple[float, float],
    label: str,
) -> list[CandidateRestaurant]:
    if result.failed:
        logger.warning("Places provider unavailable for %s", label)
    elif not result.places:
        logger.info("Places returned no results for %s", label)
    return filter_and_normalize(result.places, origin)


def _summary(candidate: CandidateRestaurant) -> str:
    rating = f"{candidate.rating}-star" if candidate.rating else "Well-reviewed"
    text = f"{rating} {candidate.cuisine.lower()} spot"
    if candidate.distance_miles is not None:
        text += f" {describe_distance(candidate.distance_miles)}"
    if candidate.review_count:
        text += f" with {candidate.review_count} reviews"
    return text


def _from_candidate(
    candidate: CandidateRestaurant,
    reason: str,
    confidence: float,
    reasons: list[str] | None = None,
    source: str = "fallback",
) -> RestaurantRecommendation:
    return RestaurantRecommendation(
        name=candidate.name,
        cuisine=candidate.cuisine,
        price_range=candidate.price_range,
        estimated_rating=min(max(candidate.rating or 0.0, 0.0), 5.0),
        location=candidate.address,
        reason_for_recommendation=reason,
        confidence_score=confidence,
        reasons=reasons or [],
        place_id=candidate.id,
        address=candidate.address or None,
        distance_miles=candidate.distance_miles,
        business_status=candidate.business_status,
        review_count=candidate.review_count,
        source=source,
    )


# ---------------------------------------------------------------------------
# Place details and verification
# ---------------------------------------------------------------------------


def _apply_details(
    recommendation: RestaurantRecommendation,
    details: PlaceDetails,
) -> RestaurantRecommendation:
    return recommendation.model_copy(update={
        "phone": details.phone,
        "website": details.website,
        "opening_hours": format_opening_hours(details.opening_hours),
        "menu_highlights": extract_menu_highlights(details.reviews),
        "business_status": details.business_status or recommendation.business_status,
        "review_count": details.review_count or recommendation.review_count,
    })


def _with_details(
    recommendations: list[RestaurantRecommendation],
    places_config: PlacesConfig,
) -> list[RestaurantRecommendation]:
    """Attach phone, website, hours and menu highlights where the lookup succeeds."""
    detailed: list[RestaurantRecommendation] = []
    for rec in recommendations:
        details = gateway.get_place_details(rec.place_id, config=places_config) if rec.place_id else None
        detailed.append(_apply_details(rec, details) if details else rec)
    return detailed


def _verify_suggestions(
    recommendations: list[RestaurantRecommendation],
    latitude: float | None,
    longitude: float | None,
    places_config: PlacesConfig,
) -> list[RestaurantRecommendation]:
    """
    Replace free-form LLM suggestions with the real places they name.

    Each name is looked up by text search. A suggestion the provider has no
    (non-chain) match for is dropped; one that could not be checked because
    the provider failed is kept as written. Verified entries keep the model's
    reason and confidence but take name, address and rating from the place.
    """
    if not places_config.api_key:
        return recommendations

    origin = (latitude, longitude) if latitude is not None and longitude is not None else None
    seen: set[str] = set()
    verified: list[RestaurantRecommendation] = []
    for rec in recommendations:
        result = gateway.search_text(
            f"{rec.name} {rec.location}".strip(), latitude, longitude, VERIFY_RADIUS_M,
            config=places_config,
        )
        if result.failed:
            verified.append(rec)
            continue
        matches = filter_and_normalize(result.places, origin)
        if not matches:
            logger.info("Dropping LLM suggestion %r with no matching place", rec.name)
            continue
        candidate = matches[0]
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        match = _from_candidate(
            candidate, rec.reason_for_recommendation, rec.confidence_score, rec.reasons, source="llm",
        )
        if candidate.rating is None:
            match = match.model_copy(update={"estimated_rating": rec.estimated_rating})
        verified.append(match)
    return _with_details(verified, places_config)


# ---------------------------------------------------------------------------
# LLM branch
# ---------------------------------------------------------------------------


def _items(parsed: dict[str, Any]) -> list[dict[str, Any]]:
    value = parsed.get("recommendations")
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _llm_suggest(message: str, config: LLMConfig) -> list[RestaurantRecommendation]:
    """Free-form suggestions, used when there are no live candidates."""
    parsed = complete_json(SUGGEST_SYSTEM_PROMPT, message, config=config, temperature=0.7)
    if parsed is None:
        return []

    recommendations: list[RestaurantRecommendation] = []
    for item in _items(parsed):
        try:
            recommendations.append(
                RestaurantRecommendation.model_validate({**item, "source": "llm"})
            )
        except ValidationError:
            logger.warning("Dropping invalid LLM recommendation %r", item.get("name"))
    return recommendations[:MAX_LLM_RESULTS]


def _llm_pick(
    message: str,
    candidates: list[CandidateRestaurant],
    config: LLMConfig,
) -> list[RestaurantRecommendation]:
    """Ranked subset of the live candidates, with the model's reasons."""
    parsed = complete_json(PICK_SYSTEM_PROMPT, message, config=config, temperature=0.3)
    if parsed is None:
        return []

    by_id = {c.id: c for c in candidates}
    seen: set[str] = set()
    recommendations: list[RestaurantRecommendation] = []
    for item in _items(parsed):
        try:
            pick = _Pick.model_validate(item)
        except ValidationError:
            logger.warning("Dropping invalid LLM pick %r", item.get("id"))
            continue
        candidate = by_id.get(pick.id)
        if candidate is None or pick.id in seen:
            continue
        seen.add(pick.id)
        recommendations.append(_from_candidate(
            candidate,
            pick.reason or _summary(candidate),
            pick.confidence,
            source="llm",
        ))
    return recommendations[:MAX_LLM_RESULTS]


# ---------------------------------------------------------------------------
# Heuristic scoring for custom requests
# ---------------------------------------------------------------------------


def _confidence(candidate: CandidateRestaurant, custom: CustomPreferences) -> float:
    score = 0.5
    rating = candidate.rating or 0.0
    if rating >= 4.0:
        score += 0.2
    if rating >= 4.5:
        score += 0.1
    if candidate.price_range == price_symbol_for(custom.price_range):
        score += 0.15
    reviews = candidate.review_count or 0
    if reviews > 50:
        score += 0.1
    if reviews > 200:
        score += 0.05
    if candidate.business_status == "OPERATIONAL":
        score += 0.1
    return round(min(score, 1.0), 2)


def _reasons(candidate: CandidateRestaurant, custom: CustomPreferences) -> list[str]:
    reasons: list[str] = []
    if (candidate.rating or 0.0) >= 4.0:
        reasons.append(f"Highly rated ({candidate.rating}/5 stars)")
    if candidate.price_range == price_symbol_for(custom.price_range):
        reasons.append(f"Matches your {custom.price_range} budget")
    if custom.food_type and custom.food_type.lower() in candidate.cuisine.lower():
        reasons.append(f"Serves {custom.food_type}")
    if (candidate.review_count or 0) > 100:
        reasons.append(f"Popular choice with {candidate.review_count}+ reviews")
    return reasons[:3]


def _score(candidate: CandidateRestaurant, confidence: float) -> float:
    return 0.7 * confidence + 0.3 * (candidate.rating or 0.0) / 5.0


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------


def generate_restaurant_recommendations(
    preferences: UserPreferences,
    location: str = "current area",
    latitude: float | None = None,
    longitude: float | None = None,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    places_config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> list[RestaurantRecommendation]:
    """
    Personalized recommendations for one user.

    With coordinates, nearby places become the candidate list. The LLM ranks
    them (or suggests restaurants when there are none); without the LLM, or
    when it fails, the best-rated candidates are returned, and without
    candidates a hard-coded regional table is. The result is never empty.
    """
    candidates: list[CandidateRestaurant] = []
    if latitude is not None and longitude is not None:
        result = gateway.search_nearby(
            latitude, longitude, DEFAULT_RADIUS_MILES * METERS_PER_MILE, config=places_config,
        )
        candidates = _candidates(result, (latitude, longitude), "user recommendations")

    if llm_config.active:
        message = build_user_message(preferences, location, candidates)
        if candidates:
            recommendations = _llm_pick(message, candidates, llm_config)
        else:
            recommendations = _verify_suggestions(
                _llm_suggest(message, llm_config), latitude, longitude, places_config,
            )
        if recommendations:
            return recommendations
        logger.info("LLM produced no usable recommendations, using fallback")
    else:
        logger.info("LLM not configured, using fallback recommendations")

    if candidates:
        top = sorted(candidates, key=lambda c: c.rating or 0.0, reverse=True)[:USER_FALLBACK_LIMIT]
        return [_from_candidate(c, _summary(c), fallback.PLACEHOLDER_CONFIDENCE) for c in top]

    cuisine = preferences.preferred_cuisines[0] if preferences.preferred_cuisines else None
    return fallback.regional_recommendations(
        cuisine,
        latitude,
        longitude,
        preferences.location_preference or location,
    )


def _custom_pipeline(
    custom: CustomPreferences,
    history: UserPreferences | None,
    latitude: float | None,
    longitude: float | None,
    audience: str,
    llm_config: LLMConfig,
    places_config: PlacesConfig,
) -> list[RestaurantRecommendation]:
    candidates: list[CandidateRestaurant] = []
    if latitude is not None and longitude is not None:
        radius_m = custom.distance * METERS_PER_MILE
        if custom.food_type:
            result = gateway.search_text(
                f"{custom.food_type} restaurant", latitude, longitude, radius_m, config=places_config,
            )
        else:
            result = gateway.search_nearby(latitude, longitude, radius_m, config=places_config)
        candidates = _candidates(result, (latitude, longitude), f"{audience} custom recommendations")

    if llm_config.active:
        message = build_custom_message(custom, history, candidates, audience)
        if candidates:
            recommendations = _with_details(
                _llm_pick(message, candidates, llm_config)[:MAX_SEARCH_RESULTS], places_config,
            )
        else:
            recommendations = _verify_suggestions(
                _llm_suggest(message, llm_config)[:MAX_SEARCH_RESULTS], latitude, longitude, places_config,
            )
        if recommendations:
            return recommendations
        logger.info("LLM produced no usable %s recommendations, using fallback", audience)

    if candidates:
        scored = [(c, _confidence(c, custom)) for c in candidates]
        scored.sort(key=lambda pair: _score(*pair), reverse=True)
        return _with_details([
            _from_candidate(c, _summary(c), confidence, _reasons(c, custom))
            for c, confidence in scored[:CUSTOM_CANDIDATE_LIMIT]
        ], places_config)

    suffix = f"; a good pick for your group of {custom.group_size}" if audience == "group" else ""
    return fallback.custom_recommendations(
        custom.food_type, custom.price_range, custom.location, reason_suffix=suffix,
    )


def generate_custom_recommendations(
    custom: CustomPreferences,
    history: UserPreferences | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    places_config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> list[RestaurantRecommendation]:
    """One-off search from an explicit preference form."""
    return _custom_pipeline(
        custom, history, latitude, longitude, "user", llm_config, places_config,
    )


def generate_group_recommendations(
    custom: CustomPreferences,
    group_history: UserPreferences,
    latitude: float | None = None,
    longitude: float | None = None,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    places_config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> list[RestaurantRecommendation]:
    """Custom search that weighs the whole group's dining history."""
    return _custom_pipeline(
        custom, group_history, latitude, longitude, "group", llm_config, places_config,
    )


def search_with_natural_language(
    query: str,
    latitude: float,
    longitude: float,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    places_config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> list[RestaurantRecommendation]:
    """
    Free-text search such as "quiet sushi for a date within 5 miles".

    The provider is queried with the parsed ambiance and food type (nearby
    search when neither was found) inside the parsed radius. The raw query
    is kept for the LLM prompt and for semantic ranking.
    """
    custom = parse_query(query, llm_config)
    radius_m = custom.distance * METERS_PER_MILE
    terms = " ".join(t for t in (custom.ambiance, custom.food_type) if t)
    if terms:
        result = gateway.search_text(
            f"{terms} restaurant", latitude, longitude, radius_m, config=places_config,
        )
    else:
        result = gateway.search_nearby(latitude, longitude, radius_m, config=places_config)
    candidates = _candidates(result, (latitude, longitude), "natural language search")

    if llm_config.active and candidates:
        recommendations = _llm_pick(
            build_search_message(query, custom, candidates), candidates, llm_config,
        )
        if recommendations:
            return _with_details(recommendations[:MAX_SEARCH_RESULTS], places_config)
        logger.info("LLM produced no usable search picks, using semantic ranking")

    if candidates:
        return _with_details([
            _from_candidate(c, _summary(c), score)
            for c, score in rank_by_query(query, candidates, MAX_SEARCH_RESULTS)
        ], places_config)

    return fallback.custom_recommendations(custom.food_type, custom.price_range, custom.location)
