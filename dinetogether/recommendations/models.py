from __future__ import annotations

from typing import Literal

from pydantic import Field

from ..schemas import CamelModel

PRICE_RANGE_SYMBOLS = {
    "budget": "$",
    "moderate": "$$",
    "upscale": "$$$",
}
TOP_PRICE_SYMBOL = "$$$$"


def price_symbol_for(price_range: str) -> str:
    """budget → $, moderate → $$, upscale → $$$, anything else → $$$$."""
    return PRICE_RANGE_SYMBOLS.get(price_range.strip().lower(), TOP_PRICE_SYMBOL)


class ExternalRating(CamelModel):
    google: float | None = None
    yelp: float | None = None


class RestaurantRecommendation(CamelModel):
    name: str = Field(..., min_length=1)
    cuisine: str = "Restaurant"
    price_range: str = "$$"
    estimated_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    location: str = ""
    reason_for_recommendation: str = ""
    confidence_score: float = Field(default=0.5, ge=0.0, le=1.0)
    external_rating: ExternalRating | None = None
    reasons: list[str] = Field(default_factory=list)
    place_id: str | None = None
    address: str | None = None
    distance_miles: float | None = None
    phone: str | None = None
    website: str | None = None
    opening_hours: str | None = None
    menu_highlights: list[str] = Field(default_factory=list)
    business_status: str | None = None
    review_count: int | None = None
    source: Literal["llm", "fallback"] = "fallback"


class CustomPreferences(CamelModel):
    food_type: str = ""
    price_range: str = "moderate"
    group_size: int = Field(default=2, ge=1, le=100)
    occasion: str = ""
    ambiance: str = ""
    dietary_restrictions: list[str] = Field(default_factory=list)
    location: str | None = None
    distance: float = Field(default=10.0, gt=0.0, le=30.0, description="Search radius in miles")


# ── Route payloads ───────────────────────────────────────────────────────


class CustomRecommendationRequest(CustomPreferences):
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)


class NaturalLanguageSearchRequest(CamelModel):
    query: str = Field(..., min_length=1, max_length=500)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class RecommendationResponse(CamelModel):
    recommendations: list[RestaurantRecommendation]
    source: Literal["llm", "fallback"]


class WebsiteResponse(CamelModel):
    url: str
