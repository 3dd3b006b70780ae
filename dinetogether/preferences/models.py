from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import Field, field_validator

from ..schemas import CamelModel

PricePreference = Literal["budget", "moderate", "upscale", "fine-dining"]
PriceSensitivity = Literal["budget", "moderate", "premium", "luxury"]
DiningStyle = Literal["casual", "fine-dining", "family-friendly", "trendy", "authentic"]
RsvpStatus = Literal["confirmed", "declined", "maybe", "pending"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken as UTC so history rows stay comparable.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ── Raw history rows ─────────────────────────────────────────────────────


class RatingInput(CamelModel):
    group_id: str | None = None
    restaurant_name: str = Field(..., min_length=1)
    rating: float = Field(..., ge=1.0, le=5.0)
    cuisine: str | None = None
    price_range: str | None = None
    location: str | None = None


class RatingRecord(RatingInput):
    user_id: str
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class AttendanceInput(CamelModel):
    group_id: str | None = None
    event_id: str = Field(..., min_length=1)
    restaurant_name: str = Field(..., min_length=1)
    restaurant_address: str | None = None
    cuisine: str | None = None
    date_time: datetime
    rsvp_status: RsvpStatus = "confirmed"

    @field_validator("date_time")
    @classmethod
    def _date_time_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class AttendanceRecord(AttendanceInput):
    user_id: str


# ── Derived summaries ────────────────────────────────────────────────────


class RatedRestaurant(CamelModel):
    restaurant_name: str
    rating: float
    cuisine: str | None = None
    price_range: str | None = None
    location: str | None = None


class VisitRecord(CamelModel):
    restaurant_name: str
    visit_count: int
    last_visit: datetime
    cuisine: str | None = None


class UserPreferences(CamelModel):
    user_id: str
    rated_restaurants: list[RatedRestaurant] = Field(default_factory=list)
    visit_history: list[VisitRecord] = Field(default_factory=list)
    preferred_cuisines: list[str] = Field(default_factory=list)
    price_preference: PricePreference | None = None
    location_preference: str | None = None


class DiningAnalysis(CamelModel):
    primary_cuisines: list[str] = Field(default_factory=list)
    average_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    price_sensitivity: PriceSensitivity = "moderate"
    adventurousness: float = Field(default=0.5, ge=0.0, le=1.0)
    preferred_dining_style: DiningStyle = "casual"
