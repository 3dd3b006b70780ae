from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class PlaceRecord(BaseModel):
    """A places search hit, independent of which API generation returned it."""

    id: str
    name: str
    primary_type: str | None = None
    price_level: int | None = Field(default=None, ge=0, le=4)
    rating: float | None = None
    review_count: int | None = None
    address: str = ""
    latitude: float | None = None
    longitude: float | None = None
    photo_reference: str | None = None
    business_status: str | None = None


class PlacesResult(BaseModel):
    places: list[PlaceRecord] = Field(default_factory=list)
    status: Literal["ok", "error"] = "ok"
    source: Literal["new", "legacy"] | None = None

    @property
    def failed(self) -> bool:
        return self.status == "error"


class PlaceDetails(BaseModel):
    """Contact, hours and review text for a single place."""

    id: str
    name: str = ""
    address: str = ""
    phone: str | None = None
    website: str | None = None
    opening_hours: list[str] = Field(default_factory=list)
    open_now: bool | None = None
    rating: float | None = None
    review_count: int | None = None
    price_level: int | None = Field(default=None, ge=0, le=4)
    primary_type: str | None = None
    business_status: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    reviews: list[str] = Field(default_factory=list)


class CandidateRestaurant(BaseModel):
    id: str
    name: str
    cuisine: str
    price_range: str
    price_level: int | None = None
    rating: float | None = None
    review_count: int | None = None
    address: str = ""
    photo_reference: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    distance_miles: float | None = None
    business_status: str | None = None
