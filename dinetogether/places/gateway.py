from __future__ import annotations

import logging
from typing import Any, Callable

import requests

from .config import DEFAULT_PLACES_CONFIG, PlacesConfig
from .models import PlaceDetails, PlaceRecord, PlacesResult

logger = logging.getLogger(__name__)

INCLUDED_TYPES = ["restaurant", "cafe", "bar", "bakery", "meal_takeaway"]

_SEARCH_FIELD_MASK = ",".join(
    f"places.{field}"
    for field in (
        "id",
        "displayName",
        "primaryType",
        "rating",
        "userRatingCount",
        "priceLevel",
        "location",
        "formattedAddress",
        "photos",
        "businessStatus",
    )
)

_DETAILS_FIELD_MASK = ",".join((
    "id",
    "displayName",
    "formattedAddress",
    "nationalPhoneNumber",
    "websiteUri",
    "regularOpeningHours",
    "rating",
    "userRatingCount",
    "businessStatus",
    "priceLevel",
    "primaryType",
    "location",
    "reviews",
))

_LEGACY_DETAILS_FIELDS = ",".join((
    "place_id",
    "name",
    "formatted_address",
    "formatted_phone_number",
    "website",
    "opening_hours",
    "rating",
    "user_ratings_total",
    "business_status",
    "price_level",
    "types",
    "geometry",
    "reviews",
))

_NEW_PRICE_LEVELS = {
    "PRICE_LEVEL_FREE": 0,
    "PRICE_LEVEL_INEXPENSIVE": 1,
    "PRICE_LEVEL_MODERATE": 2,
    "PRICE_LEVEL_EXPENSIVE": 3,
    "PRICE_LEVEL_VERY_EXPENSIVE": 4,
}

_LEGACY_OK_STATUSES = {"OK", "ZERO_RESULTS"}


class PlacesAPIError(RuntimeError):
    """The provider answered, but not with a body we can use."""


# ---------------------------------------------------------------------------
# Response reshaping
# ---------------------------------------------------------------------------


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _first_photo(raw: dict[str, Any], key: str) -> str | None:
    photos = _list(raw.get("photos"))
    return _text(_dict(photos[0]).get(key)) if photos else None


def _legacy_price(value: Any) -> int | None:
    if isinstance(value, int) and 0 <= value <= 4:
        return value
    return None


def _json_object(response: requests.Response) -> dict[str, Any]:
    data = response.json()
    if not isinstance(data, dict):
        raise PlacesAPIError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _parse_new_place(raw: Any) -> PlaceRecord | None:
    raw = _dict(raw)
    name = _text(_dict(raw.get("displayName")).get("text"))
    place_id = _text(raw.get("id"))
    if not (name and place_id):
        return None
    location = _dict(raw.get("location"))
    return PlaceRecord(
        id=place_id,
        name=name,
        primary_type=_text(raw.get("primaryType")),
        price_level=_NEW_PRICE_LEVELS.get(raw.get("priceLevel")) if isinstance(raw.get("priceLevel"), str) else None,
        rating=raw.get("rating"),
        review_count=raw.get("userRatingCount"),
        address=_text(raw.get("formattedAddress")) or "",
        latitude=location.get("latitude"),
        longitude=location.get("longitude"),
        photo_reference=_first_photo(raw, "name"),
        business_status=_text(raw.get("businessStatus")),
    )


def _parse_legacy_place(raw: Any) -> PlaceRecord | None:
    raw = _dict(raw)
    name = _text(raw.get("name"))
    place_id = _text(raw.get("place_id"))
    if not (name and place_id):
        return None
    location = _dict(_dict(raw.get("geometry")).get("location"))
    types = _list(raw.get("types"))
    return PlaceRecord(
        id=place_id,
        name=name,
        primary_type=_text(types[0]) if types else None,
        price_level=_legacy_price(raw.get("price_level")),
        rating=raw.get("rating"),
        review_count=raw.get("user_ratings_total"),
        address=_text(raw.get("vicinity")) or _text(raw.get("formatted_address")) or "",
        latitude=location.get("lat"),
        longitude=location.get("lng"),
        photo_reference=_first_photo(raw, "photo_reference"),
        business_status=_text(raw.get("business_status")),
    )


def _parse_new_details(raw: dict[str, Any], place_id: str) -> PlaceDetails:
    hours = _dict(raw.get("regularOpeningHours"))
    location = _dict(raw.get("location"))
    price = raw.get("priceLevel")
    reviews = [_text(_dict(_dict(r).get("text")).get("text")) for r in _list(raw.get("reviews"))]
    return PlaceDetails(
        id=_text(raw.get("id")) or place_id,
        name=_text(_dict(raw.get("displayName")).get("text")) or "",
        address=_text(raw.get("formattedAddress")) or "",
        phone=_text(raw.get("nationalPhoneNumber")),
        website=_text(raw.get("websiteUri")),
        opening_hours=[d for d in _list(hours.get("weekdayDescriptions")) if isinstance(d, str)],
        open_now=hours.get("openNow") if isinstance(hours.get("openNow"), bool) else None,
        rating=raw.get("rating"),
        review_count=raw.get("userRatingCount"),
        price_level=_NEW_PRICE_LEVELS.get(price) if isinstance(price, str) else None,
        primary_type=_text(raw.get("primaryType")),
        business_status=_text(raw.get("businessStatus")),
        latitude=location.get("latitude"),
        longitude=location.get("longitude"),
        reviews=[r for r in reviews if r],
    )


def _parse_legacy_details(raw: dict[str, Any], place_id: str) -> PlaceDetails:
    hours = _dict(raw.get("opening_hours"))
    location = _dict(_dict(raw.get("geometry")).get("location"))
    types = _list(raw.get("types"))
    reviews = [_text(_dict(r).get("text")) for r in _list(raw.get("reviews"))]
    return PlaceDetails(
        id=_text(raw.get("place_id")) or place_id,
        name=_text(raw.get("name")) or "",
        address=_text(raw.get("formatted_address")) or "",
        phone=_text(raw.get("formatted_phone_number")),
        website=_text(raw.get("website")),
        opening_hours=[d for d in _list(hours.get("weekday_text")) if isinstance(d, str)],
        open_now=hours.get("open_now") if isinstance(hours.get("open_now"), bool) else None,
        rating=raw.get("rating"),
        review_count=raw.get("user_ratings_total"),
        price_level=_legacy_price(raw.get("price_level")),
        primary_type=_text(types[0]) if types else None,
        business_status=_text(raw.get("business_status")),
        latitude=location.get("lat"),
        longitude=location.get("lng"),
        reviews=[r for r in reviews if r],
    )


# ---------------------------------------------------------------------------
# Raw calls (raise on failure)
# ---------------------------------------------------------------------------


def _new_headers(config: PlacesConfig, field_mask: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Goog-Api-Key": config.api_key,
        "X-Goog-FieldMask": field_mask,
    }


def _post_new(path: str, body: dict[str, Any], config: PlacesConfig) -> list[PlaceRecord]:
    response = requests.post(
        f"{config.base_url}/{path}",
        json=body,
        headers=_new_headers(config, _SEARCH_FIELD_MASK),
        timeout=config.timeout,
    )
    response.raise_for_status()
    data = _json_object(response)
    places = [_parse_new_place(p) for p in _list(data.get("places"))]
    return [p for p in places if p is not None]


def _get_legacy_json(endpoint: str, params: dict[str, Any], config: PlacesConfig) -> dict[str, Any]:
    response = requests.get(
        f"{config.legacy_base_url}/{endpoint}/json",
        params={**params, "key": config.api_key},
        timeout=config.timeout,
    )
    response.raise_for_status()
    data = _json_object(response)
    status = data.get("status", "")
    if status not in _LEGACY_OK_STATUSES:
        raise PlacesAPIError(f"legacy {endpoint} returned status {status}")
    return data


def _get_legacy(endpoint: str, params: dict[str, Any], config: PlacesConfig) -> list[PlaceRecord]:
    data = _get_legacy_json(endpoint, params, config)
    places = [_parse_legacy_place(p) for p in _list(data.get("results"))]
    return [p for p in places if p is not None][: config.max_results]


def _search_with_fallback(
    label: str,
    new_call: Callable[[], list[PlaceRecord]],
    legacy_call: Callable[[], list[PlaceRecord]],
    config: PlacesConfig,
) -> PlacesResult:
    if not config.api_key:
        logger.info("GOOGLE_MAPS_API_KEY not configured, skipping %s", label)
        return PlacesResult(status="error")

    try:
        return PlacesResult(places=new_call(), status="ok", source="new")
    except Exception:
        logger.warning("Places API %s failed, retrying with legacy API", label, exc_info=True)

    try:
        return PlacesResult(places=legacy_call(), status="ok", source="legacy")
    except Exception:
        logger.warning("Legacy Places API %s failed", label, exc_info=True)
        return PlacesResult(status="error")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def search_nearby(
    latitude: float,
    longitude: float,
    radius_m: float,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> PlacesResult:
    """Restaurants within ``radius_m`` meters of a point."""
    # The new API rejects circles wider than 50 km.
    radius_m = min(float(radius_m), 50000.0)
    body = {
        "includedTypes": INCLUDED_TYPES,
        "maxResultCount": config.max_results,
        "locationRestriction": {
            "circle": {
                "center": {"latitude": latitude, "longitude": longitude},
                "radius": radius_m,
            },
        },
    }
    params = {
        "location": f"{latitude},{longitude}",
        "radius": int(radius_m),
        "type": "restaurant",
    }
    return _search_with_fallback(
        "nearby search",
        lambda: _post_new("places:searchNearby", body, config),
        lambda: _get_legacy("nearbysearch", params, config),
        config,
    )


def search_text(
    query: str,
    latitude: float | None = None,
    longitude: float | None = None,
    radius_m: float = 30000.0,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> PlacesResult:
    """Free-text place search, biased toward a point when one is given."""
    radius_m = min(float(radius_m), 50000.0)
    body: dict[str, Any] = {"textQuery": query, "maxResultCount": config.max_results}
    params: dict[str, Any] = {"query": query}
    if latitude is not None and longitude is not None:
        body["locationBias"] = {
            "circle": {
                "center": {"latitude": latitude, "longitude": longitude},
                "radius": radius_m,
            },
        }
        params["location"] = f"{latitude},{longitude}"
        params["radius"] = int(radius_m)
    return _search_with_fallback(
        "text search",
        lambda: _post_new("places:searchText", body, config),
        lambda: _get_legacy("textsearch", params, config),
        config,
    )


def get_place_details(
    place_id: str,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> PlaceDetails | None:
    """
    Phone, website, opening hours and review text for one place.

    Same two-tier strategy as the searches. Returns ``None`` when the key is
    missing or both tiers fail; never raises.
    """
    if not config.api_key:
        return None

    try:
        response = requests.get(
            f"{config.base_url}/places/{place_id}",
            headers=_new_headers(config, _DETAILS_FIELD_MASK),
            timeout=config.timeout,
        )
        response.raise_for_status()
        return _parse_new_details(_json_object(response), place_id)
    except Exception:
        logger.warning("Place details failed for %s, retrying with legacy API", place_id, exc_info=True)

    try:
        data = _get_legacy_json(
            "details", {"place_id": place_id, "fields": _LEGACY_DETAILS_FIELDS}, config,
        )
        return _parse_legacy_details(_dict(data.get("result")), place_id)
    except Exception:
        logger.warning("Legacy place details failed for %s", place_id, exc_info=True)
        return None


def find_website(
    name: str,
    address: str | None = None,
    config: PlacesConfig = DEFAULT_PLACES_CONFIG,
) -> str | None:
    """The website a restaurant lists on its Places profile, or ``None``."""
    query = f"{name} {address}".strip() if address else name
    result = search_text(query, config=config)
    if not result.places:
        return None
    details = get_place_details(result.places[0].id, config)
    return details.website if details else None
