from __future__ import annotations

import math

EARTH_RADIUS_MILES = 3959.0


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in miles, rounded to one decimal place."""
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlng / 2) ** 2
    )
    distance = 2 * EARTH_RADIUS_MILES * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(distance, 1)


def describe_distance(miles: float) -> str:
    if miles < 0.1:
        return "less than 0.1 miles away"
    if miles == 1.0:
        return "1 mile away"
    return f"{miles} miles away"
