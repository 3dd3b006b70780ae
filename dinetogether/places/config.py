from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class PlacesConfig:
    api_key: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    base_url: str = "https://places.googleapis.com/v1"
    legacy_base_url: str = "https://maps.googleapis.com/maps/api/place"
    timeout: float = float(os.getenv("PLACES_TIMEOUT", "10"))
    max_results: int = 20


DEFAULT_PLACES_CONFIG = PlacesConfig()

METERS_PER_MILE = 1609.34
