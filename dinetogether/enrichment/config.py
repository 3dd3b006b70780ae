from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class WebsiteCacheConfig:
    max_size: int = int(os.getenv("WEBSITE_CACHE_MAX_SIZE", "1024"))
    ttl_seconds: float = float(os.getenv("WEBSITE_CACHE_TTL", "86400"))


DEFAULT_WEBSITE_CACHE_CONFIG = WebsiteCacheConfig()
