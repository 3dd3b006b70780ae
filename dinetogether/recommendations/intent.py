from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import complete_json
from .models import CustomPreferences
from .prompts import PARSE_QUERY_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

_PRICE_KEYWORDS: dict[str, str] = {
    "cheap": "budget",
    "budget": "budget",
    "inexpensive": "budget",
    "affordable": "budget",
    "moderate": "moderate",
    "mid-range": "moderate",
    "mid range": "moderate",
    "upscale": "upscale",
    "expensive": "upscale",
    "fancy": "upscale",
    "fine dining": "fine-dining",
    "luxury": "fine-dining",
    "splurge": "fine-dining",
}

_FOOD_TYPES = [
    "italian", "pizza", "mexican", "tacos", "chinese", "japanese", "sushi",
    "thai", "vietnamese", "korean", "indian", "french", "greek",
    "mediterranean", "seafood", "steakhouse", "steak", "barbecue", "bbq",
    "burgers", "american", "vegetarian", "vegan", "brunch",
]

_OCCASIONS: dict[str, str] = {
    "date": "date night",
    "anniversary": "celebration",
    "birthday": "celebration",
    "celebrat": "celebration",
    "business": "business meeting",
    "work lunch": "business meeting",
    "family": "family dinner",
    "friends": "casual dining",
}

_AMBIANCES = ["romantic", "casual", "quiet", "lively", "cozy", "upscale", "outdoor", "rooftop"]

_DIETARY = ["vegetarian", "vegan", "gluten-free", "gluten free", "halal", "kosher", "dairy-free"]

_DISTANCE_RE = re.compile(r"within\s+(\d+(?:\.\d+)?)\s*(?:mi|miles?)\b", re.IGNORECASE)
_GROUP_RE = re.compile(r"(?:group of|party of|for)\s+(\d{1,2})\b|(\d{1,2})\s+(?:people|of us|guests)", re.IGNORECASE)


def _first_match(lower: str, keywords: dict[str, str]) -> str | None:
    for keyword, value in keywords.items():
        if keyword in lower:
            return value
    return None


def parse_query_keywords(query: str) -> CustomPreferences:
    """Keyword-table parse used when the LLM is unavailable."""
    lower = query.lower()

    food_type = next((f for f in _FOOD_TYPES if f in lower), "")
    ambiance = next((a for a in _AMBIANCES if a in lower), "")
    dietary = sorted({d.replace(" ", "-") for d in _DIETARY if d in lower})

    distance = 10.0
    match = _DISTANCE_RE.search(query)
    if match:
        distance = min(max(float(match.group(1)), 0.5), 30.0)

    group_size = 2
    match = _GROUP_RE.search(query)
    if match:
        group_size = max(1, int(match.group(1) or match.group(2)))

    return CustomPreferences(
        food_type=food_type.title(),
        price_range=_first_match(lower, _PRICE_KEYWORDS) or "moderate",
        group_size=group_size,
        occasion=_first_match(lower, _OCCASIONS) or "",
        ambiance=ambiance,
        dietary_restrictions=dietary,
        distance=distance,
    )


def parse_query(query: str, config: LLMConfig = DEFAULT_LLM_CONFIG) -> CustomPreferences:
    """Natural-language query → ``CustomPreferences``, LLM first, keywords second."""
    parsed = complete_json(
        PARSE_QUERY_SYSTEM_PROMPT, query, config=config, temperature=0.1, max_tokens=256,
    )
    if parsed is None:
        return parse_query_keywords(query)

    # The model writes null for fields it could not infer.
    cleaned = {k: v for k, v in parsed.items() if v is not None}
    try:
        return CustomPreferences.model_validate(cleaned)
    except ValidationError:
        logger.warning("LLM query parse failed validation, using keyword parse", exc_info=True)
        return parse_query_keywords(query)
