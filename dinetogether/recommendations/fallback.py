"""
Static recommendation tables.

Used when neither the LLM nor live places data is available. Ratings and
confidence values here are placeholders, not measurements.
"""
from __future__ import annotations

from .models import RestaurantRecommendation, price_symbol_for

# Rough bounding box for the state of Wisconsin.
_WISCONSIN_BOX = {"lat": (42.49, 47.31), "lng": (-92.89, -86.25)}
_WISCONSIN_NAMES = ("wisconsin", "madison", "milwaukee", "green bay", ", wi")

PLACEHOLDER_CONFIDENCE = 0.6

# region → cuisine key → (name, cuisine, price, rating, location, reason)
REGIONAL_TABLE: dict[str, dict[str, list[tuple[str, str, str, float, str, str]]]] = {
    "wisconsin": {
        "italian": [
            ("Capitol Square Trattoria", "Italian", "$$", 4.5, "Madison, WI", "Handmade pasta a short walk from the Capitol"),
            ("Third Ward Osteria", "Italian", "$$$", 4.6, "Milwaukee, WI", "Wood-fired dishes in the Historic Third Ward"),
            ("Lakeshore Pizzeria", "Italian", "$", 4.3, "Madison, WI", "Neighborhood pizza with a loyal local following"),
        ],
        "mexican": [
            ("Cesar Chavez Taqueria", "Mexican", "$", 4.4, "Milwaukee, WI", "Street-style tacos on the south side"),
            ("Willy Street Cantina", "Mexican", "$$", 4.3, "Madison, WI", "Regional Mexican plates and a busy patio"),
            ("Fox River Cocina", "Mexican", "$$", 4.2, "Green Bay, WI", "Family-run kitchen known for its mole"),
        ],
        "default": [
            ("Lakeside Supper Club", "American", "$$$", 4.6, "Madison, WI", "Classic Wisconsin supper club with a Friday fish fry"),
            ("Old World Beer Hall", "German", "$$", 4.4, "Milwaukee, WI", "Bratwurst, pretzels and a long local beer list"),
            ("Curd & Crust", "American", "$", 4.3, "Madison, WI", "Fried cheese curds and smash burgers"),
            ("North Woods Grill", "American", "$$", 4.2, "Green Bay, WI", "Walleye and steaks in a lodge setting"),
        ],
    },
    "default": {
        "italian": [
            ("Via Roma Trattoria", "Italian", "$$", 4.5, "Downtown", "Fresh pasta and a warm, casual dining room"),
            ("Osteria Lucia", "Italian", "$$$", 4.6, "Midtown", "Seasonal Italian menu for special occasions"),
            ("Slice & Basil", "Italian", "$", 4.2, "Downtown", "Quick Neapolitan-style pizza"),
        ],
        "mexican": [
            ("La Palma Cocina", "Mexican", "$$", 4.4, "Downtown", "Regional Mexican dishes and fresh tortillas"),
            ("Taqueria El Sol", "Mexican", "$", 4.3, "Eastside", "Fast, affordable tacos with house salsas"),
            ("Agave Kitchen", "Mexican", "$$", 4.2, "Midtown", "Modern Mexican small plates"),
        ],
        "asian": [
            ("Golden Lotus", "Chinese", "$$", 4.3, "Downtown", "Dim sum and Cantonese classics"),
            ("Sakura House", "Japanese", "$$$", 4.6, "Midtown", "Omakase-style sushi counter"),
            ("Saigon Corner", "Vietnamese", "$", 4.4, "Eastside", "Pho and banh mi at everyday prices"),
        ],
        "default": [
            ("The Common Table", "American", "$$", 4.4, "Downtown", "Shareable plates suited to groups"),
            ("Harbor Grill", "Seafood", "$$$", 4.5, "Waterfront", "Fresh seafood with a view"),
            ("Maple Street Bistro", "French", "$$", 4.3, "Midtown", "Relaxed bistro with a seasonal menu"),
            ("Spice Route", "Indian", "$$", 4.4, "Eastside", "Regional Indian curries and tandoor dishes"),
        ],
    },
}

_CUISINE_ALIASES = {
    "italian": ("italian", "pizza", "pasta"),
    "mexican": ("mexican", "taco", "latin"),
    "asian": ("asian", "chinese", "japanese", "sushi", "thai", "vietnamese", "korean"),
}

# food type key → (name, cuisine, rating, description); 3 or 4 entries each.
CUSTOM_TABLE: dict[str, list[tuple[str, str, float, str]]] = {
    "italian": [
        ("Via Roma Trattoria", "Italian", 4.5, "Fresh pasta and a warm dining room"),
        ("Osteria Lucia", "Italian", 4.6, "Seasonal Italian menu with a strong wine list"),
        ("Slice & Basil", "Italian", 4.2, "Neapolitan-style pizza baked to order"),
    ],
    "mexican": [
        ("La Palma Cocina", "Mexican", 4.4, "Regional Mexican dishes and fresh tortillas"),
        ("Taqueria El Sol", "Mexican", 4.3, "Tacos with house-made salsas"),
        ("Agave Kitchen", "Mexican", 4.2, "Modern Mexican small plates"),
        ("Casa Verde", "Mexican", 4.1, "Relaxed spot for enchiladas and margaritas"),
    ],
    "asian": [
        ("Golden Lotus", "Chinese", 4.3, "Dim sum and Cantonese classics"),
        ("Sakura House", "Japanese", 4.6, "Sushi counter with a seasonal menu"),
        ("Saigon Corner", "Vietnamese", 4.4, "Pho and banh mi"),
        ("Bangkok Garden", "Thai", 4.3, "Curries and noodle dishes with adjustable heat"),
    ],
    "indian": [
        ("Spice Route", "Indian", 4.4, "Regional curries and tandoor dishes"),
        ("Masala House", "Indian", 4.3, "Family-style thalis with vegetarian options"),
        ("Chaat Corner", "Indian", 4.2, "Street snacks and small plates"),
    ],
    "american": [
        ("The Common Table", "American", 4.4, "Shareable plates suited to groups"),
        ("Smokehouse 54", "Barbecue", 4.5, "Slow-smoked brisket and ribs"),
        ("Burger Lab", "American", 4.2, "Smash burgers and hand-cut fries"),
    ],
    "default": [
        ("The Common Table", "American", 4.4, "Shareable plates suited to groups"),
        ("Harbor Grill", "Seafood", 4.5, "Fresh seafood with a view"),
        ("Maple Street Bistro", "French", 4.3, "Relaxed bistro with a seasonal menu"),
        ("Spice Route", "Indian", 4.4, "Regional curries and tandoor dishes"),
    ],
}

_CUSTOM_ALIASES = {
    **_CUISINE_ALIASES,
    "indian": ("indian", "curry"),
    "american": ("american", "burger", "bbq", "barbecue", "steak", "diner"),
}


def _cuisine_key(value: str | None, aliases: dict[str, tuple[str, ...]], table: dict) -> str:
    lower = (value or "").lower()
    for key, words in aliases.items():
        if key in table and any(word in lower for word in words):
            return key
    return "default"


def region_for(
    latitude: float | None = None,
    longitude: float | None = None,
    location: str | None = None,
) -> str:
    """Coarse geographic bucket: ``"wisconsin"`` or ``"default"``."""
    if latitude is not None and longitude is not None:
        lat_lo, lat_hi = _WISCONSIN_BOX["lat"]
        lng_lo, lng_hi = _WISCONSIN_BOX["lng"]
        if lat_lo <= latitude <= lat_hi and lng_lo <= longitude <= lng_hi:
            return "wisconsin"
    lower = (location or "").lower()
    if any(name in lower for name in _WISCONSIN_NAMES):
        return "wisconsin"
    return "default"


def regional_recommendations(
    cuisine: str | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    location: str | None = None,
) -> list[RestaurantRecommendation]:
    """Never empty: every region has a ``default`` list."""
    region = REGIONAL_TABLE[region_for(latitude, longitude, location)]
    rows = region[_cuisine_key(cuisine, _CUISINE_ALIASES, region)]
    return [
        RestaurantRecommendation(
            name=name,
            cuisine=row_cuisine,
            price_range=price,
            estimated_rating=rating,
            location=row_location,
            reason_for_recommendation=reason,
            confidence_score=PLACEHOLDER_CONFIDENCE,
            source="fallback",
        )
        for name, row_cuisine, price, rating, row_location, reason in rows
    ]


def custom_recommendations(
    food_type: str,
    price_range: str,
    location: str | None = None,
    reason_suffix: str = "",
) -> list[RestaurantRecommendation]:
    """3-4 entries, all priced at the requested tier."""
    rows = CUSTOM_TABLE[_cuisine_key(food_type, _CUSTOM_ALIASES, CUSTOM_TABLE)]
    symbol = price_symbol_for(price_range)
    return [
        RestaurantRecommendation(
            name=name,
            cuisine=cuisine,
            price_range=symbol,
            estimated_rating=rating,
            location=location or "Near you",
            reason_for_recommendation=f"{description}{reason_suffix}",
            confidence_score=PLACEHOLDER_CONFIDENCE,
            source="fallback",
        )
        for name, cuisine, rating, description in rows
    ]
