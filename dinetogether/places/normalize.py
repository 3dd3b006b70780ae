from __future__ import annotations

from .distance import haversine_miles
from .models import CandidateRestaurant, PlaceRecord

# Matched as lower-case substrings of the place name.
CHAIN_KEYWORDS = [
    "mcdonald",
    "burger king",
    "wendy's",
    "taco bell",
    "kfc",
    "kentucky fried",
    "subway",
    "domino",
    "pizza hut",
    "papa john",
    "little caesars",
    "chick-fil-a",
    "popeyes",
    "arby's",
    "sonic drive",
    "dairy queen",
    "jack in the box",
    "carl's jr",
    "hardee",
    "chipotle",
    "panda express",
    "five guys",
    "jimmy john",
    "jersey mike",
    "applebee",
    "chili's",
    "olive garden",
    "denny's",
    "ihop",
    "starbucks",
    "dunkin",
]

UPSCALE_PRICE_LEVEL = 3

PRICE_SYMBOLS = {0: "$", 1: "$", 2: "$$", 3: "$$$", 4: "$$$$"}
DEFAULT_PRICE_SYMBOL = "$$"

CUISINE_TYPES = {
    "restaurant": "Restaurant",
    "american_restaurant": "American",
    "bakery": "Bakery",
    "bar": "Bar",
    "barbecue_restaurant": "Barbecue",
    "brunch_restaurant": "Brunch",
    "cafe": "Cafe",
    "chinese_restaurant": "Chinese",
    "fast_food_restaurant": "Fast Food",
    "french_restaurant": "French",
    "greek_restaurant": "Greek",
    "hamburger_restaurant": "Burgers",
    "indian_restaurant": "Indian",
    "italian_restaurant": "Italian",
    "japanese_restaurant": "Japanese",
    "korean_restaurant": "Korean",
    "meal_delivery": "Delivery",
    "meal_takeaway": "Takeaway",
    "mediterranean_restaurant": "Mediterranean",
    "mexican_restaurant": "Mexican",
    "pizza_restaurant": "Pizza",
    "seafood_restaurant": "Seafood",
    "steak_house": "Steakhouse",
    "sushi_restaurant": "Sushi",
    "thai_restaurant": "Thai",
    "vegetarian_restaurant": "Vegetarian",
    "vietnamese_restaurant": "Vietnamese",
}
DEFAULT_CUISINE = "Restaurant"


def is_chain(name: str, price_level: int | None) -> bool:
    """Known chain names are excluded unless the outlet is upscale (tier >= 3)."""
    if price_level is not None and price_level >= UPSCALE_PRICE_LEVEL:
        return False
    lower = name.lower()
    return any(keyword in lower for keyword in CHAIN_KEYWORDS)


def price_symbol(price_level: int | None) -> str:
    if price_level is None:
        return DEFAULT_PRICE_SYMBOL
    return PRICE_SYMBOLS.get(price_level, DEFAULT_PRICE_SYMBOL)


def cuisine_label(primary_type: str | None) -> str:
    if not primary_type:
        return DEFAULT_CUISINE
    return CUISINE_TYPES.get(primary_type, DEFAULT_CUISINE)


def to_candidate(
    place: PlaceRecord,
    origin: tuple[float, float] | None = None,
) -> CandidateRestaurant:
    distance = None
    if origin is not None and place.latitude is not None and place.longitude is not None:
        distance = haversine_miles(origin[0], origin[1], place.latitude, place.longitude)
    return CandidateRestaurant(
        id=place.id,
        name=place.name,
        cuisine=cuisine_label(place.primary_type),
        price_range=price_symbol(place.price_level),
        price_level=place.price_level,
        rating=place.rating,
        review_count=place.review_count,
        address=place.address,
        photo_reference=place.photo_reference,
        latitude=place.latitude,
        longitude=place.longitude,
        distance_miles=distance,
        business_status=place.business_status,
    )


def filter_and_normalize(
    places: list[PlaceRecord],
    origin: tuple[float, float] | None = None,
) -> list[CandidateRestaurant]:
    """Drop chains and map the remaining places into candidates, order preserved."""
    return [
        to_candidate(place, origin)
        for place in places
        if not is_chain(place.name, place.price_level)
    ]


# Words that tend to introduce a dish worth mentioning in a review.
MENU_KEYWORDS = [
    "delicious",
    "amazing",
    "best",
    "excellent",
    "perfect",
    "incredible",
    "pizza",
    "burger",
    "pasta",
    "salad",
    "steak",
    "chicken",
    "seafood",
    "dessert",
    "coffee",
    "wine",
    "beer",
    "cocktail",
    "appetizer",
]
MAX_HIGHLIGHTS = 3
MAX_HIGHLIGHT_LENGTH = 100


def format_opening_hours(weekday_descriptions: list[str]) -> str | None:
    """One line per weekday, as the provider formats them."""
    lines = [line for line in weekday_descriptions if line]
    return "\n".join(lines) if lines else None


def extract_menu_highlights(reviews: list[str]) -> list[str]:
    """
    Short review sentences that mention a dish or a strong opinion.

    Looks at the first three reviews only, takes at most one sentence per
    keyword, and keeps sentences under 100 characters.
    """
    highlights: list[str] = []
    for review in reviews[:MAX_HIGHLIGHTS]:
        lower = review.lower()
        for keyword in MENU_KEYWORDS:
            if keyword not in lower:
                continue
            if any(keyword in h.lower() for h in highlights):
                continue
            sentence = next(
                (s for s in review.split(". ") if keyword in s.lower()), None,
            )
            if sentence and len(sentence) < MAX_HIGHLIGHT_LENGTH:
                highlights.append(sentence.strip())
    return highlights[:MAX_HIGHLIGHTS]
