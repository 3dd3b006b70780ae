from __future__ import annotations

from ..places.models import CandidateRestaurant
from ..preferences.models import UserPreferences
from .models import CustomPreferences

SUGGEST_SYSTEM_PROMPT = (
    "You are an expert restaurant recommendation engine that analyzes dining "
    "patterns, ratings, and preferences to suggest personalized restaurant "
    "recommendations.\n\n"
    "Provide realistic restaurant recommendations that would likely exist in "
    "the specified area. Include a confidence score between 0 and 1 and a "
    "short explanation for each.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"recommendations": [{"name": "Restaurant Name", "cuisine": "Cuisine Type", '
    '"priceRange": "$$", "estimatedRating": 4.2, "location": "Address/Area", '
    '"reasonForRecommendation": "Detailed explanation", "confidenceScore": 0.85}]}'
)

PICK_SYSTEM_PROMPT = (
    "You are a restaurant recommendation engine. Given a diner's preferences "
    "and a list of candidate restaurants, pick the best matches, order them "
    "from best to worst, and give a short, friendly explanation for each.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"recommendations": [{"id": "<candidate id>", "reason": "<one sentence>", '
    '"confidence": 0.8}]}\n'
    "Include only restaurants from the provided list. confidence is between 0 and 1."
)

PARSE_QUERY_SYSTEM_PROMPT = (
    "You parse restaurant search queries into structured preferences.\n\n"
    "Return ONLY valid JSON with these fields (omit fields you cannot infer):\n"
    '{"foodType": "Italian", "priceRange": "budget|moderate|upscale|fine-dining", '
    '"occasion": "date night", "ambiance": "romantic", '
    '"dietaryRestrictions": ["vegetarian"], "groupSize": 2, "distance": 10}\n'
    "distance is in miles; use 10 when the query does not say."
)


def _candidate_table(candidates: list[CandidateRestaurant]) -> list[str]:
    lines = ["| ID | Name | Cuisine | Price | Rating | Reviews | Distance |"]
    lines.append("|---|---|---|---|---|---|---|")
    for c in candidates:
        distance = f"{c.distance_miles} mi" if c.distance_miles is not None else "?"
        lines.append(
            f"| {c.id} | {c.name} | {c.cuisine} | {c.price_range} "
            f"| {c.rating if c.rating is not None else 'N/A'} "
            f"| {c.review_count or 0} | {distance} |"
        )
    return lines


def _history_lines(preferences: UserPreferences) -> list[str]:
    lines: list[str] = []
    if preferences.rated_restaurants:
        lines.append("Previous Ratings:")
        for r in preferences.rated_restaurants:
            cuisine = f" ({r.cuisine})" if r.cuisine else ""
            lines.append(f"- {r.restaurant_name}: {r.rating}/5 stars{cuisine}")
    if preferences.visit_history:
        lines.append("Visit History:")
        for v in preferences.visit_history:
            cuisine = f" ({v.cuisine})" if v.cuisine else ""
            lines.append(f"- {v.restaurant_name}: {v.visit_count} visits{cuisine}")
    if preferences.preferred_cuisines:
        lines.append(f"Preferred Cuisines: {', '.join(preferences.preferred_cuisines)}")
    if preferences.price_preference:
        lines.append(f"Price Preference: {preferences.price_preference}")
    return lines


def build_user_message(
    preferences: UserPreferences,
    location: str,
    candidates: list[CandidateRestaurant],
) -> str:
    lines = [f"Generate 5-8 personalized restaurant recommendations for a user in {location}.", ""]
    lines.append("## User's Dining Profile")
    history = _history_lines(preferences)
    lines.extend(history or ["No dining history yet."])
    if candidates:
        lines.append("\n## Candidate Restaurants")
        lines.extend(_candidate_table(candidates))
    lines.append("\n## Recommendation Criteria")
    lines.append("- Align with their taste preferences and rating patterns")
    lines.append("- Mix familiar and new cuisine types")
    lines.append("- Stay near their preferred price point")
    return "\n".join(lines)


def _custom_lines(custom: CustomPreferences) -> list[str]:
    lines = ["## Requested Preferences"]
    if custom.food_type:
        lines.append(f"- Food type: {custom.food_type}")
    lines.append(f"- Price range: {custom.price_range}")
    lines.append(f"- Group size: {custom.group_size}")
    if custom.occasion:
        lines.append(f"- Occasion: {custom.occasion}")
    if custom.ambiance:
        lines.append(f"- Ambiance: {custom.ambiance}")
    if custom.dietary_restrictions:
        lines.append(f"- Dietary restrictions: {', '.join(custom.dietary_restrictions)}")
    if custom.location:
        lines.append(f"- Location: {custom.location}")
    return lines


def build_custom_message(
    custom: CustomPreferences,
    history: UserPreferences | None,
    candidates: list[CandidateRestaurant],
    audience: str = "user",
) -> str:
    lines = [f"Recommend 3-6 restaurants for a {audience}.", ""]
    lines.extend(_custom_lines(custom))
    if history is not None:
        label = "Group" if audience == "group" else "User"
        lines.append(f"\n## {label} Dining History")
        lines.extend(_history_lines(history) or ["No dining history yet."])
    if candidates:
        lines.append("\n## Candidate Restaurants")
        lines.extend(_candidate_table(candidates))
    return "\n".join(lines)


def build_search_message(
    query: str,
    custom: CustomPreferences,
    candidates: list[CandidateRestaurant],
) -> str:
    lines = [f'User query: "{query}"', "", "Select the 3-6 best matches for this query.", ""]
    lines.extend(_custom_lines(custom))
    lines.append("\n## Candidate Restaurants")
    lines.extend(_candidate_table(candidates))
    return "\n".join(lines)
