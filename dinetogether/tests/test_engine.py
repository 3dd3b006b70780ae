import json
from unittest.mock import MagicMock, patch

import requests

from dinetogether.llm.config import LLMConfig
from dinetogether.places.config import METERS_PER_MILE, PlacesConfig
from dinetogether.places.models import PlaceDetails, PlaceRecord, PlacesResult
from dinetogether.preferences.models import UserPreferences
from dinetogether.recommendations.engine import (
    generate_custom_recommendations,
    generate_group_recommendations,
    generate_restaurant_recommendations,
    search_with_natural_language,
)
from dinetogether.recommendations.fallback import CUSTOM_TABLE, REGIONAL_TABLE
from dinetogether.recommendations.models import CustomPreferences

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="", enabled=False)
PLACES_CONFIG = PlacesConfig(api_key="test-key")
NO_KEY_PLACES = PlacesConfig(api_key="")

MADISON = (43.0731, -89.4012)
PORTLAND = (45.5152, -122.6784)

PLACES = [
    PlaceRecord(id="p1", name="Graze", primary_type="american_restaurant", price_level=2,
                rating=4.6, review_count=1200, address="1 S Pinckney St", latitude=43.0747,
                longitude=-89.3841, business_status="OPERATIONAL"),
    PlaceRecord(id="p2", name="Sakura House", primary_type="sushi_restaurant", price_level=3,
                rating=4.2, review_count=40, address="22 State St", latitude=43.075,
                longitude=-89.39),
    PlaceRecord(id="p3", name="McDonald's", primary_type="fast_food_restaurant", price_level=1,
                rating=3.5, review_count=900, address="9 Park St"),
    PlaceRecord(id="p4", name="Corner Cafe", primary_type="cafe", price_level=1,
                rating=3.9, review_count=75, address="5 Main St"),
]


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


def _http_500() -> MagicMock:
    resp = MagicMock()
    resp.status_code = 500
    resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    return resp


def _prefs(*cuisines: str) -> UserPreferences:
    return UserPreferences(user_id="u1", preferred_cuisines=list(cuisines))


# ── generate_restaurant_recommendations ──────────────────────────────────


def test_no_keys_returns_non_empty_fallback():
    recs = generate_restaurant_recommendations(
        _prefs(), llm_config=DISABLED_CONFIG, places_config=NO_KEY_PLACES,
    )

    assert len(recs) > 0
    assert all(r.source == "fallback" for r in recs)
    assert [r.name for r in recs] == [row[0] for row in REGIONAL_TABLE["default"]["default"]]


@patch("dinetogether.places.gateway.requests.get")
@patch("dinetogether.places.gateway.requests.post")
def test_places_500_returns_regional_table(mock_post, mock_get):
    mock_post.return_value = _http_500()
    mock_get.return_value = _http_500()

    recs = generate_restaurant_recommendations(
        _prefs("Italian"),
        location="Madison, WI",
        latitude=MADISON[0],
        longitude=MADISON[1],
        llm_config=DISABLED_CONFIG,
        places_config=PLACES_CONFIG,
    )

    assert [r.name for r in recs] == [row[0] for row in REGIONAL_TABLE["wisconsin"]["italian"]]
    assert mock_post.called and mock_get.called


@patch("dinetogether.places.gateway.search_nearby")
def test_regional_table_outside_wisconsin(mock_nearby):
    mock_nearby.return_value = PlacesResult(status="error")

    recs = generate_restaurant_recommendations(
        _prefs("Sushi"),
        latitude=PORTLAND[0],
        longitude=PORTLAND[1],
        llm_config=DISABLED_CONFIG,
    )

    assert [r.name for r in recs] == [row[0] for row in REGIONAL_TABLE["default"]["asian"]]


@patch("dinetogether.places.gateway.search_nearby")
def test_candidates_without_llm_sorted_by_rating(mock_nearby):
    mock_nearby.return_value = PlacesResult(places=PLACES, source="new")

    recs = generate_restaurant_recommendations(
        _prefs(), latitude=MADISON[0], longitude=MADISON[1], llm_config=DISABLED_CONFIG,
    )

    assert [r.place_id for r in recs] == ["p1", "p2", "p4"]
    assert recs[0].distance_miles is not None
    assert recs[0].price_range == "$$"
    assert all(r.source == "fallback" for r in recs)
    radius = mock_nearby.call_args.args[2]
    assert radius == 10 * METERS_PER_MILE


@patch("dinetogether.llm.groq_client.Groq")
@patch("dinetogether.places.gateway.search_nearby")
def test_llm_picks_map_back_to_candidates(mock_nearby, mock_groq_cls):
    mock_nearby.return_value = PlacesResult(places=PLACES, source="new")
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(json.dumps({
        "recommendations": [
            {"id": "p2", "reason": "Great sushi for a night out.", "confidence": 0.9},
            {"id": "nope", "reason": "Not a candidate.", "confidence": 0.9},
            {"id": "p3", "reason": "Filtered chain.", "confidence": 0.9},
            {"id": "p1", "reason": "", "confidence": 0.7},
            {"id": "p2", "reason": "Duplicate.", "confidence": 0.1},
            {"id": "p4", "confidence": 3.0},
        ]
    }))

    recs = generate_restaurant_recommendations(
        _prefs(), latitude=MADISON[0], longitude=MADISON[1], llm_config=ENABLED_CONFIG,
    )

    assert [r.place_id for r in recs] == ["p2", "p1"]
    assert recs[0].reason_for_recommendation == "Great sushi for a night out."
    assert recs[0].confidence_score == 0.9
    assert recs[1].reason_for_recommendation
    assert all(r.source == "llm" for r in recs)


@patch("dinetogether.llm.groq_client.Groq")
@patch("dinetogether.places.gateway.search_nearby")
def test_llm_with_no_usable_picks_falls_back(mock_nearby, mock_groq_cls):
    mock_nearby.return_value = PlacesResult(places=PLACES, source="new")
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        json.dumps({"recommendations": [{"id": "unknown"}]})
    )

    recs = generate_restaurant_recommendations(
        _prefs(), latitude=MADISON[0], longitude=MADISON[1], llm_config=ENABLED_CONFIG,
    )

    assert [r.place_id for r in recs] == ["p1", "p2", "p4"]
    assert all(r.source == "fallback" for r in recs)


@patch("dinetogether.llm.groq_client.Groq")
def test_llm_suggestions_without_candidates_drop_invalid_items(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(json.dumps({
        "recommendations": [
            {"name": "Harvest", "cuisine": "American", "priceRange": "$$$", "estimatedRating": 4.7,
             "location": "Capitol Square", "reasonForRecommendation": "Farm to table.",
             "confidenceScore": 0.8},
            {"name": "Broken", "estimatedRating": 7.5},
            "not an object",
        ]
    }))

    recs = generate_restaurant_recommendations(
        _prefs(), llm_config=ENABLED_CONFIG, places_config=NO_KEY_PLACES,
    )

    assert [r.name for r in recs] == ["Harvest"]
    assert recs[0].estimated_rating == 4.7
    assert recs[0].source == "llm"


@patch("dinetogether.llm.groq_client.Groq")
def test_llm_error_without_candidates_uses_regional_table(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    recs = generate_restaurant_recommendations(
        _prefs("Mexican"), location="Milwaukee", llm_config=ENABLED_CONFIG, places_config=NO_KEY_PLACES,
    )

    assert [r.name for r in recs] == [row[0] for row in REGIONAL_TABLE["wisconsin"]["mexican"]]


# ── Custom and group recommendations ─────────────────────────────────────


def test_custom_fallback_prices_follow_price_range():
    for price_range, symbol in [
        ("budget", "$"),
        ("moderate", "$$"),
        ("upscale", "$$$"),
        ("fine-dining", "$$$$"),
    ]:
        recs = generate_custom_recommendations(
            CustomPreferences(food_type="Italian", price_range=price_range),
            llm_config=DISABLED_CONFIG,
            places_config=NO_KEY_PLACES,
        )
        assert 3 <= len(recs) <= 4
        assert {r.price_range for r in recs} == {symbol}


def test_custom_fallback_unknown_food_type_uses_default_table():
    recs = generate_custom_recommendations(
        CustomPreferences(food_type="Ethiopian", location="Downtown"),
        llm_config=DISABLED_CONFIG,
        places_config=NO_KEY_PLACES,
    )

    assert [r.name for r in recs] == [row[0] for row in CUSTOM_TABLE["default"]]
    assert all(r.location == "Downtown" for r in recs)


@patch("dinetogether.places.gateway.search_nearby")
@patch("dinetogether.places.gateway.search_text")
def test_custom_with_food_type_uses_text_search_and_scores(mock_text, mock_nearby):
    mock_text.return_value = PlacesResult(places=PLACES, source="new")

    recs = generate_custom_recommendations(
        CustomPreferences(food_type="American", price_range="moderate", distance=5),
        latitude=MADISON[0],
        longitude=MADISON[1],
        llm_config=DISABLED_CONFIG,
    )

    args = mock_text.call_args.args
    assert args[0] == "American restaurant"
    assert args[3] == 5 * METERS_PER_MILE
    mock_nearby.assert_not_called()

    assert recs[0].place_id == "p1"
    assert recs[0].confidence_score == 1.0
    assert "Highly rated (4.6/5 stars)" in recs[0].reasons
    assert "Matches your moderate budget" in recs[0].reasons
    assert len(recs) <= 6
    assert "p3" not in [r.place_id for r in recs]


@patch("dinetogether.places.gateway.search_nearby")
@patch("dinetogether.places.gateway.search_text")
def test_custom_without_food_type_uses_nearby_search(mock_text, mock_nearby):
    mock_nearby.return_value = PlacesResult(places=PLACES[:2], source="legacy")

    recs = generate_custom_recommendations(
        CustomPreferences(), latitude=MADISON[0], longitude=MADISON[1], llm_config=DISABLED_CONFIG,
    )

    mock_text.assert_not_called()
    assert [r.place_id for r in recs] == ["p1", "p2"]


def test_group_fallback_mentions_group_size():
    recs = generate_group_recommendations(
        CustomPreferences(food_type="Mexican", group_size=6),
        UserPreferences(user_id="group:g1"),
        llm_config=DISABLED_CONFIG,
        places_config=NO_KEY_PLACES,
    )

    assert 3 <= len(recs) <= 4
    assert all("group of 6" in r.reason_for_recommendation for r in recs)


@patch("dinetogether.llm.groq_client.Groq")
def test_group_request_includes_group_history_in_prompt(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    history = UserPreferences(user_id="group:g1", preferred_cuisines=["Thai"])
    generate_group_recommendations(
        CustomPreferences(food_type="Thai", group_size=5),
        history,
        llm_config=ENABLED_CONFIG,
        places_config=NO_KEY_PLACES,
    )

    messages = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs["messages"]
    assert "Group Dining History" in messages[1]["content"]
    assert "Preferred Cuisines: Thai" in messages[1]["content"]


# ── Natural-language search ──────────────────────────────────────────────


@patch("dinetogether.recommendations.engine.rank_by_query")
@patch("dinetogether.places.gateway.search_text")
def test_search_without_llm_uses_semantic_ranking(mock_text, mock_rank):
    mock_text.return_value = PlacesResult(places=PLACES, source="new")
    mock_rank.side_effect = lambda query, candidates, limit: [(candidates[1], 0.91), (candidates[0], 0.8)]

    recs = search_with_natural_language(
        "sushi within 3 miles", MADISON[0], MADISON[1], llm_config=DISABLED_CONFIG,
    )

    assert [r.place_id for r in recs] == ["p2", "p1"]
    assert recs[0].confidence_score == 0.91
    assert mock_text.call_args.args[3] == 3 * METERS_PER_MILE


@patch("dinetogether.places.gateway.search_text")
def test_search_without_candidates_uses_parsed_preferences(mock_text):
    mock_text.return_value = PlacesResult(status="error")

    recs = search_with_natural_language(
        "cheap mexican for 4 people", MADISON[0], MADISON[1], llm_config=DISABLED_CONFIG,
    )

    assert [r.name for r in recs] == [row[0] for row in CUSTOM_TABLE["mexican"]]
    assert {r.price_range for r in recs} == {"$"}


@patch("dinetogether.llm.groq_client.Groq")
@patch("dinetogether.places.gateway.search_text")
def test_search_with_llm_picks(mock_text, mock_groq_cls):
    mock_text.return_value = PlacesResult(places=PLACES, source="new")
    create = mock_groq_cls.return_value.chat.completions.create
    create.side_effect = [
        _mock_groq_response(json.dumps({"foodType": "Sushi", "priceRange": "upscale", "distance": 8})),
        _mock_groq_response(json.dumps({"recommendations": [{"id": "p2", "reason": "Omakase.", "confidence": 0.95}]})),
    ]

    recs = search_with_natural_language(
        "fancy sushi", MADISON[0], MADISON[1], llm_config=ENABLED_CONFIG,
    )

    assert [r.place_id for r in recs] == ["p2"]
    assert recs[0].source == "llm"
    assert mock_text.call_args.args[3] == 8 * METERS_PER_MILE


@patch("dinetogether.recommendations.engine.rank_by_query")
@patch("dinetogether.places.gateway.search_nearby")
@patch("dinetogether.places.gateway.search_text")
def test_search_queries_places_with_parsed_terms(mock_text, mock_nearby, mock_rank):
    mock_text.return_value = PlacesResult(places=PLACES, source="new")
    mock_rank.return_value = []

    search_with_natural_language(
        "somewhere quiet with great sushi", MADISON[0], MADISON[1], llm_config=DISABLED_CONFIG,
    )

    assert mock_text.call_args.args[0] == "quiet Sushi restaurant"
    mock_nearby.assert_not_called()


@patch("dinetogether.recommendations.engine.rank_by_query")
@patch("dinetogether.places.gateway.search_nearby")
@patch("dinetogether.places.gateway.search_text")
def test_search_without_food_terms_uses_nearby_search(mock_text, mock_nearby, mock_rank):
    mock_nearby.return_value = PlacesResult(places=PLACES, source="new")
    mock_rank.side_effect = lambda query, candidates, limit: [(candidates[0], 0.7)]

    recs = search_with_natural_language(
        "somewhere good within 2 miles", MADISON[0], MADISON[1], llm_config=DISABLED_CONFIG,
    )

    mock_text.assert_not_called()
    assert mock_nearby.call_args.args[2] == 2 * METERS_PER_MILE
    assert mock_rank.call_args.args[0] == "somewhere good within 2 miles"
    assert [r.place_id for r in recs] == ["p1"]


# ── Place details and suggestion checks ──────────────────────────────────


GRAZE_DETAILS = PlaceDetails(
    id="p1",
    name="Graze",
    phone="(608) 251-2700",
    website="https://www.grazemadison.com/",
    opening_hours=["Monday: 11:00 AM – 9:00 PM"],
    review_count=1250,
    business_status="OPERATIONAL",
    reviews=["The burger was amazing. Service was slow."],
)


@patch("dinetogether.places.gateway.search_nearby")
def test_custom_caps_candidate_results_at_six(mock_nearby):
    mock_nearby.return_value = PlacesResult(places=[
        PlaceRecord(id=f"n{i}", name=f"Local Spot {i}", rating=4.0 + i / 100, review_count=60)
        for i in range(10)
    ])

    recs = generate_custom_recommendations(
        CustomPreferences(), latitude=MADISON[0], longitude=MADISON[1], llm_config=DISABLED_CONFIG,
    )

    assert len(recs) == 6
    assert recs[0].place_id == "n9"


@patch("dinetogether.places.gateway.get_place_details")
@patch("dinetogether.places.gateway.search_nearby")
def test_custom_results_carry_place_details(mock_nearby, mock_details):
    mock_nearby.return_value = PlacesResult(places=PLACES[:2], source="new")
    mock_details.side_effect = lambda place_id, config: GRAZE_DETAILS if place_id == "p1" else None

    recs = generate_custom_recommendations(
        CustomPreferences(), latitude=MADISON[0], longitude=MADISON[1],
        llm_config=DISABLED_CONFIG, places_config=PLACES_CONFIG,
    )

    graze, sakura = recs
    assert graze.phone == "(608) 251-2700"
    assert graze.website == "https://www.grazemadison.com/"
    assert graze.opening_hours == "Monday: 11:00 AM – 9:00 PM"
    assert graze.menu_highlights == ["The burger was amazing"]
    assert graze.review_count == 1250
    assert sakura.phone is None
    assert sakura.review_count == 40
    assert [call.args[0] for call in mock_details.call_args_list] == ["p1", "p2"]


@patch("dinetogether.places.gateway.get_place_details")
@patch("dinetogether.places.gateway.search_text")
@patch("dinetogether.llm.groq_client.Groq")
def test_llm_suggestions_are_checked_against_places(mock_groq_cls, mock_text, mock_details):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(json.dumps({
        "recommendations": [
            {"name": "Harvest", "location": "Capitol Square", "reasonForRecommendation": "Farm to table.",
             "confidenceScore": 0.8},
            {"name": "Ghost Kitchen", "location": "Nowhere", "reasonForRecommendation": "Made up."},
            {"name": "Offline Bistro", "location": "Madison", "reasonForRecommendation": "Unchecked."},
        ]
    }))
    mock_text.side_effect = [
        PlacesResult(places=[PlaceRecord(id="h1", name="Harvest Restaurant", rating=4.7,
                                         address="21 N Pinckney St")]),
        PlacesResult(places=[]),
        PlacesResult(status="error"),
    ]
    mock_details.return_value = PlaceDetails(id="h1", phone="(608) 255-6075")

    recs = generate_restaurant_recommendations(
        _prefs(), llm_config=ENABLED_CONFIG, places_config=PLACES_CONFIG,
    )

    assert [r.name for r in recs] == ["Harvest Restaurant", "Offline Bistro"]
    harvest = recs[0]
    assert harvest.place_id == "h1"
    assert harvest.address == "21 N Pinckney St"
    assert harvest.estimated_rating == 4.7
    assert harvest.reason_for_recommendation == "Farm to table."
    assert harvest.confidence_score == 0.8
    assert harvest.phone == "(608) 255-6075"
    assert all(r.source == "llm" for r in recs)
    assert mock_text.call_args_list[0].args[0] == "Harvest Capitol Square"
    mock_details.assert_called_once_with("h1", config=PLACES_CONFIG)


@patch("dinetogether.places.gateway.search_text")
@patch("dinetogether.llm.groq_client.Groq")
def test_unmatched_llm_suggestions_fall_back_to_table(mock_groq_cls, mock_text):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(json.dumps({
        "recommendations": [{"name": "Imaginary Diner", "location": "Nowhere"}]
    }))
    mock_text.return_value = PlacesResult(places=[])

    recs = generate_custom_recommendations(
        CustomPreferences(food_type="Mexican"),
        llm_config=ENABLED_CONFIG,
        places_config=PLACES_CONFIG,
    )

    assert [r.name for r in recs] == [row[0] for row in CUSTOM_TABLE["mexican"]]
    assert all(r.source == "fallback" for r in recs)


@patch("dinetogether.places.gateway.requests.get")
@patch("dinetogether.places.gateway.requests.post")
def test_malformed_places_body_does_not_break_custom_recommendations(mock_post, mock_get):
    ok = MagicMock()
    ok.status_code = 200
    ok.json.return_value = {"places": [{"id": "x", "displayName": "Bare string", "photos": [None]}]}
    mock_post.return_value = ok
    mock_get.return_value = _http_500()

    recs = generate_custom_recommendations(
        CustomPreferences(food_type="Mexican"),
        latitude=MADISON[0],
        longitude=MADISON[1],
        llm_config=DISABLED_CONFIG,
        places_config=PLACES_CONFIG,
    )

    assert [r.name for r in recs] == [row[0] for row in CUSTOM_TABLE["mexican"]]
