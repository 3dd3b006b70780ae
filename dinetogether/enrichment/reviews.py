from __future__ import annotations

import random

from ..recommendations.models import ExternalRating, RestaurantRecommendation


def enrich_with_external_reviews(
    recommendations: list[RestaurantRecommendation],
    rng: random.Random | None = None,
) -> list[RestaurantRecommendation]:
    """
    Attach Google and Yelp ratings to each recommendation.

    The ratings are simulated: uniform in [3.0, 5.0], rounded to one decimal.
    No review provider is queried. Inputs are not mutated.
    """
    rng = rng or random.Random()
    return [
        rec.model_copy(update={
            "external_rating": ExternalRating(
                google=round(rng.uniform(3.0, 5.0), 1),
                yelp=round(rng.uniform(3.0, 5.0), 1),
            ),
        })
        for rec in recommendations
    ]
