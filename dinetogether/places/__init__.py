"""
Places layer.

Responsibilities:
- Query Google Places (new API first, legacy API as the single fallback tier).
- Reshape both response generations into one ``PlaceRecord`` model.
- Drop chain restaurants and normalize price/cuisine codes for ranking.
"""
