"""
Recommendation engine.

Responsibilities:
- Fetch live candidates through the places layer and drop chains.
- Rank or suggest restaurants with the LLM when it is configured.
- Fall back to heuristic ranking or hard-coded tables when it is not,
  or when any upstream call fails. The engine never raises to callers.
"""
