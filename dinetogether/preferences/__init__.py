"""
Preference aggregation.

Responsibilities:
- Hold raw rating and event-attendance rows for users and groups.
- Reduce those rows into a ``UserPreferences`` summary per request.
- Produce a ``DiningAnalysis`` via the LLM, or a heuristic one without it.
"""
