import os

# Tests never talk to Groq or Google; set before any config module is imported.
os.environ["LLM_ENABLED"] = "false"
os.environ["GOOGLE_MAPS_API_KEY"] = ""

import pytest  # noqa: E402

from dinetogether.enrichment.website import clear_website_cache  # noqa: E402
from dinetogether.preferences.store import clear_history  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_state():
    clear_history()
    clear_website_cache()
    yield
    clear_history()
    clear_website_cache()
