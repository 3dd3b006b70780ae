from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)


def complete_json(
    system_prompt: str,
    user_message: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    temperature: float = 0.3,
    max_tokens: int | None = None,
) -> dict[str, Any] | None:
    """
    Ask Groq for a JSON object completion.

    Returns the decoded object, or ``None`` when the LLM is not configured or
    the call fails for any reason (timeout, API error, non-object JSON).
    """
    if not config.active:
        return None

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            max_tokens=max_tokens or config.max_tokens,
            temperature=temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            logger.warning("Groq returned %s instead of a JSON object", type(parsed).__name__)
            return None
        return parsed

    except Exception:
        logger.warning("Groq LLM call failed, caller will use its fallback", exc_info=True)
        return None
