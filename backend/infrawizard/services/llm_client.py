"""Client for a plain text-completion endpoint.

The endpoint takes ``{"prompt", "max_tokens", "temperature"}`` and answers
either in the OpenAI completions shape (``{"choices": [{"text": ...}]}``)
or with a bare ``{"text": ...}``.
"""

import logging

import httpx

from infrawizard.config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The completion endpoint could not produce a usable reply."""


def _extract_text(data) -> str:
    if isinstance(data, dict):
        choices = data.get("choices")
        if choices and isinstance(choices[0], dict) and "text" in choices[0]:
            return str(choices[0]["text"]).strip()
        if "text" in data:
            return str(data["text"]).strip()
    raise LLMError("Invalid LLM response format")


async def call_llm(
    prompt: str,
    max_tokens: int = 1000,
    temperature: float = 0.7,
) -> str:
    """Send a prompt to the completion endpoint and return the reply text.

    Args:
        prompt: Full prompt text
        max_tokens: Upper bound on generated tokens
        temperature: Sampling temperature

    Returns:
        The generated text, stripped of surrounding whitespace.

    Raises:
        LLMError: on transport errors, non-2xx statuses or unknown bodies.
    """
    try:
        async with httpx.AsyncClient(timeout=settings.llm_timeout_seconds) as client:
            resp = await client.post(
                settings.llm_endpoint,
                json={
                    "prompt": prompt,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                },
                headers={"Content-Type": "application/json"},
            )
            resp.raise_for_status()
            data = resp.json()
    except httpx.HTTPStatusError as exc:
        logger.warning(f"LLM endpoint returned {exc.response.status_code}")
        raise LLMError(
            f"LLM API error: {exc.response.status_code} {exc.response.reason_phrase}"
        ) from exc
    except httpx.HTTPError as exc:
        logger.warning(f"LLM endpoint unreachable: {exc}")
        raise LLMError(f"LLM API call failed: {exc}") from exc
    except ValueError as exc:
        raise LLMError("LLM endpoint returned a non-JSON body") from exc

    return _extract_text(data)
