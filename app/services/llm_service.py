"""LLM client for task recommendations – Anthropic messages API.

Any Anthropic-compatible endpoint works; point AI_BASE_URL at it and pick
the model with AI_MODEL.
"""

import asyncio
import logging
from typing import Optional

from anthropic import AsyncAnthropic

from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Respect upstream rate limits
_semaphore = asyncio.Semaphore(settings.AI_MAX_CONCURRENCY)

_client: Optional[AsyncAnthropic] = None


def get_client() -> AsyncAnthropic:
    global _client
    if _client is None:
        kwargs = {"api_key": settings.AI_API_KEY}
        if settings.AI_BASE_URL:
            kwargs["base_url"] = settings.AI_BASE_URL
        _client = AsyncAnthropic(**kwargs)
    return _client


def _split_messages(
    messages: list[dict[str, str]],
) -> tuple[Optional[str], list[dict[str, str]]]:
    """Extract leading system message for the Anthropic API's `system` parameter."""
    if messages and messages[0]["role"] == "system":
        return messages[0]["content"], messages[1:]
    return None, messages


async def chat_complete(
    messages: list[dict[str, str]],
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: int = 1024,
    retries: int = 3,
) -> tuple[str, int, int]:
    """
    Call the suggestion model with rate limiting and retry.

    Returns:
        (content, prompt_tokens, completion_tokens)
    """
    if model is None:
        model = settings.AI_MODEL

    system, user_messages = _split_messages(messages)

    kwargs = {
        "model": model,
        "messages": user_messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if system:
        kwargs["system"] = system

    last_exc: Optional[Exception] = None
    for attempt in range(retries):
        try:
            async with _semaphore:
                response = await get_client().messages.create(**kwargs)
            content = response.content[0].text if response.content else ""
            input_tokens = response.usage.input_tokens if response.usage else 0
            output_tokens = response.usage.output_tokens if response.usage else 0
            return content, input_tokens, output_tokens
        except Exception as exc:
            logger.warning("LLM API error (attempt %d): %s", attempt + 1, exc)
            last_exc = exc
            if attempt < retries - 1:
                await asyncio.sleep(2**attempt)

    raise RuntimeError(f"LLM API failed after {retries} attempts: {last_exc}")
