"""
LLM client for OpenAI-compatible /chat/completions endpoints.

Features:
  - Provider selection (groq / openrouter / openai) via FF_LLM_PROVIDER
  - Per-task model selection (chat, planning, simulation)
  - Retry with exponential backoff + jitter on 429 only (FF_LLM_RETRY_ON_RATE_LIMIT)
  - Reusable client (connection pooling)
  - Structured logging
"""

import asyncio
import logging
import random
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Literal, Optional

import httpx

from ..core.config import get_settings
from ..core.errors import ConfigError, LLMError
from ..core.flags import get_flags

logger = logging.getLogger(__name__)

LLMTask = Literal["chat", "planning", "simulation"]

# ── Reusable client (connection pool) ────────────────────────────────

_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=10, read=120, write=30, pool=10),
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )
    return _client


async def close_client():
    """Close the shared HTTP client. Call on app shutdown."""
    global _client
    if _client and not _client.is_closed:
        await _client.aclose()
        _client = None


# ── Provider config ──────────────────────────────────────────────────

def _get_provider_config(provider: Optional[str] = None) -> tuple[str, str, dict[str, str]]:
    """Returns (base_url, api_key, extra_headers) for a provider."""
    settings = get_settings()
    p = (provider or get_flags().llm_provider).lower()

    if p == "openrouter":
        return (
            settings.openrouter_base_url,
            settings.openrouter_api_key,
            {"HTTP-Referer": settings.app_url, "X-Title": settings.app_title},
        )
    elif p == "openai":
        return settings.openai_base_url, settings.openai_api_key, {}
    else:  # groq (default)
        return settings.groq_base_url, settings.groq_api_key, {}


def model_for_task(task: LLMTask) -> str:
    settings = get_settings()
    if task == "planning":
        return settings.planning_model
    if task == "simulation":
        return settings.simulator_model
    return settings.chat_model


# ── Retry logic ──────────────────────────────────────────────────────

RETRYABLE_STATUS = {429}
MAX_ATTEMPTS = 3
BASE_DELAY = 1.0
MAX_DELAY = 16.0


def _retry_delay(retry_after: Optional[str], attempt: int) -> float:
    """
    Seconds to wait before the next attempt, never more than MAX_DELAY.

    Retry-After may be delta-seconds or an HTTP-date; anything unreadable
    falls back to exponential backoff with jitter.
    """
    backoff = BASE_DELAY * (2 ** attempt) + random.uniform(0, BASE_DELAY)
    if not retry_after:
        return min(MAX_DELAY, backoff)

    try:
        seconds = float(retry_after)
    except ValueError:
        try:
            when = parsedate_to_datetime(retry_after)
        except (TypeError, ValueError):
            return min(MAX_DELAY, backoff)
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        seconds = (when - datetime.now(timezone.utc)).total_seconds()

    return max(0.0, min(MAX_DELAY, seconds))


async def _post_with_retry(
    client: httpx.AsyncClient,
    url: str,
    retry: bool,
    **kwargs,
) -> httpx.Response:
    """POST with exponential backoff + jitter on rate limiting."""
    attempts = MAX_ATTEMPTS if retry else 1

    for attempt in range(attempts):
        try:
            resp = await client.post(url, **kwargs)
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request failed: {e}") from e

        if resp.status_code in RETRYABLE_STATUS and attempt < attempts - 1:
            delay = _retry_delay(resp.headers.get("retry-after"), attempt)
            logger.warning(
                "LLM %d (attempt %d/%d) — retrying in %.1fs",
                resp.status_code, attempt + 1, attempts, delay,
            )
            await asyncio.sleep(delay)
            continue

        if resp.status_code >= 400:
            error_body = resp.text[:500]
            logger.error("LLM API error %d: %s", resp.status_code, error_body)
            raise LLMError(
                f"LLM API error ({resp.status_code}): {error_body}",
                status_code=resp.status_code,
            )
        return resp

    raise LLMError("LLM request failed after retries")


# ── Main chat function ───────────────────────────────────────────────

async def chat(
    messages: list[dict],
    task: LLMTask = "chat",
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    provider: Optional[str] = None,
) -> dict:
    """
    Chat completion. Returns the full API response as dict.

    Raises ConfigError when the provider has no API key and LLMError on any
    upstream failure.
    """
    settings = get_settings()
    flags = get_flags()
    active_provider = (provider or flags.llm_provider).lower()
    base_url, api_key, extra_headers = _get_provider_config(provider)

    if not api_key:
        raise ConfigError(
            f"No API key for LLM provider '{active_provider}'. "
            "Set GROQ_API_KEY, OPENROUTER_API_KEY, or OPENAI_API_KEY."
        )

    payload: dict[str, Any] = {
        "model": model or model_for_task(task),
        "messages": messages,
        "temperature": temperature if temperature is not None else settings.llm_temperature,
    }
    if max_tokens:
        payload["max_tokens"] = max_tokens

    url = f"{base_url.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        **extra_headers,
    }

    start = time.monotonic()
    client = _get_client()

    try:
        resp = await _post_with_retry(
            client, url, flags.llm_retry_on_rate_limit, json=payload, headers=headers,
        )
        data = resp.json()
    except ValueError as e:
        raise LLMError(f"LLM returned invalid JSON: {e}") from e
    except LLMError as e:
        logger.error("LLM failed after %.1fs: %s", time.monotonic() - start, e)
        raise

    usage = data.get("usage") or {}
    logger.info(
        "LLM %s: %dms | in=%d out=%d tokens | model=%s",
        task,
        int((time.monotonic() - start) * 1000),
        usage.get("prompt_tokens", 0),
        usage.get("completion_tokens", 0),
        payload["model"],
    )
    return data


# ── Convenience functions ────────────────────────────────────────────

async def complete(
    messages: list[dict],
    task: LLMTask = "chat",
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> str:
    """Send messages, get the reply text back. Empty content is an error."""
    data = await chat(messages, task=task, temperature=temperature, max_tokens=max_tokens)
    choices = data.get("choices") or [{}]
    content = ((choices[0] or {}).get("message") or {}).get("content")
    if not content or not content.strip():
        raise LLMError("Empty LLM response")
    return content


async def complete_simple(
    prompt: str,
    system: str = "",
    task: LLMTask = "chat",
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> str:
    """Single prompt with an optional system message."""
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return await complete(messages, task=task, temperature=temperature, max_tokens=max_tokens)
