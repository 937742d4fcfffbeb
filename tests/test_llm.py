import json

import httpx
import pytest

from mindmesh.core.errors import ConfigError, LLMError
from mindmesh.services import llm


def _completion(content, usage=None):
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": usage or {"prompt_tokens": 12, "completion_tokens": 5},
    }


def _install_transport(handler):
    llm._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_complete_sends_openai_style_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion("Hello there"))

    _install_transport(handler)

    reply = await llm.complete([{"role": "user", "content": "hi"}], task="planning")

    assert reply == "Hello there"
    assert seen["url"] == "https://api.groq.com/openai/v1/chat/completions"
    assert seen["auth"] == "Bearer test-groq-key"
    assert seen["body"]["model"] == "llama-3.1-70b-versatile"
    assert seen["body"]["temperature"] == 0.3
    assert seen["body"]["messages"] == [{"role": "user", "content": "hi"}]


async def test_rate_limit_is_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(429, text="slow down")
        return httpx.Response(200, json=_completion("finally"))

    _install_transport(handler)

    assert await llm.complete([{"role": "user", "content": "hi"}]) == "finally"
    assert len(attempts) == 3


async def test_rate_limit_gives_up_after_max_attempts():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(429, text="slow down")

    _install_transport(handler)

    with pytest.raises(LLMError) as exc_info:
        await llm.complete([{"role": "user", "content": "hi"}])

    assert exc_info.value.status_code == 429
    assert len(attempts) == llm.MAX_ATTEMPTS


@pytest.fixture
def slept(monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(llm.asyncio, "sleep", fake_sleep)
    return delays


async def test_retry_after_http_date_is_honoured(slept):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            return httpx.Response(
                429, text="slow down", headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"},
            )
        return httpx.Response(200, json=_completion("after the date"))

    _install_transport(handler)

    assert await llm.complete([{"role": "user", "content": "hi"}]) == "after the date"
    assert len(attempts) == 2
    # A date in the past means retry straight away.
    assert slept == [0.0]


async def test_retry_after_is_capped(slept):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            return httpx.Response(429, text="slow down", headers={"Retry-After": "3600"})
        return httpx.Response(200, json=_completion("ok"))

    _install_transport(handler)

    assert await llm.complete([{"role": "user", "content": "hi"}]) == "ok"
    assert slept == [llm.MAX_DELAY]


def test_unreadable_retry_after_falls_back_to_backoff():
    delay = llm._retry_delay("soon-ish", attempt=1)
    assert llm.BASE_DELAY * 2 <= delay <= min(llm.MAX_DELAY, llm.BASE_DELAY * 3)


async def test_server_errors_are_not_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(500, text="boom")

    _install_transport(handler)

    with pytest.raises(LLMError) as exc_info:
        await llm.complete([{"role": "user", "content": "hi"}])

    assert exc_info.value.status_code == 500
    assert len(attempts) == 1


async def test_retry_can_be_disabled(monkeypatch):
    monkeypatch.setenv("FF_LLM_RETRY_ON_RATE_LIMIT", "false")
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(429, text="slow down")

    _install_transport(handler)

    with pytest.raises(LLMError):
        await llm.complete([{"role": "user", "content": "hi"}])
    assert len(attempts) == 1


async def test_empty_content_is_an_error():
    _install_transport(lambda request: httpx.Response(200, json=_completion("   ")))

    with pytest.raises(LLMError, match="Empty LLM response"):
        await llm.complete([{"role": "user", "content": "hi"}])


async def test_network_error_becomes_llm_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _install_transport(handler)

    with pytest.raises(LLMError):
        await llm.complete([{"role": "user", "content": "hi"}])


async def test_missing_api_key_is_config_error(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "")

    with pytest.raises(ConfigError):
        await llm.complete([{"role": "user", "content": "hi"}])


async def test_openrouter_sends_attribution_headers(monkeypatch):
    monkeypatch.setenv("FF_LLM_PROVIDER", "openrouter")
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["referer"] = request.headers.get("http-referer")
        seen["title"] = request.headers.get("x-title")
        return httpx.Response(200, json=_completion("ok"))

    _install_transport(handler)

    await llm.complete_simple("hi", system="be nice")

    assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
    assert seen["referer"] == "https://mindmesh.app"
    assert seen["title"] == "MindMesh"


def test_model_for_task():
    assert llm.model_for_task("chat") == "llama-3.1-8b-instant"
    assert llm.model_for_task("planning") == "llama-3.1-70b-versatile"
    assert llm.model_for_task("simulation") == "llama-3.1-70b-versatile"
