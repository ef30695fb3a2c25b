"""LLM client tests against a mocked HTTP transport."""

import json

import httpx
import pytest

from codeplan.config import Settings
from codeplan.errors import ConfigError, ProtocolError, TransportError
from codeplan.services.llm import LLMClient


def make_settings(**overrides) -> Settings:
    values = {
        "gemini_api_key": "test-key",
        "llm_base_url": "https://llm.example.com/v1/",
        "model_planner": "gemini-planner",
    }
    values.update(overrides)
    return Settings(**values)


def ok_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.mark.asyncio
async def test_generate_sends_combined_prompt_and_fixed_config() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=ok_body("plan text"))

    client = LLMClient(make_settings(), transport=httpx.MockTransport(handler))
    text = await client.generate("SYSTEM", "USER")

    assert text == "plan text"
    assert seen["url"].path == "/v1/models/gemini-planner:generateContent"
    assert seen["url"].params["key"] == "test-key"
    assert seen["body"]["contents"] == [{"parts": [{"text": "SYSTEM\n\nUSER"}]}]
    assert seen["body"]["generationConfig"] == {
        "temperature": 0.7,
        "topK": 40,
        "topP": 0.95,
        "maxOutputTokens": 8192,
    }


@pytest.mark.asyncio
async def test_generate_uses_explicit_model() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(200, json=ok_body("ok"))

    client = LLMClient(make_settings(), transport=httpx.MockTransport(handler))
    await client.generate("s", "u", model="gemini-executor")

    assert seen["path"].endswith("/models/gemini-executor:generateContent")


@pytest.mark.asyncio
async def test_missing_key_raises_config_error_without_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = LLMClient(make_settings(gemini_api_key=""), transport=httpx.MockTransport(handler))

    with pytest.raises(ConfigError):
        await client.generate("s", "u")


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = LLMClient(make_settings(), transport=httpx.MockTransport(handler))

    with pytest.raises(TransportError, match="connection refused"):
        await client.generate("s", "u")


@pytest.mark.asyncio
async def test_error_status_raises_protocol_error_with_status_and_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "quota exceeded"}})

    client = LLMClient(make_settings(), transport=httpx.MockTransport(handler))

    with pytest.raises(ProtocolError) as exc_info:
        await client.generate("s", "u")

    assert exc_info.value.status == 429
    assert "quota exceeded" in exc_info.value.body
    assert "(429)" in str(exc_info.value)
    assert "quota exceeded" in str(exc_info.value)


@pytest.mark.asyncio
async def test_plain_text_error_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream unavailable")

    client = LLMClient(make_settings(), transport=httpx.MockTransport(handler))

    with pytest.raises(ProtocolError, match="upstream unavailable"):
        await client.generate("s", "u")


@pytest.mark.parametrize("body", [
    {},
    {"candidates": []},
    {"candidates": [{"content": {"parts": []}}]},
    {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
    {"candidates": [{"finishReason": "SAFETY"}]},
])
@pytest.mark.asyncio
async def test_missing_text_raises_protocol_error(body: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    client = LLMClient(make_settings(), transport=httpx.MockTransport(handler))

    with pytest.raises(ProtocolError, match="No content"):
        await client.generate("s", "u")


@pytest.mark.asyncio
async def test_non_json_success_body_raises_protocol_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>proxy page</html>")

    client = LLMClient(make_settings(), transport=httpx.MockTransport(handler))

    with pytest.raises(ProtocolError, match="invalid JSON"):
        await client.generate("s", "u")


@pytest.mark.asyncio
async def test_undecodable_success_body_raises_protocol_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"\xff\xfe\xfa garbage")

    client = LLMClient(make_settings(), transport=httpx.MockTransport(handler))

    with pytest.raises(ProtocolError, match="invalid JSON"):
        await client.generate("s", "u")


@pytest.mark.asyncio
async def test_malformed_base_url_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=ok_body("unreachable"))

    settings = make_settings(llm_base_url="https://llm.example.com/\x00v1")
    client = LLMClient(settings, transport=httpx.MockTransport(handler))

    with pytest.raises(TransportError, match="Failed to call Gemini API"):
        await client.generate("s", "u")
