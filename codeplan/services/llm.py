"""
LLM client for the Gemini generateContent API.

The upstream has no separate system/user roles, so both prompts are sent as
a single text part. Generation parameters come from Settings and are the same
for every call.
"""
import logging

import httpx

from codeplan.config import Settings
from codeplan.errors import ConfigError, ProtocolError, TransportError

logger = logging.getLogger(__name__)


class LLMClient:
    """Single-turn text generation. No retry, no streaming."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    def _build_request_body(self, system_prompt: str, user_prompt: str) -> dict:
        combined_prompt = f"{system_prompt}\n\n{user_prompt}"
        return {
            "contents": [
                {"parts": [{"text": combined_prompt}]}
            ],
            "generationConfig": {
                "temperature": self.settings.llm_temperature,
                "topK": self.settings.llm_top_k,
                "topP": self.settings.llm_top_p,
                "maxOutputTokens": self.settings.max_tokens,
            }
        }

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str | None = None
    ) -> str:
        """
        Send the prompts and return the first candidate's text.

        Raises:
            ConfigError: no API key configured
            TransportError: the request could not be completed
            ProtocolError: non-2xx status, or no text in the response
        """
        api_key = self.settings.gemini_api_key
        if not api_key:
            raise ConfigError("GEMINI_API_KEY is not set")

        model = model or self.settings.model_planner
        base_url = self.settings.llm_base_url.rstrip("/")
        url = f"{base_url}/models/{model}:generateContent"
        body = self._build_request_body(system_prompt, user_prompt)

        logger.info(f"Calling {model} ({len(body['contents'][0]['parts'][0]['text'])} prompt chars)")
        logger.debug(f"System prompt:\n{system_prompt[:2000]}")
        logger.debug(f"User prompt:\n{user_prompt[:2000]}")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.llm_timeout,
                transport=self._transport
            ) as client:
                response = await client.post(url, params={"key": api_key}, json=body)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Request to {model} failed: {e}")
            raise TransportError(f"Failed to call Gemini API: {e}") from e

        if not response.is_success:
            error_text = response.text
            logger.error(f"Gemini API returned {response.status_code}: {error_text[:500]}")
            raise ProtocolError(
                f"Gemini API request failed ({response.status_code}): {error_text}",
                status=response.status_code,
                body=error_text
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProtocolError(
                f"Gemini API returned invalid JSON: {e}",
                status=response.status_code,
                body=response.text
            ) from e

        content = _extract_text(data)
        if not content:
            raise ProtocolError(
                "No content in Gemini response",
                status=response.status_code,
                body=response.text
            )

        usage = data.get("usageMetadata", {}) if isinstance(data, dict) else {}
        logger.debug(f"Tokens: {usage.get('totalTokenCount', 'n/a')}")
        logger.debug(f"LLM raw response:\n{content[:2000]}")
        return content


def _extract_text(data) -> str | None:
    """candidates[0].content.parts[0].text, or None if any level is missing."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None
