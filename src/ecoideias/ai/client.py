"""
OpenAI-compatible chat-completions client over httpx.

The base URL, key and model come from settings, so any provider speaking the
``/chat/completions`` protocol can be used.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from ecoideias.config import get_settings
from ecoideias.errors import AIServiceError

logger = structlog.get_logger()


class AIClient:
    """Thin async wrapper around a chat-completions endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        """Raise AIServiceError when no API key is set."""
        if not self.configured:
            logger.error("ai_not_configured")
            raise AIServiceError("AI service not configured")

    async def chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        json_mode: bool = False,
        max_tokens: int | None = None,
    ) -> str | None:
        """
        Send a chat completion request and return the first choice's content.

        Returns None when the provider answered without content.

        Raises:
            AIServiceError: If the request fails or the provider answers non-2xx.
        """
        self.ensure_configured()

        body: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}
        if max_tokens is not None:
            body["max_tokens"] = max_tokens

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json=body,
                )
        except httpx.HTTPError as e:
            logger.error("ai_request_failed", error=str(e))
            raise AIServiceError("AI request failed", detail=str(e)) from e

        if response.is_error:
            logger.error("ai_request_failed", status_code=response.status_code, body=response.text[:500])
            raise AIServiceError("AI request failed", detail=f"status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise AIServiceError("AI request failed", detail="non-JSON response") from e

        choices = data.get("choices") or []
        if not choices:
            return None
        content = (choices[0].get("message") or {}).get("content")
        return content or None

    async def chat_json(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
    ) -> dict[str, Any]:
        """
        Chat completion in JSON mode, parsed.

        Raises:
            AIServiceError: On request failure, missing content or invalid JSON.
        """
        content = await self.chat(messages, temperature=temperature, json_mode=True)
        if content is None:
            raise AIServiceError("AI request failed", detail="empty completion")
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("ai_invalid_json", content=content[:500])
            raise AIServiceError("AI request failed", detail="invalid JSON completion") from e
        if not isinstance(parsed, dict):
            raise AIServiceError("AI request failed", detail="completion is not a JSON object")
        return parsed


def get_ai_client() -> AIClient:
    """Build a client from settings (FastAPI dependency; override in tests)."""
    settings = get_settings()
    return AIClient(
        api_key=settings.ai_api_key,
        base_url=settings.ai_base_url,
        model=settings.ai_model,
        timeout=settings.ai_timeout_seconds,
    )
