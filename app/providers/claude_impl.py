"""Anthropic Messages API backend.

Claude tends to wrap JSON in markdown fences despite instructions; the
normalizer unwraps it, so this module returns the text as received.
"""

from __future__ import annotations

from typing import Optional

import httpx

from app.core.errors import ProviderError
from app.providers.base import PROSE_TEMPERATURE, STRUCTURED_TEMPERATURE, HttpChatProvider

DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
API_VERSION = "2023-06-01"


class ClaudeProvider(HttpChatProvider):
    name = "claude"
    label = "Claude API"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 120.0,
    ):
        super().__init__(model or DEFAULT_MODEL, client=client, timeout=timeout)
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def _complete(
        self, system: str, prompt: str, *, structured: bool, max_tokens: int
    ) -> str:
        payload = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": STRUCTURED_TEMPERATURE if structured else PROSE_TEMPERATURE,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": API_VERSION,
        }

        data = await self._post_json(f"{self.base_url}/messages", payload, headers)

        content = data.get("content")
        if not isinstance(content, list):
            raise ProviderError(
                self.name,
                "Failed to parse Claude response: missing 'content' list",
                retryable=False,
            )
        for block in content:
            if isinstance(block, dict) and isinstance(block.get("text"), str):
                return block["text"]
        raise ProviderError(self.name, "Empty response from Claude", retryable=False)


__all__ = ["ClaudeProvider", "DEFAULT_MODEL"]
