"""Local generation backend (Ollama ``/api/generate``)."""

from __future__ import annotations

from typing import Optional

import httpx

from app.core.errors import ProviderError
from app.providers.base import PROSE_TEMPERATURE, STRUCTURED_TEMPERATURE, HttpChatProvider

DEFAULT_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3"


class OllamaProvider(HttpChatProvider):
    """Single prompt/system request with JSON-constrained decoding for structured calls."""

    name = "ollama"
    label = "Ollama"

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        model: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 120.0,
    ):
        super().__init__(model or DEFAULT_MODEL, client=client, timeout=timeout)
        self.base_url = base_url.rstrip("/")

    async def _complete(
        self, system: str, prompt: str, *, structured: bool, max_tokens: int
    ) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "system": system,
            "stream": False,
            "options": {
                "temperature": STRUCTURED_TEMPERATURE if structured else PROSE_TEMPERATURE,
                "num_predict": max_tokens,
            },
        }
        if structured:
            payload["format"] = "json"

        data = await self._post_json(f"{self.base_url}/api/generate", payload)

        text = data.get("response")
        if not isinstance(text, str):
            raise ProviderError(
                self.name,
                "Failed to parse Ollama response: missing 'response' field",
                retryable=False,
            )
        return text


__all__ = ["DEFAULT_MODEL", "DEFAULT_URL", "OllamaProvider"]
