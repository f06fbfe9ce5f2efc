"""OpenAI Chat Completions backend.

Structured calls use JSON response mode so the model emits bare JSON; the
summary call uses plain text mode.
"""

from __future__ import annotations

import logging
from typing import Optional

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from app.core.errors import ProviderError
from app.providers.base import PROSE_TEMPERATURE, STRUCTURED_TEMPERATURE, ChatProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"


class OpenAIProvider(ChatProvider):
    name = "openai"
    label = "OpenAI"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
        timeout: float = 120.0,
    ):
        super().__init__(model or DEFAULT_MODEL)
        self._owns_client = client is None
        # SDK retries are disabled; retry policy belongs to the caller
        self._client = client if client is not None else AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.close()

    async def _complete(
        self, system: str, prompt: str, *, structured: bool, max_tokens: int
    ) -> str:
        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": STRUCTURED_TEMPERATURE if structured else PROSE_TEMPERATURE,
            "max_tokens": max_tokens,
        }
        if structured:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except APIStatusError as e:
            logger.warning("OpenAI returned HTTP %d", e.status_code)
            raise ProviderError(
                self.name,
                "OpenAI returned an error",
                status_code=e.status_code,
                body=e.response.text,
            ) from e
        except APIConnectionError as e:
            logger.warning("OpenAI request failed: %s", e)
            raise ProviderError(self.name, f"OpenAI connection failed: {e}") from e
        except OpenAIError as e:
            raise ProviderError(
                self.name, f"Failed to parse OpenAI response: {e}", retryable=False
            ) from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise ProviderError(self.name, "Empty response from OpenAI", retryable=False)
        return content


__all__ = ["DEFAULT_MODEL", "OpenAIProvider"]
