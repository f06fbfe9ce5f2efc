"""Shared operation flow for prompt-completion backends.

Each backend only implements ``_complete``: send one system instruction and
one user prompt, return the model's raw text. Prompt construction and
normalization live here so every backend behaves the same way.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

import httpx

from app.core.errors import ProviderError
from app.schemas.domain import (
    ComparisonResponse,
    ContractType,
    ExtractionResponse,
    RiskAssessmentResponse,
)
from app.services import normalizer, prompts

logger = logging.getLogger(__name__)

STRUCTURED_TEMPERATURE = 0.1
PROSE_TEMPERATURE = 0.3

EXTRACTION_MAX_TOKENS = 4096
RISK_MAX_TOKENS = 2048
COMPARISON_MAX_TOKENS = 4096
SUMMARY_MAX_TOKENS = 2048


def to_prompt_json(record: Any) -> str:
    """Serialize a domain record for embedding in a prompt."""
    if isinstance(record, ExtractionResponse):
        # raw_json would repeat every clause a second time
        return record.model_dump_json(indent=2, exclude={"raw_json"})
    return record.model_dump_json(indent=2)


class ChatProvider(ABC):
    """Base class implementing the four operations over ``_complete``."""

    name: str = "base"
    label: str = "Provider"

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    async def _complete(
        self, system: str, prompt: str, *, structured: bool, max_tokens: int
    ) -> str:
        """Send one request and return the model's raw text."""

    async def aclose(self) -> None:
        """Release network resources."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"

    # --------------------
    # Operations
    # --------------------
    async def extract_clauses(
        self, text: str, contract_type: ContractType
    ) -> ExtractionResponse:
        raw = await self._complete(
            prompts.extraction_system_prompt(contract_type),
            prompts.extraction_user_prompt(text, contract_type),
            structured=True,
            max_tokens=EXTRACTION_MAX_TOKENS,
        )
        return normalizer.parse_extraction(raw)

    async def score_risk(
        self, extraction: ExtractionResponse, contract_type: ContractType
    ) -> RiskAssessmentResponse:
        raw = await self._complete(
            prompts.risk_system_prompt(),
            prompts.risk_user_prompt(to_prompt_json(extraction), contract_type),
            structured=True,
            max_tokens=RISK_MAX_TOKENS,
        )
        return normalizer.parse_risk(raw)

    async def compare_documents(
        self, text_a: str, text_b: str, contract_type: ContractType
    ) -> ComparisonResponse:
        raw = await self._complete(
            prompts.comparison_system_prompt(),
            prompts.comparison_user_prompt(text_a, text_b, contract_type),
            structured=True,
            max_tokens=COMPARISON_MAX_TOKENS,
        )
        return normalizer.parse_comparison(raw)

    async def generate_summary(
        self, extraction: ExtractionResponse, risk: RiskAssessmentResponse
    ) -> str:
        return await self._complete(
            prompts.summary_system_prompt(),
            prompts.summary_user_prompt(to_prompt_json(extraction), to_prompt_json(risk)),
            structured=False,
            max_tokens=SUMMARY_MAX_TOKENS,
        )


class HttpChatProvider(ChatProvider):
    """ChatProvider that talks JSON over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        model: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 120.0,
    ):
        super().__init__(model)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        headers: Optional[Mapping[str, str]] = None,
    ) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON object."""
        try:
            response = await self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("%s request to %s failed: %s", self.label, url, e)
            raise ProviderError(self.name, f"{self.label} connection failed: {e}") from e

        if not response.is_success:
            logger.warning("%s returned HTTP %d", self.label, response.status_code)
            raise ProviderError(
                self.name,
                f"{self.label} returned an error",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                self.name,
                f"Failed to parse {self.label} response: {e}",
                body=response.text,
                retryable=False,
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(
                self.name,
                f"Failed to parse {self.label} response: expected a JSON object",
                body=response.text,
                retryable=False,
            )
        return data


__all__ = [
    "ChatProvider",
    "HttpChatProvider",
    "PROSE_TEMPERATURE",
    "STRUCTURED_TEMPERATURE",
    "to_prompt_json",
]
