"""Retry decorator around any AIProvider.

Providers never retry on their own. Wrapping one in ``RetryingProvider``
retries transient ``ProviderError``s (transport failures, HTTP 408/429/5xx)
with exponential backoff; normalization errors and client errors surface
immediately.
"""

from __future__ import annotations

import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.core.errors import ProviderError
from app.providers.contracts import AIProvider
from app.schemas.domain import (
    ComparisonResponse,
    ContractType,
    ExtractionResponse,
    RiskAssessmentResponse,
)

logger = logging.getLogger(__name__)


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, ProviderError) and exc.retryable


class RetryingProvider:
    """AIProvider decorator that re-issues transient failures."""

    def __init__(
        self,
        inner: AIProvider,
        *,
        max_attempts: int = 3,
        min_wait: float = 1.0,
        max_wait: float = 60.0,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.inner = inner
        self.max_attempts = max_attempts
        self._retry = retry(
            retry=retry_if_exception(is_retryable),
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    @property
    def name(self) -> str:
        return self.inner.name

    @property
    def model(self) -> str:
        return self.inner.model

    async def extract_clauses(
        self, text: str, contract_type: ContractType
    ) -> ExtractionResponse:
        return await self._retry(self.inner.extract_clauses)(text, contract_type)

    async def score_risk(
        self, extraction: ExtractionResponse, contract_type: ContractType
    ) -> RiskAssessmentResponse:
        return await self._retry(self.inner.score_risk)(extraction, contract_type)

    async def compare_documents(
        self, text_a: str, text_b: str, contract_type: ContractType
    ) -> ComparisonResponse:
        return await self._retry(self.inner.compare_documents)(text_a, text_b, contract_type)

    async def generate_summary(
        self, extraction: ExtractionResponse, risk: RiskAssessmentResponse
    ) -> str:
        return await self._retry(self.inner.generate_summary)(extraction, risk)

    async def aclose(self) -> None:
        await self.inner.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"RetryingProvider({self.inner!r}, max_attempts={self.max_attempts})"


__all__ = ["RetryingProvider", "is_retryable"]
