"""AI provider interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from app.schemas.domain import (
    ComparisonResponse,
    ContractType,
    ExtractionResponse,
    RiskAssessmentResponse,
)


@runtime_checkable
class AIProvider(Protocol):
    """Contract shared by every AI backend.

    Structured operations return normalized domain records; ``generate_summary``
    returns prose unchanged. Implementations raise ``ProviderError`` for
    transport, HTTP status, and envelope failures and never retry internally.
    """

    name: str
    model: str

    async def extract_clauses(
        self, text: str, contract_type: ContractType
    ) -> ExtractionResponse:
        ...

    async def score_risk(
        self, extraction: ExtractionResponse, contract_type: ContractType
    ) -> RiskAssessmentResponse:
        ...

    async def compare_documents(
        self, text_a: str, text_b: str, contract_type: ContractType
    ) -> ComparisonResponse:
        ...

    async def generate_summary(
        self, extraction: ExtractionResponse, risk: RiskAssessmentResponse
    ) -> str:
        ...

    async def aclose(self) -> None:
        ...


__all__ = ["AIProvider"]
