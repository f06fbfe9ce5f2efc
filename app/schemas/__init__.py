"""Domain schemas for contract analysis."""

from app.schemas.domain import (
    ComparisonResponse,
    ContractType,
    Difference,
    DocumentStatus,
    ExtractedClause,
    ExtractionResponse,
    RiskAssessmentResponse,
    RiskFlag,
    risk_level_for_score,
)

__all__ = [
    "ComparisonResponse",
    "ContractType",
    "Difference",
    "DocumentStatus",
    "ExtractedClause",
    "ExtractionResponse",
    "RiskAssessmentResponse",
    "RiskFlag",
    "risk_level_for_score",
]
