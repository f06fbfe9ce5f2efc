"""Domain models for contract analysis."""

from __future__ import annotations

import enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.core.errors import ValidationError

Level = Literal["high", "medium", "low"]
RiskLevel = Literal["low", "medium", "high"]
DiffType = Literal["substantive", "formatting"]

# Inclusive upper bounds of the low and medium risk bands
LOW_RISK_MAX = 33
MEDIUM_RISK_MAX = 66
HIGH_RISK_MIN = MEDIUM_RISK_MAX + 1


class ContractType(str, enum.Enum):
    """Supported contract categories."""

    nda = "nda"
    service_agreement = "service_agreement"
    lease = "lease"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> "ContractType":
        """Return the variant for a canonical string; unknown strings are rejected."""
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown contract type: {value}") from None


_DISPLAY_NAMES = {
    ContractType.nda: "Non-Disclosure Agreement",
    ContractType.service_agreement: "Service Agreement",
    ContractType.lease: "Lease Agreement",
}


class DocumentStatus(str, enum.Enum):
    """Processing lifecycle of a document."""

    pending = "pending"
    analyzing = "analyzing"
    extracted = "extracted"
    analyzed = "analyzed"
    error = "error"


def risk_level_for_score(score: int) -> RiskLevel:
    """Band an overall score into a risk level."""
    if score <= LOW_RISK_MAX:
        return "low"
    if score <= MEDIUM_RISK_MAX:
        return "medium"
    return "high"


class ExtractedClause(BaseModel):
    """One identified contract clause."""

    clause_type: str
    title: str
    text: str
    section_reference: Optional[str] = None
    importance: Level = "medium"


class ExtractionResponse(BaseModel):
    """Normalized clause extraction output."""

    parties: list[str] = Field(default_factory=list)
    effective_date: Optional[str] = None
    termination_date: Optional[str] = None
    clauses: list[ExtractedClause] = Field(default_factory=list)
    contract_type: str = ""
    raw_json: str = ""

    def clause_types(self) -> set[str]:
        return {clause.clause_type for clause in self.clauses}


class RiskFlag(BaseModel):
    """One identified risk, from the model or the rule engine."""

    category: str = "other"
    severity: Level = "medium"
    description: str
    clause_reference: Optional[str] = None
    suggestion: Optional[str] = None


class RiskAssessmentResponse(BaseModel):
    """Normalized risk assessment, possibly merged with rule flags."""

    overall_score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    flags: list[RiskFlag] = Field(default_factory=list)
    summary: str = ""


class Difference(BaseModel):
    """One difference between two contract versions."""

    category: str = "other"
    diff_type: DiffType = "substantive"
    description: str
    text_a: Optional[str] = None
    text_b: Optional[str] = None
    significance: Level = "medium"


class ComparisonResponse(BaseModel):
    """Normalized pairwise document comparison."""

    differences: list[Difference] = Field(default_factory=list)
    summary: str = ""
