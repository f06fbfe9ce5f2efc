"""API request and record models for analysis endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.domain import (
    Difference,
    DocumentStatus,
    ExtractionResponse,
    RiskAssessmentResponse,
    RiskFlag,
)


class DocumentCreate(BaseModel):
    """Document registration payload; text extraction happens upstream."""

    filename: str
    contract_type: str
    raw_text: Optional[str] = None
    page_count: Optional[int] = None


class DocumentRecord(BaseModel):
    """Document as stored, without its raw text."""

    id: str
    filename: str
    contract_type: str
    page_count: Optional[int] = None
    processing_status: DocumentStatus
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DocumentStats(BaseModel):
    """Document counts by processing outcome."""

    total: int = 0
    analyzed: int = 0
    pending: int = 0
    failed: int = 0


class ExtractionRecord(BaseModel):
    """Persisted extraction with its provenance."""

    id: str
    document_id: str
    ai_provider: str
    ai_model: Optional[str] = None
    contract_type: str
    extracted_data: ExtractionResponse
    confidence_score: Optional[float] = None
    processing_time_ms: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RiskAssessmentRecord(BaseModel):
    """Persisted risk assessment (AI flags merged with rule flags)."""

    id: str
    document_id: str
    extraction_id: str
    overall_score: int
    risk_level: str
    flags: list[RiskFlag]
    summary: Optional[str] = None
    ai_provider: str
    created_at: datetime

    model_config = {"from_attributes": True}

    def to_response(self) -> RiskAssessmentResponse:
        return RiskAssessmentResponse(
            overall_score=self.overall_score,
            risk_level=self.risk_level,
            flags=self.flags,
            summary=self.summary or "",
        )


class ComparisonRecord(BaseModel):
    """Persisted comparison of two documents."""

    id: str
    document_a_id: str
    document_b_id: str
    differences: list[Difference]
    summary: Optional[str] = None
    ai_provider: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AnalysisResult(BaseModel):
    """Outcome of a full analysis run."""

    extraction: ExtractionRecord
    risk_assessment: RiskAssessmentRecord


class ComparisonRequest(BaseModel):
    document_a_id: str
    document_b_id: str


class SummaryResponse(BaseModel):
    document_id: str
    summary: str


class RiskDistribution(BaseModel):
    """Number of documents per latest risk level."""

    low: int = 0
    medium: int = 0
    high: int = 0


class TemplateCreate(BaseModel):
    name: str
    contract_type: str
    raw_text: str
    description: Optional[str] = None


class TemplateRecord(BaseModel):
    """Stored reference contract, without its raw text."""

    id: str
    name: str
    contract_type: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SettingValue(BaseModel):
    key: str
    value: Optional[str] = None


class SettingUpdate(BaseModel):
    value: str


__all__ = [
    "AnalysisResult",
    "ComparisonRecord",
    "ComparisonRequest",
    "DocumentCreate",
    "DocumentRecord",
    "DocumentStats",
    "ExtractionRecord",
    "RiskAssessmentRecord",
    "RiskDistribution",
    "SettingUpdate",
    "SettingValue",
    "SummaryResponse",
    "TemplateCreate",
    "TemplateRecord",
]
