"""Analysis read endpoints plus inline summary and comparison."""

import asyncio
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import repository
from app.db.session import get_db
from app.schemas.api import (
    ComparisonRecord,
    ComparisonRequest,
    ExtractionRecord,
    RiskAssessmentRecord,
    RiskDistribution,
    SummaryResponse,
)
from app.services.pipeline import build_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


@router.get("/documents/{document_id}/extractions", response_model=list[ExtractionRecord])
async def list_extractions(document_id: str, db: AsyncSession = Depends(get_db)):
    """Extraction history for a document, newest first."""
    await db.run_sync(repository.get_document, document_id)
    rows = await db.run_sync(repository.list_extractions, document_id)
    return [ExtractionRecord.model_validate(row) for row in rows]


@router.get(
    "/documents/{document_id}/risk-assessments",
    response_model=list[RiskAssessmentRecord],
)
async def list_risk_assessments(document_id: str, db: AsyncSession = Depends(get_db)):
    """Risk assessments for a document, newest first."""
    await db.run_sync(repository.get_document, document_id)
    rows = await db.run_sync(repository.risk_assessments_for_document, document_id)
    return [RiskAssessmentRecord.model_validate(row) for row in rows]


@router.get(
    "/documents/{document_id}/comparisons",
    response_model=list[ComparisonRecord],
)
async def list_comparisons(document_id: str, db: AsyncSession = Depends(get_db)):
    """Comparisons involving a document on either side, newest first."""
    await db.run_sync(repository.get_document, document_id)
    rows = await db.run_sync(repository.comparisons_for_document, document_id)
    return [ComparisonRecord.model_validate(row) for row in rows]


@router.get("/risk-distribution", response_model=RiskDistribution)
async def risk_distribution(db: AsyncSession = Depends(get_db)):
    counts = await db.run_sync(repository.risk_distribution)
    return RiskDistribution(**counts)


@router.post("/documents/{document_id}/summary", response_model=SummaryResponse)
async def generate_summary(document_id: str):
    """Executive summary from the latest extraction and risk assessment."""
    pipeline = await asyncio.to_thread(build_pipeline)
    async with pipeline.provider:
        summary = await pipeline.generate_summary(document_id)
    return SummaryResponse(document_id=document_id, summary=summary)


@router.post("/comparisons", response_model=ComparisonRecord, status_code=201)
async def compare_documents(payload: ComparisonRequest):
    """Compare two documents and store the result."""
    pipeline = await asyncio.to_thread(build_pipeline)
    async with pipeline.provider:
        record = await pipeline.compare_documents(payload.document_a_id, payload.document_b_id)
    logger.info(
        "Comparison %s stored (%d differences)", record.id, len(record.differences)
    )
    return record
