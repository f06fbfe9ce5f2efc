"""Temporal Activities for the contract analysis workflow.

This module contains the activities executed by the worker:
- extract_document: run clause extraction for a document and persist it
- assess_risk: score risk for a stored extraction and persist the assessment

Both activities build the AI provider from the settings table (falling back
to environment variables) at call time, so a provider switch takes effect on
the next activity without restarting the worker. Database work runs in a
worker thread, so the activities never block the worker event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from temporalio import activity

from app.services.pipeline import build_pipeline

logger = logging.getLogger(__name__)


@activity.defn
async def extract_document(document_id: str) -> dict[str, Any]:
    """Extract clauses for a document.

    Args:
        document_id: UUID of the document to analyze.

    Returns:
        Dict representation of the stored ExtractionRecord.

    Raises:
        ValidationError: Document has no text or an unknown contract type.
        NotFoundError: Document does not exist.
        ProviderError: AI backend failed (document marked as error).
        NormalizationError: Model output was not valid JSON (document marked as error).
    """
    pipeline = await asyncio.to_thread(build_pipeline)
    logger.info(
        "Running extraction for document %s with %s (%s)",
        document_id,
        pipeline.provider.name,
        pipeline.provider.model,
    )
    async with pipeline.provider:
        record = await pipeline.run_extraction(document_id)
    return record.model_dump(mode="json")


@activity.defn
async def assess_risk(document_id: str, extraction_id: str) -> dict[str, Any]:
    """Score risk for a stored extraction.

    Args:
        document_id: UUID of the document the extraction belongs to.
        extraction_id: UUID of the extraction to assess.

    Returns:
        Dict representation of the stored RiskAssessmentRecord.
    """
    pipeline = await asyncio.to_thread(build_pipeline)
    logger.info("Running risk assessment for document %s, extraction %s", document_id, extraction_id)
    async with pipeline.provider:
        record = await pipeline.run_risk_assessment(document_id, extraction_id)
    return record.model_dump(mode="json")


__all__ = ["assess_risk", "extract_document"]
