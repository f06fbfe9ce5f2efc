"""Document registration and analysis trigger endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from temporalio.exceptions import WorkflowAlreadyStartedError

from app.core.config import settings
from app.db import repository
from app.db.session import get_db
from app.schemas.api import DocumentCreate, DocumentRecord, DocumentStats
from app.schemas.domain import ContractType
from worker.workflows import AnalysisWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("", response_model=DocumentRecord, status_code=201)
async def create_document(payload: DocumentCreate, db: AsyncSession = Depends(get_db)):
    """Register a document whose text was extracted upstream."""
    contract_type = ContractType.parse(payload.contract_type)
    doc = await db.run_sync(
        repository.create_document,
        filename=payload.filename,
        contract_type=contract_type.value,
        raw_text=payload.raw_text,
        page_count=payload.page_count,
    )
    await db.commit()
    logger.info("Registered document %s (%s)", doc.id, contract_type.value)
    return DocumentRecord.model_validate(doc)


@router.get("", response_model=list[DocumentRecord])
async def list_documents(db: AsyncSession = Depends(get_db)):
    """All documents, newest first."""
    rows = await db.run_sync(repository.list_documents)
    return [DocumentRecord.model_validate(row) for row in rows]


@router.get("/stats", response_model=DocumentStats)
async def document_stats(db: AsyncSession = Depends(get_db)):
    counts = await db.run_sync(repository.document_stats)
    return DocumentStats(**counts)


@router.get("/{document_id}", response_model=DocumentRecord)
async def get_document(document_id: str, db: AsyncSession = Depends(get_db)):
    doc = await db.run_sync(repository.get_document, document_id)
    return DocumentRecord.model_validate(doc)


@router.delete("/{document_id}", status_code=204)
async def delete_document(document_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a document with its extractions, assessments and comparisons."""
    await db.run_sync(repository.get_document, document_id)
    await db.run_sync(repository.delete_document, document_id)
    await db.commit()
    logger.info("Deleted document %s", document_id)


@router.post("/{document_id}/analyze", status_code=202)
async def analyze_document(
    document_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Start the analysis workflow (extraction then risk assessment)."""
    await db.run_sync(repository.get_document, document_id)

    temporal = getattr(request.app.state, "temporal", None)
    if temporal is None:
        raise HTTPException(status_code=503, detail="Analysis service unavailable")

    workflow_id = f"analysis-{document_id}"
    try:
        await temporal.start_workflow(
            AnalysisWorkflow.run,
            document_id,
            id=workflow_id,
            task_queue=settings.WORKER_TASK_QUEUE,
        )
    except WorkflowAlreadyStartedError:
        raise HTTPException(status_code=409, detail="Analysis already running for this document")

    logger.info("Started analysis workflow for document %s", document_id)

    return {"document_id": document_id, "workflow_id": workflow_id, "status": "started"}
