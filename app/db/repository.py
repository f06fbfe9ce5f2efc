"""Repository helpers for documents, analysis records, templates and settings."""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.models import Comparison, Document, Extraction, RiskAssessment, Setting, Template
from app.schemas.domain import DocumentStatus


# --------------------
# Documents
# --------------------
def create_document(
    db: Session,
    *,
    filename: str,
    contract_type: str,
    raw_text: Optional[str] = None,
    page_count: Optional[int] = None,
    status: DocumentStatus = DocumentStatus.pending,
) -> Document:
    doc = Document(
        id=str(uuid4()),
        filename=filename,
        contract_type=contract_type,
        raw_text=raw_text,
        page_count=page_count,
        processing_status=status,
    )
    db.add(doc)
    db.flush()
    db.refresh(doc)
    return doc


def get_document(db: Session, document_id: str) -> Document:
    doc = db.get(Document, document_id)
    if doc is None:
        raise NotFoundError("Document", document_id)
    return doc


def update_status(
    db: Session,
    document_id: str,
    status: DocumentStatus,
    error_message: Optional[str] = None,
) -> Document:
    doc = get_document(db, document_id)
    doc.processing_status = status
    doc.error_message = error_message
    db.flush()
    return doc


def list_documents(db: Session) -> list[Document]:
    """All documents, newest first."""
    return db.query(Document).order_by(Document.created_at.desc()).all()


def document_stats(db: Session) -> dict[str, int]:
    """Document counts: total, analyzed, pending (incl. extracted) and failed."""
    rows = dict(
        db.query(Document.processing_status, func.count(Document.id))
        .group_by(Document.processing_status)
        .all()
    )
    return {
        "total": sum(rows.values()),
        "analyzed": rows.get(DocumentStatus.analyzed, 0),
        "pending": rows.get(DocumentStatus.pending, 0) + rows.get(DocumentStatus.extracted, 0),
        "failed": rows.get(DocumentStatus.error, 0),
    }


def delete_document(db: Session, document_id: str) -> None:
    db.query(Comparison).filter(
        (Comparison.document_a_id == document_id) | (Comparison.document_b_id == document_id)
    ).delete(synchronize_session=False)
    db.query(RiskAssessment).filter(RiskAssessment.document_id == document_id).delete()
    db.query(Extraction).filter(Extraction.document_id == document_id).delete()
    db.query(Document).filter(Document.id == document_id).delete()


# --------------------
# Extractions
# --------------------
def add_extraction(
    db: Session,
    *,
    document_id: str,
    ai_provider: str,
    contract_type: str,
    extracted_data: dict,
    ai_model: Optional[str] = None,
    confidence_score: Optional[float] = None,
    processing_time_ms: Optional[int] = None,
) -> Extraction:
    ext = Extraction(
        id=str(uuid4()),
        document_id=document_id,
        ai_provider=ai_provider,
        ai_model=ai_model,
        contract_type=contract_type,
        extracted_data=extracted_data,
        confidence_score=confidence_score,
        processing_time_ms=processing_time_ms,
    )
    db.add(ext)
    db.flush()
    db.refresh(ext)
    return ext


def get_extraction(db: Session, extraction_id: str) -> Extraction:
    ext = db.get(Extraction, extraction_id)
    if ext is None:
        raise NotFoundError("Extraction", extraction_id)
    return ext


def list_extractions(db: Session, document_id: str) -> list[Extraction]:
    """Extractions for a document, newest first."""
    return (
        db.query(Extraction)
        .filter(Extraction.document_id == document_id)
        .order_by(Extraction.created_at.desc())
        .all()
    )


def latest_extraction(db: Session, document_id: str) -> Optional[Extraction]:
    return (
        db.query(Extraction)
        .filter(Extraction.document_id == document_id)
        .order_by(Extraction.created_at.desc())
        .first()
    )


# --------------------
# Risk assessments
# --------------------
def add_risk_assessment(
    db: Session,
    *,
    document_id: str,
    extraction_id: str,
    overall_score: int,
    risk_level: str,
    flags: list,
    ai_provider: str,
    summary: Optional[str] = None,
) -> RiskAssessment:
    ra = RiskAssessment(
        id=str(uuid4()),
        document_id=document_id,
        extraction_id=extraction_id,
        overall_score=overall_score,
        risk_level=risk_level,
        flags=flags,
        summary=summary,
        ai_provider=ai_provider,
    )
    db.add(ra)
    db.flush()
    db.refresh(ra)
    return ra


def risk_assessments_for_document(db: Session, document_id: str) -> list[RiskAssessment]:
    """Risk assessments for a document, newest first."""
    return (
        db.query(RiskAssessment)
        .filter(RiskAssessment.document_id == document_id)
        .order_by(RiskAssessment.created_at.desc())
        .all()
    )


def latest_risk_assessment(db: Session, document_id: str) -> Optional[RiskAssessment]:
    return (
        db.query(RiskAssessment)
        .filter(RiskAssessment.document_id == document_id)
        .order_by(RiskAssessment.created_at.desc())
        .first()
    )


def risk_distribution(db: Session) -> dict[str, int]:
    """Count documents by the risk level of their latest assessment."""
    latest = (
        db.query(
            RiskAssessment.document_id,
            func.max(RiskAssessment.created_at).label("created_at"),
        )
        .group_by(RiskAssessment.document_id)
        .subquery()
    )
    rows = (
        db.query(RiskAssessment.risk_level, func.count(func.distinct(RiskAssessment.document_id)))
        .join(
            latest,
            (RiskAssessment.document_id == latest.c.document_id)
            & (RiskAssessment.created_at == latest.c.created_at),
        )
        .group_by(RiskAssessment.risk_level)
        .all()
    )
    counts = {"low": 0, "medium": 0, "high": 0}
    for level, count in rows:
        counts[level] = count
    return counts


# --------------------
# Comparisons
# --------------------
def add_comparison(
    db: Session,
    *,
    document_a_id: str,
    document_b_id: str,
    differences: list,
    ai_provider: str,
    summary: Optional[str] = None,
) -> Comparison:
    comparison = Comparison(
        id=str(uuid4()),
        document_a_id=document_a_id,
        document_b_id=document_b_id,
        differences=differences,
        summary=summary,
        ai_provider=ai_provider,
    )
    db.add(comparison)
    db.flush()
    db.refresh(comparison)
    return comparison


def comparisons_for_document(db: Session, document_id: str) -> list[Comparison]:
    """Comparisons where the document is either side, newest first."""
    return (
        db.query(Comparison)
        .filter((Comparison.document_a_id == document_id) | (Comparison.document_b_id == document_id))
        .order_by(Comparison.created_at.desc())
        .all()
    )


# --------------------
# Templates
# --------------------
def create_template(
    db: Session,
    *,
    name: str,
    contract_type: str,
    raw_text: str,
    description: Optional[str] = None,
) -> Template:
    template = Template(
        id=str(uuid4()),
        name=name,
        contract_type=contract_type,
        description=description,
        raw_text=raw_text,
    )
    db.add(template)
    db.flush()
    db.refresh(template)
    return template


def list_templates(db: Session) -> list[Template]:
    """Templates ordered by name."""
    return db.query(Template).order_by(Template.name).all()


def delete_template(db: Session, template_id: str) -> None:
    template = db.get(Template, template_id)
    if template is None:
        raise NotFoundError("Template", template_id)
    db.delete(template)
    db.flush()


# --------------------
# Settings
# --------------------
def get_setting(db: Session, key: str) -> Optional[str]:
    row = db.get(Setting, key)
    return row.value if row is not None else None


def set_setting(db: Session, key: str, value: str) -> Setting:
    row = db.get(Setting, key)
    if row is None:
        row = Setting(key=key, value=value)
        db.add(row)
    else:
        row.value = value
    db.flush()
    return row
