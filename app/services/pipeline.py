"""Analysis pipeline: extraction -> risk assessment -> optional summary.

Document status moves ``pending -> analyzing -> extracted -> analyzed``.
A provider or normalization failure in either AI stage stores the message,
sets ``error`` and re-raises the original exception. Validation failures
(missing text, unknown contract type) leave the status untouched.

Each persistence step runs in its own short session from ``session_factory``
inside a worker thread; no session is held open across a provider call.
Cancellation (a caller timeout) and persistence failures after the provider
returns also move the document to ``error``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, ContextManager, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.errors import AnalysisError, PersistenceError, ValidationError
from app.db import repository
from app.db.session import get_sync_db
from app.providers.contracts import AIProvider
from app.providers.factory import provider_from_db
from app.schemas.api import (
    AnalysisResult,
    ComparisonRecord,
    ExtractionRecord,
    RiskAssessmentRecord,
)
from app.schemas.domain import (
    HIGH_RISK_MIN,
    ComparisonResponse,
    ContractType,
    DocumentStatus,
    ExtractionResponse,
    RiskAssessmentResponse,
)
from app.services.risk_rules import apply_rules

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], ContextManager[Session]]


def escalate(risk: RiskAssessmentResponse) -> RiskAssessmentResponse:
    """Raise score and level to at least "high" when any flag is high severity.

    Never lowers an existing score.
    """
    if risk.overall_score >= HIGH_RISK_MIN:
        return risk
    if not any(flag.severity == "high" for flag in risk.flags):
        return risk
    return risk.model_copy(update={"overall_score": HIGH_RISK_MIN, "risk_level": "high"})


def merge_rule_flags(
    risk: RiskAssessmentResponse,
    extraction: ExtractionResponse,
    contract_type: ContractType,
) -> RiskAssessmentResponse:
    """Append rule-engine flags after the AI flags, then apply escalation."""
    rule_flags = apply_rules(extraction, contract_type)
    merged = risk.model_copy(update={"flags": [*risk.flags, *rule_flags]})
    return escalate(merged)


def _require_text(text: Optional[str], what: str) -> str:
    if text is None or not text.strip():
        raise ValidationError(f"{what} has no extracted text")
    return text


class AnalysisPipeline:
    """Drives one document at a time through the analysis stages.

    Session work is synchronous and runs in a worker thread through
    ``asyncio.to_thread``; only provider calls run on the event loop.
    """

    def __init__(
        self,
        provider: AIProvider,
        session_factory: SessionFactory = get_sync_db,
    ):
        self.provider = provider
        self._session = session_factory

    # --------------------
    # Stage 1: extraction
    # --------------------
    async def run_extraction(self, document_id: str) -> ExtractionRecord:
        raw_text, contract_type = await asyncio.to_thread(self._begin_extraction, document_id)

        logger.info(
            "Extracting clauses for document %s (%s, %d chars) with %s",
            document_id,
            contract_type.value,
            len(raw_text),
            self.provider.name,
        )

        start = time.perf_counter()
        try:
            extraction = await self.provider.extract_clauses(raw_text, contract_type)
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            result = await asyncio.to_thread(
                self._store_extraction, document_id, contract_type, extraction, elapsed_ms
            )
        except BaseException as exc:
            await self._mark_failed(document_id, exc)
            raise

        logger.info(
            "Extraction %s complete for document %s: %d clauses in %d ms",
            result.id,
            document_id,
            len(extraction.clauses),
            elapsed_ms,
        )
        return result

    def _begin_extraction(self, document_id: str) -> tuple[str, ContractType]:
        with self._session() as db:
            doc = repository.get_document(db, document_id)
            raw_text = _require_text(doc.raw_text, "Document")
            contract_type = ContractType.parse(doc.contract_type)
            repository.update_status(db, document_id, DocumentStatus.analyzing)
        return raw_text, contract_type

    def _store_extraction(
        self,
        document_id: str,
        contract_type: ContractType,
        extraction: ExtractionResponse,
        elapsed_ms: int,
    ) -> ExtractionRecord:
        with self._session() as db:
            record = repository.add_extraction(
                db,
                document_id=document_id,
                ai_provider=self.provider.name,
                ai_model=self.provider.model,
                contract_type=contract_type.value,
                extracted_data=extraction.model_dump(mode="json"),
                processing_time_ms=elapsed_ms,
            )
            repository.update_status(db, document_id, DocumentStatus.extracted)
            return ExtractionRecord.model_validate(record)

    # --------------------
    # Stage 2: risk assessment
    # --------------------
    async def run_risk_assessment(
        self, document_id: str, extraction_id: str
    ) -> RiskAssessmentRecord:
        extraction, contract_type = await asyncio.to_thread(
            self._load_for_risk, document_id, extraction_id
        )

        logger.info("Scoring risk for document %s with %s", document_id, self.provider.name)

        try:
            ai_risk = await self.provider.score_risk(extraction, contract_type)
            risk = merge_rule_flags(ai_risk, extraction, contract_type)
            if risk.overall_score != ai_risk.overall_score:
                logger.info(
                    "Escalated risk score for document %s from %d to %d",
                    document_id,
                    ai_risk.overall_score,
                    risk.overall_score,
                )
            result = await asyncio.to_thread(
                self._store_risk_assessment, document_id, extraction_id, risk
            )
        except BaseException as exc:
            await self._mark_failed(document_id, exc)
            raise

        logger.info(
            "Risk assessment %s for document %s: score=%d level=%s flags=%d",
            result.id,
            document_id,
            result.overall_score,
            result.risk_level,
            len(result.flags),
        )
        return result

    def _load_for_risk(
        self, document_id: str, extraction_id: str
    ) -> tuple[ExtractionResponse, ContractType]:
        with self._session() as db:
            record = repository.get_extraction(db, extraction_id)
            if record.document_id != document_id:
                raise ValidationError(
                    f"Extraction {extraction_id} does not belong to document {document_id}"
                )
            contract_type = ContractType.parse(record.contract_type)
            extraction = _load_extraction(record.extracted_data, extraction_id)
        return extraction, contract_type

    def _store_risk_assessment(
        self, document_id: str, extraction_id: str, risk: RiskAssessmentResponse
    ) -> RiskAssessmentRecord:
        with self._session() as db:
            assessment = repository.add_risk_assessment(
                db,
                document_id=document_id,
                extraction_id=extraction_id,
                overall_score=risk.overall_score,
                risk_level=risk.risk_level,
                flags=[flag.model_dump(mode="json") for flag in risk.flags],
                summary=risk.summary,
                ai_provider=self.provider.name,
            )
            repository.update_status(db, document_id, DocumentStatus.analyzed)
            return RiskAssessmentRecord.model_validate(assessment)

    async def run_full_analysis(self, document_id: str) -> AnalysisResult:
        """Stage 1 then stage 2; the first failure is returned to the caller."""
        extraction = await self.run_extraction(document_id)
        risk = await self.run_risk_assessment(document_id, extraction.id)
        return AnalysisResult(extraction=extraction, risk_assessment=risk)

    # --------------------
    # Stage 3: summary (no status transition)
    # --------------------
    async def generate_summary(self, document_id: str) -> str:
        extraction, risk = await asyncio.to_thread(self._load_for_summary, document_id)
        logger.info("Generating summary for document %s with %s", document_id, self.provider.name)
        return await self.provider.generate_summary(extraction, risk)

    def _load_for_summary(
        self, document_id: str
    ) -> tuple[ExtractionResponse, RiskAssessmentResponse]:
        with self._session() as db:
            repository.get_document(db, document_id)
            ext_row = repository.latest_extraction(db, document_id)
            risk_row = repository.latest_risk_assessment(db, document_id)
            if ext_row is None or risk_row is None:
                raise ValidationError(
                    f"Document {document_id} needs an extraction and a risk assessment "
                    "before a summary can be generated"
                )
            extraction = _load_extraction(ext_row.extracted_data, ext_row.id)
            risk = RiskAssessmentRecord.model_validate(risk_row).to_response()
        return extraction, risk

    # --------------------
    # Comparison
    # --------------------
    async def compare_documents(self, document_a_id: str, document_b_id: str) -> ComparisonRecord:
        text_a, text_b, contract_type = await asyncio.to_thread(
            self._load_for_comparison, document_a_id, document_b_id
        )

        logger.info(
            "Comparing documents %s and %s with %s",
            document_a_id,
            document_b_id,
            self.provider.name,
        )
        comparison = await self.provider.compare_documents(text_a, text_b, contract_type)
        return await asyncio.to_thread(
            self._store_comparison, document_a_id, document_b_id, comparison
        )

    def _load_for_comparison(
        self, document_a_id: str, document_b_id: str
    ) -> tuple[str, str, ContractType]:
        with self._session() as db:
            doc_a = repository.get_document(db, document_a_id)
            doc_b = repository.get_document(db, document_b_id)
            text_a = _require_text(doc_a.raw_text, "Document A")
            text_b = _require_text(doc_b.raw_text, "Document B")
            contract_type = ContractType.parse(doc_a.contract_type)
        return text_a, text_b, contract_type

    def _store_comparison(
        self, document_a_id: str, document_b_id: str, comparison: ComparisonResponse
    ) -> ComparisonRecord:
        with self._session() as db:
            row = repository.add_comparison(
                db,
                document_a_id=document_a_id,
                document_b_id=document_b_id,
                differences=[d.model_dump(mode="json") for d in comparison.differences],
                summary=comparison.summary,
                ai_provider=self.provider.name,
            )
            return ComparisonRecord.model_validate(row)

    # --------------------
    # Helpers
    # --------------------
    async def _mark_failed(self, document_id: str, exc: BaseException) -> None:
        """Record a stage failure on the document.

        A failure to write the error status is logged, so the caller still
        sees the original exception.
        """
        if isinstance(exc, asyncio.CancelledError):
            message = "Analysis cancelled or timed out"
        else:
            message = str(exc) or type(exc).__name__
        logger.warning("Analysis of document %s failed: %s", document_id, message)
        try:
            await asyncio.to_thread(self._set_error, document_id, message)
        except AnalysisError:
            logger.exception("Could not record failure for document %s", document_id)

    def _set_error(self, document_id: str, message: str) -> None:
        with self._session() as db:
            repository.update_status(db, document_id, DocumentStatus.error, message)


def build_pipeline(session_factory: SessionFactory = get_sync_db) -> AnalysisPipeline:
    """Pipeline bound to the provider currently selected in the settings table."""
    with session_factory() as db:
        provider = provider_from_db(db)
    return AnalysisPipeline(provider, session_factory=session_factory)


def _load_extraction(data: dict, extraction_id: str) -> ExtractionResponse:
    try:
        return ExtractionResponse.model_validate(data)
    except PydanticValidationError as e:
        raise PersistenceError(f"Stored extraction {extraction_id} is corrupted: {e}") from e


__all__ = ["AnalysisPipeline", "build_pipeline", "escalate", "merge_rule_flags"]
