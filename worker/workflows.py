"""Temporal Workflows for contract analysis.

This module contains the AnalysisWorkflow that runs a full analysis
through two activities: extract_document -> assess_risk
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from worker.activities import assess_risk, extract_document

# One attempt per stage. A failed stage has already set the document to
# "error", and re-running it is a new analysis request, not a retry. Transient
# provider failures are retried inside the activity by RetryingProvider.
STAGE_RETRY_POLICY = RetryPolicy(maximum_attempts=1)
STAGE_TIMEOUT = timedelta(minutes=5)


@workflow.defn
class AnalysisWorkflow:
    """Workflow that orchestrates a full document analysis.

    This workflow:
    1. Extracts structured clauses from the document text
    2. Scores risk for that extraction and merges rule-based flags

    Any stage failure fails the workflow without a retry; the document
    status already records the error and a new run must be requested.
    """

    @workflow.run
    async def run(self, document_id: str) -> dict:
        """Execute the analysis workflow.

        Args:
            document_id: UUID of the document to analyze.

        Returns:
            Dict with status, document_id, extraction_id and risk_assessment_id.
        """
        workflow.logger.info("Starting analysis workflow for document %s", document_id)

        extraction = await workflow.execute_activity(
            extract_document,
            document_id,
            start_to_close_timeout=STAGE_TIMEOUT,
            retry_policy=STAGE_RETRY_POLICY,
        )

        workflow.logger.info(
            "Extraction %s stored for document %s", extraction["id"], document_id
        )

        assessment = await workflow.execute_activity(
            assess_risk,
            args=[document_id, extraction["id"]],
            start_to_close_timeout=STAGE_TIMEOUT,
            retry_policy=STAGE_RETRY_POLICY,
        )

        workflow.logger.info(
            "Analysis workflow completed for document %s: score=%s level=%s",
            document_id,
            assessment["overall_score"],
            assessment["risk_level"],
        )

        return {
            "status": "analyzed",
            "document_id": document_id,
            "extraction_id": extraction["id"],
            "risk_assessment_id": assessment["id"],
        }


__all__ = ["AnalysisWorkflow", "STAGE_RETRY_POLICY", "STAGE_TIMEOUT"]
