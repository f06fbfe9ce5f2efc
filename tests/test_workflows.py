"""Tests for Temporal workflows (AnalysisWorkflow)."""

from __future__ import annotations

from uuid import uuid4

import pytest
from temporalio import activity
from temporalio.client import WorkflowFailureError
from temporalio.exceptions import ApplicationError
from temporalio.testing import WorkflowEnvironment
from temporalio.worker import Worker

from worker.workflows import STAGE_RETRY_POLICY, AnalysisWorkflow

# Track activity calls for verification
activity_calls: list[tuple[str, tuple]] = []


@activity.defn(name="extract_document")
async def mock_extract_document(document_id: str) -> dict:
    activity_calls.append(("extract_document", (document_id,)))
    return {"id": f"ext-{document_id}", "document_id": document_id}


@activity.defn(name="assess_risk")
async def mock_assess_risk(document_id: str, extraction_id: str) -> dict:
    activity_calls.append(("assess_risk", (document_id, extraction_id)))
    return {"id": "risk-1", "overall_score": 67, "risk_level": "high"}


extract_attempts = 0
risk_attempts = 0


@activity.defn(name="extract_document")
async def invalid_document(document_id: str) -> dict:
    global extract_attempts
    extract_attempts += 1
    raise ApplicationError("Document has no extracted text", type="ValidationError")


@activity.defn(name="assess_risk")
async def provider_overloaded(document_id: str, extraction_id: str) -> dict:
    global risk_attempts
    risk_attempts += 1
    raise ApplicationError("claude: Claude API returned an error (HTTP 529)", type="ProviderError")


async def run_workflow(env, activities, document_id):
    async with Worker(
        env.client,
        task_queue="test-queue",
        workflows=[AnalysisWorkflow],
        activities=activities,
    ):
        return await env.client.execute_workflow(
            AnalysisWorkflow.run,
            document_id,
            id=f"test-workflow-{uuid4()}",
            task_queue="test-queue",
        )


class TestAnalysisWorkflow:
    """Tests for AnalysisWorkflow."""

    @pytest.fixture(autouse=True)
    def reset_activity_calls(self):
        global extract_attempts, risk_attempts
        activity_calls.clear()
        extract_attempts = 0
        risk_attempts = 0

    @pytest.mark.asyncio
    async def test_workflow_happy_path(self):
        """Workflow runs extraction then risk assessment and reports both ids."""
        async with await WorkflowEnvironment.start_time_skipping() as env:
            result = await run_workflow(env, [mock_extract_document, mock_assess_risk], "doc-123")

        assert result == {
            "status": "analyzed",
            "document_id": "doc-123",
            "extraction_id": "ext-doc-123",
            "risk_assessment_id": "risk-1",
        }
        assert activity_calls == [
            ("extract_document", ("doc-123",)),
            ("assess_risk", ("doc-123", "ext-doc-123")),
        ]

    @pytest.mark.asyncio
    async def test_validation_error_not_retried(self):
        """A ValidationError fails the workflow on the first attempt."""
        async with await WorkflowEnvironment.start_time_skipping() as env:
            with pytest.raises(WorkflowFailureError):
                await run_workflow(env, [invalid_document, mock_assess_risk], "doc-bad")

        assert extract_attempts == 1
        assert activity_calls == []

    @pytest.mark.asyncio
    async def test_provider_error_is_not_retried_by_workflow(self):
        """A failed stage leaves the document in error; the workflow does not re-run it."""
        async with await WorkflowEnvironment.start_time_skipping() as env:
            with pytest.raises(WorkflowFailureError):
                await run_workflow(env, [mock_extract_document, provider_overloaded], "doc-busy")

        assert risk_attempts == 1
        assert activity_calls == [("extract_document", ("doc-busy",))]


class TestWorkflowDefinition:
    """Tests for workflow definition and decorators."""

    def test_workflow_has_defn_decorator(self):
        assert hasattr(AnalysisWorkflow, "__temporal_workflow_definition")

    def test_stages_run_once(self):
        assert STAGE_RETRY_POLICY.maximum_attempts == 1
