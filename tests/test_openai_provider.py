"""Tests for the OpenAI backend with a mocked AsyncOpenAI client."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError, APIStatusError

from app.core.errors import ProviderError
from app.providers.openai_impl import DEFAULT_MODEL, OpenAIProvider
from app.schemas.domain import ContractType, ExtractionResponse, RiskAssessmentResponse

URL = "https://api.openai.test/v1/chat/completions"


def make_completion(content):
    completion = MagicMock()
    choice = MagicMock()
    choice.message.content = content
    completion.choices = [choice]
    return completion


def make_client(result=None, side_effect=None):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=result, side_effect=side_effect)
    client.close = AsyncMock()
    return client


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_compare_documents_uses_json_mode(self):
        body = {
            "differences": [{"category": "payment", "description": "Fee doubled", "significance": "high"}],
            "summary": "B is more expensive.",
        }
        client = make_client(make_completion(json.dumps(body)))
        provider = OpenAIProvider("sk-test", client=client)

        result = await provider.compare_documents("Fee is 10.", "Fee is 20.", ContractType.service_agreement)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == DEFAULT_MODEL
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 4096
        assert kwargs["messages"][0]["role"] == "system"
        assert "Fee is 10." in kwargs["messages"][1]["content"]
        assert "Fee is 20." in kwargs["messages"][1]["content"]
        assert result.differences[0].significance == "high"
        assert result.summary == "B is more expensive."

    @pytest.mark.asyncio
    async def test_summary_uses_text_mode(self):
        client = make_client(make_completion("Plain summary."))
        provider = OpenAIProvider("sk-test", "gpt-4o-mini", client=client)

        summary = await provider.generate_summary(
            ExtractionResponse(), RiskAssessmentResponse(overall_score=5, risk_level="low")
        )

        kwargs = client.chat.completions.create.call_args.kwargs
        assert summary == "Plain summary."
        assert "response_format" not in kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_empty_choices(self):
        completion = MagicMock()
        completion.choices = []
        provider = OpenAIProvider("sk-test", client=make_client(completion))

        with pytest.raises(ProviderError, match="Empty response from OpenAI"):
            await provider.extract_clauses("text", ContractType.nda)

    @pytest.mark.asyncio
    async def test_null_content(self):
        provider = OpenAIProvider("sk-test", client=make_client(make_completion(None)))

        with pytest.raises(ProviderError, match="Empty response from OpenAI"):
            await provider.extract_clauses("text", ContractType.nda)

    @pytest.mark.asyncio
    async def test_status_error_mapped(self):
        request = httpx.Request("POST", URL)
        response = httpx.Response(500, request=request, text='{"error": "server exploded"}')
        error = APIStatusError("server error", response=response, body=None)
        provider = OpenAIProvider("sk-test", client=make_client(side_effect=error))

        with pytest.raises(ProviderError) as excinfo:
            await provider.extract_clauses("text", ContractType.nda)

        assert excinfo.value.provider == "openai"
        assert excinfo.value.status_code == 500
        assert "server exploded" in excinfo.value.body
        assert excinfo.value.retryable is True

    @pytest.mark.asyncio
    async def test_bad_request_not_retryable(self):
        request = httpx.Request("POST", URL)
        response = httpx.Response(400, request=request, text='{"error": "bad"}')
        error = APIStatusError("bad request", response=response, body=None)
        provider = OpenAIProvider("sk-test", client=make_client(side_effect=error))

        with pytest.raises(ProviderError) as excinfo:
            await provider.extract_clauses("text", ContractType.nda)
        assert excinfo.value.retryable is False

    @pytest.mark.asyncio
    async def test_connection_error_mapped(self):
        error = APIConnectionError(request=httpx.Request("POST", URL))
        provider = OpenAIProvider("sk-test", client=make_client(side_effect=error))

        with pytest.raises(ProviderError, match="OpenAI connection failed") as excinfo:
            await provider.extract_clauses("text", ContractType.nda)
        assert excinfo.value.status_code is None
        assert excinfo.value.retryable is True

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        client = make_client(make_completion("{}"))
        async with OpenAIProvider("sk-test", client=client):
            pass
        client.close.assert_not_awaited()
