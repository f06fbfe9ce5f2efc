"""Tests for prompt builders and input truncation."""

from __future__ import annotations

from unittest.mock import patch

from app.schemas.domain import ContractType
from app.services import prompts
from app.services.prompts import truncate_text


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("Short text.", 100) == "Short text."

    def test_cuts_at_sentence_boundary(self):
        text = "A" * 85 + ". " + "B" * 50
        assert truncate_text(text, 100) == "A" * 85 + "."

    def test_hard_cut_when_no_late_period(self):
        text = "A" * 10 + ". " + "B" * 200
        result = truncate_text(text, 100)
        assert len(result) == 100
        assert result.endswith("B")


class TestPrompts:
    def test_extraction_prompt_embeds_schema_and_text(self):
        prompt = prompts.extraction_user_prompt("The Tenant shall pay rent.", ContractType.lease)

        assert "Lease Agreement" in prompt
        assert prompts.EXTRACTION_SCHEMAS[ContractType.lease] in prompt
        assert "The Tenant shall pay rent." in prompt

    def test_extraction_system_prompt_demands_json(self):
        system = prompts.extraction_system_prompt(ContractType.nda)
        assert "Non-Disclosure Agreement" in system
        assert "valid JSON only" in system

    def test_every_contract_type_has_schema(self):
        assert set(prompts.EXTRACTION_SCHEMAS) == set(ContractType)

    def test_extraction_input_is_truncated(self):
        text = "word " * 100
        with patch.object(prompts.settings, "LLM_MAX_CHARS", 50):
            prompt = prompts.extraction_user_prompt(text, ContractType.nda)
        assert text not in prompt
        assert text[:50] in prompt

    def test_comparison_splits_budget_between_documents(self):
        with patch.object(prompts.settings, "LLM_MAX_CHARS", 40):
            prompt = prompts.comparison_user_prompt("a" * 100, "b" * 100, ContractType.nda)
        assert "a" * 20 in prompt
        assert "a" * 21 not in prompt
        assert "b" * 20 in prompt
        assert "b" * 21 not in prompt

    def test_risk_prompt_states_bands(self):
        prompt = prompts.risk_user_prompt("{}", ContractType.service_agreement)
        assert '"low" (0-33)' in prompt
        assert '"high" (67-100)' in prompt
        assert "Service Agreement" in prompt

    def test_summary_prompt_is_plain_text(self):
        assert "plain text only" in prompts.summary_system_prompt()
        prompt = prompts.summary_user_prompt('{"clauses": []}', '{"overall_score": 10}')
        assert '{"overall_score": 10}' in prompt
