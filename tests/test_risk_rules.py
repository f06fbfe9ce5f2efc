"""Tests for the deterministic risk rule engine."""

from __future__ import annotations

import pytest

from app.schemas.domain import ContractType, ExtractedClause, ExtractionResponse
from app.services.risk_rules import apply_rules


def make_extraction(*clause_types: str, termination_date=None) -> ExtractionResponse:
    return ExtractionResponse(
        clauses=[
            ExtractedClause(clause_type=ct, title=ct, text=f"{ct} text") for ct in clause_types
        ],
        termination_date=termination_date,
    )


def categories(flags):
    return [(f.category, f.severity) for f in flags]


class TestUniversalRules:
    """Rules applied to every contract type."""

    def test_empty_nda_flags_everything(self):
        flags = apply_rules(make_extraction(), ContractType.nda)

        assert categories(flags) == [
            ("governing_law", "medium"),
            ("termination", "high"),
            ("confidentiality", "high"),
            ("termination", "medium"),
        ]

    @pytest.mark.parametrize(
        "clause_type",
        ["termination", "early_termination", "termination_for_cause", "term_and_duration", "lease_term"],
    )
    def test_termination_recognised(self, clause_type):
        flags = apply_rules(make_extraction("governing_law", clause_type), ContractType.lease)
        assert "termination" not in [f.category for f in flags]

    def test_plain_term_is_not_termination(self):
        flags = apply_rules(make_extraction("governing_law", "term"), ContractType.lease)
        assert ("termination", "high") in categories(flags)

    def test_flags_have_suggestions_and_no_clause_reference(self):
        for flag in apply_rules(make_extraction(), ContractType.service_agreement):
            assert flag.suggestion
            assert flag.clause_reference is None


class TestNdaRules:
    def test_complete_nda_has_no_flags(self):
        extraction = make_extraction("governing_law", "termination", "exclusions", "term_and_duration")
        assert apply_rules(extraction, ContractType.nda) == []

    def test_termination_date_satisfies_duration_rule(self):
        extraction = make_extraction(
            "governing_law", "termination", "exclusions", termination_date="2026-01-01"
        )
        assert apply_rules(extraction, ContractType.nda) == []

    def test_missing_duration(self):
        extraction = make_extraction("governing_law", "termination", "exclusions")
        flags = apply_rules(extraction, ContractType.nda)

        assert categories(flags) == [("termination", "medium")]
        assert "perpetual" in flags[0].description


class TestServiceAgreementRules:
    def test_missing_protections(self):
        extraction = make_extraction("governing_law", "termination")
        flags = apply_rules(extraction, ContractType.service_agreement)

        assert categories(flags) == [
            ("indemnification", "high"),
            ("liability", "high"),
            ("other", "medium"),
        ]

    def test_complete_service_agreement(self):
        extraction = make_extraction(
            "governing_law",
            "termination",
            "indemnification",
            "limitation_of_liability",
            "intellectual_property",
        )
        assert apply_rules(extraction, ContractType.service_agreement) == []


class TestLeaseRules:
    def test_missing_deposit_and_maintenance(self):
        extraction = make_extraction("governing_law", "lease_term")
        flags = apply_rules(extraction, ContractType.lease)

        assert categories(flags) == [("payment", "medium"), ("other", "medium")]

    def test_rules_are_deterministic(self):
        extraction = make_extraction("rent")
        first = apply_rules(extraction, ContractType.lease)
        second = apply_rules(extraction, ContractType.lease)
        assert first == second


class TestRuleProperties:
    def test_nda_with_only_confidentiality_flags_governing_law(self):
        flags = apply_rules(make_extraction("confidentiality"), ContractType.nda)
        assert "governing_law" in [f.category for f in flags]

    def test_nda_with_law_duration_and_exclusions(self):
        flags = apply_rules(
            make_extraction("governing_law", "term_and_duration", "exclusions"), ContractType.nda
        )
        found = [f.category for f in flags]
        assert "governing_law" not in found
        assert "confidentiality" not in found

    def test_service_agreement_missing_indemnity_and_liability(self):
        flags = apply_rules(
            make_extraction("governing_law", "termination", "intellectual_property"),
            ContractType.service_agreement,
        )
        found = [f.category for f in flags]
        assert "indemnification" in found
        assert "liability" in found
