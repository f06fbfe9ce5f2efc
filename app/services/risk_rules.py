"""Deterministic risk rules applied on top of the model's assessment.

``apply_rules`` only looks at which clause types were extracted (and the
termination date), so its output is identical for identical input regardless
of which AI backend produced the extraction. Flags are document-wide
findings and never carry a clause reference.
"""

from __future__ import annotations

from typing import Callable

from app.schemas.domain import ContractType, ExtractionResponse, RiskFlag


def _flag(category: str, severity: str, description: str, suggestion: str) -> RiskFlag:
    return RiskFlag(
        category=category,
        severity=severity,
        description=description,
        clause_reference=None,
        suggestion=suggestion,
    )


def _is_termination_clause(clause_type: str) -> bool:
    return (
        "termination" in clause_type
        or clause_type.startswith("term_and")
        or clause_type == "lease_term"
    )


# --------------------
# Universal rules
# --------------------
def _check_governing_law(extraction: ExtractionResponse, types: set[str]) -> list[RiskFlag]:
    if "governing_law" in types:
        return []
    return [
        _flag(
            "governing_law",
            "medium",
            "No governing law clause found. Disputes may be harder to resolve "
            "without a specified jurisdiction.",
            "Add a governing law clause specifying the applicable jurisdiction.",
        )
    ]


def _check_termination(extraction: ExtractionResponse, types: set[str]) -> list[RiskFlag]:
    if any(_is_termination_clause(t) for t in types):
        return []
    return [
        _flag(
            "termination",
            "high",
            "No termination clause found. Without clear termination terms, exiting "
            "this agreement may be difficult.",
            "Add explicit termination provisions including notice period and "
            "termination for cause/convenience.",
        )
    ]


# --------------------
# Contract-type rules
# --------------------
def _nda_rules(extraction: ExtractionResponse, types: set[str]) -> list[RiskFlag]:
    flags = []
    if "exclusions" not in types:
        flags.append(
            _flag(
                "confidentiality",
                "high",
                "No exclusions to confidential information defined. This could mean "
                "publicly available information is improperly classified as confidential.",
                "Add standard exclusions: publicly available info, independently "
                "developed info, info received from third parties.",
            )
        )
    if "term_and_duration" not in types and extraction.termination_date is None:
        flags.append(
            _flag(
                "termination",
                "medium",
                "NDA has no specified duration or expiration. Confidentiality "
                "obligations may be perpetual.",
                "Specify a reasonable duration for confidentiality obligations "
                "(typically 2-5 years).",
            )
        )
    return flags


def _service_agreement_rules(extraction: ExtractionResponse, types: set[str]) -> list[RiskFlag]:
    flags = []
    if "indemnification" not in types:
        flags.append(
            _flag(
                "indemnification",
                "high",
                "No indemnification clause found. Without indemnification, there is no "
                "protection against third-party claims.",
                "Add mutual indemnification with reasonable caps tied to contract value.",
            )
        )
    if "limitation_of_liability" not in types:
        flags.append(
            _flag(
                "liability",
                "high",
                "No limitation of liability clause found. Exposure to damages is "
                "potentially unlimited.",
                "Add a limitation of liability clause capping damages (typically 1-2x "
                "annual contract value).",
            )
        )
    if "intellectual_property" not in types:
        flags.append(
            _flag(
                "other",
                "medium",
                "No intellectual property clause found. IP ownership of deliverables "
                "may be unclear.",
                "Add clear IP assignment or licensing terms for work product.",
            )
        )
    return flags


def _lease_rules(extraction: ExtractionResponse, types: set[str]) -> list[RiskFlag]:
    flags = []
    if "security_deposit" not in types:
        flags.append(
            _flag(
                "payment",
                "medium",
                "No security deposit clause found. Terms for deposit handling and "
                "return are undefined.",
                "Add security deposit terms including amount, conditions for "
                "withholding, and return timeline.",
            )
        )
    if "maintenance_and_repairs" not in types:
        flags.append(
            _flag(
                "other",
                "medium",
                "No maintenance and repairs clause found. Responsibilities for "
                "property upkeep are unclear.",
                "Define maintenance responsibilities for both landlord and tenant.",
            )
        )
    return flags


Rule = Callable[[ExtractionResponse, set[str]], list[RiskFlag]]

UNIVERSAL_RULES: tuple[Rule, ...] = (_check_governing_law, _check_termination)

CONTRACT_RULES: dict[ContractType, Rule] = {
    ContractType.nda: _nda_rules,
    ContractType.service_agreement: _service_agreement_rules,
    ContractType.lease: _lease_rules,
}


def apply_rules(extraction: ExtractionResponse, contract_type: ContractType) -> list[RiskFlag]:
    """Return rule-based flags for an extraction, universal rules first."""
    types = extraction.clause_types()
    flags: list[RiskFlag] = []
    for rule in (*UNIVERSAL_RULES, CONTRACT_RULES[contract_type]):
        flags.extend(rule(extraction, types))
    return flags


__all__ = ["apply_rules"]
