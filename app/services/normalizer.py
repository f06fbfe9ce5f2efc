"""Normalization of raw model output into validated domain records.

Every structured provider response passes through one of the three parsers
here, so all backends get identical tolerance:

1. Unwrap the first markdown code fence, if any.
2. Decode strictly into a "raw" shape where every field is optional.
   Decoding failure is the only fatal path (NormalizationError).
3. Fill defaults for missing fields.
4. Drop entries missing their required field(s).
5. Keep the post-unwrap text verbatim as ``raw_json`` on extractions.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import NormalizationError
from app.schemas.domain import (
    ComparisonResponse,
    Difference,
    ExtractedClause,
    ExtractionResponse,
    RiskAssessmentResponse,
    RiskFlag,
    risk_level_for_score,
)

logger = logging.getLogger(__name__)

# Snippet size carried in NormalizationError messages
MAX_SNIPPET_CHARS = 500

DEFAULT_SCORE = 50
DEFAULT_RISK_SUMMARY = "Risk assessment completed."
DEFAULT_COMPARISON_SUMMARY = "Comparison completed."

_LEVELS = ("high", "medium", "low")
_DIFF_TYPES = ("substantive", "formatting")

_JSON_FENCE = re.compile(r"```json(.*?)```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```(.*?)```", re.DOTALL)


# --------------------
# Raw shapes (every field optional)
# --------------------
class _Raw(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


class _RawClause(_Raw):
    clause_type: Optional[str] = None
    title: Optional[str] = None
    text: Optional[str] = None
    section_reference: Optional[str] = None
    importance: Optional[str] = None


class _RawExtraction(_Raw):
    parties: Optional[list[Optional[str]]] = None
    effective_date: Optional[str] = None
    termination_date: Optional[str] = None
    clauses: Optional[list[_RawClause]] = None
    contract_type: Optional[str] = None


class _RawFlag(_Raw):
    category: Optional[str] = None
    severity: Optional[str] = None
    description: Optional[str] = None
    clause_reference: Optional[str] = None
    suggestion: Optional[str] = None


class _RawRisk(_Raw):
    overall_score: Optional[float] = None
    risk_level: Optional[str] = None
    flags: Optional[list[_RawFlag]] = None
    summary: Optional[str] = None


class _RawDifference(_Raw):
    category: Optional[str] = None
    diff_type: Optional[str] = None
    description: Optional[str] = None
    text_a: Optional[str] = None
    text_b: Optional[str] = None
    significance: Optional[str] = None


class _RawComparison(_Raw):
    differences: Optional[list[_RawDifference]] = None
    summary: Optional[str] = None


RawT = TypeVar("RawT", bound=_Raw)


# --------------------
# Helpers
# --------------------
def unwrap_json(text: str) -> str:
    """Return the first fenced code block's content, or the trimmed text."""
    match = _JSON_FENCE.search(text) or _ANY_FENCE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _snippet(text: str) -> str:
    if len(text) <= MAX_SNIPPET_CHARS:
        return text
    return text[:MAX_SNIPPET_CHARS] + "..."


def _decode(text: str, raw_model: type[RawT], label: str) -> RawT:
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise NormalizationError(
            f"Failed to parse {label} JSON: {e}\nRaw: {_snippet(text)}", raw=text
        ) from e

    if not isinstance(data, dict):
        raise NormalizationError(
            f"Expected a JSON object for {label}, got {type(data).__name__}\nRaw: {_snippet(text)}",
            raw=text,
        )

    try:
        return raw_model.model_validate(data)
    except PydanticValidationError as e:
        raise NormalizationError(
            f"Unexpected {label} JSON structure: {e.error_count()} invalid field(s)\n"
            f"Raw: {_snippet(text)}",
            raw=text,
        ) from e


def _present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _choice(value: Optional[str], allowed: tuple[str, ...], default: str) -> str:
    """Lower-case value if it is one of ``allowed``; otherwise the default."""
    if value is None:
        return default
    candidate = value.strip().lower()
    return candidate if candidate in allowed else default


def _text_or(value: Optional[str], default: str) -> str:
    return value.strip() if _present(value) else default


# --------------------
# Parsers
# --------------------
def parse_extraction(text: str) -> ExtractionResponse:
    """Normalize clause extraction output."""
    json_str = unwrap_json(text)
    raw = _decode(json_str, _RawExtraction, "extraction")

    clauses = []
    for c in raw.clauses or []:
        if not (_present(c.clause_type) and _present(c.text)):
            continue
        clause_type = c.clause_type.strip()
        clauses.append(
            ExtractedClause(
                clause_type=clause_type,
                title=_text_or(c.title, clause_type),
                text=c.text,
                section_reference=c.section_reference,
                importance=_choice(c.importance, _LEVELS, "medium"),
            )
        )

    dropped = len(raw.clauses or []) - len(clauses)
    if dropped:
        logger.debug("Dropped %d incomplete clause(s) from extraction", dropped)

    return ExtractionResponse(
        parties=[p for p in raw.parties or [] if _present(p)],
        effective_date=raw.effective_date,
        termination_date=raw.termination_date,
        clauses=clauses,
        contract_type=raw.contract_type or "",
        raw_json=json_str,
    )


def parse_risk(text: str) -> RiskAssessmentResponse:
    """Normalize risk assessment output."""
    raw = _decode(unwrap_json(text), _RawRisk, "risk")

    score = DEFAULT_SCORE if raw.overall_score is None else round(raw.overall_score)
    score = max(0, min(100, score))
    level = _choice(raw.risk_level, _LEVELS, "")
    if not level:
        level = risk_level_for_score(score)

    flags = [
        RiskFlag(
            category=_text_or(f.category, "other"),
            severity=_choice(f.severity, _LEVELS, "medium"),
            description=f.description,
            clause_reference=f.clause_reference,
            suggestion=f.suggestion,
        )
        for f in raw.flags or []
        if _present(f.description)
    ]

    return RiskAssessmentResponse(
        overall_score=score,
        risk_level=level,
        flags=flags,
        summary=_text_or(raw.summary, DEFAULT_RISK_SUMMARY),
    )


def parse_comparison(text: str) -> ComparisonResponse:
    """Normalize document comparison output."""
    raw = _decode(unwrap_json(text), _RawComparison, "comparison")

    differences = [
        Difference(
            category=_text_or(d.category, "other"),
            diff_type=_choice(d.diff_type, _DIFF_TYPES, "substantive"),
            description=d.description,
            text_a=d.text_a,
            text_b=d.text_b,
            significance=_choice(d.significance, _LEVELS, "medium"),
        )
        for d in raw.differences or []
        if _present(d.description)
    ]

    return ComparisonResponse(
        differences=differences,
        summary=_text_or(raw.summary, DEFAULT_COMPARISON_SUMMARY),
    )


__all__ = [
    "DEFAULT_COMPARISON_SUMMARY",
    "DEFAULT_RISK_SUMMARY",
    "DEFAULT_SCORE",
    "parse_comparison",
    "parse_extraction",
    "parse_risk",
    "unwrap_json",
]
