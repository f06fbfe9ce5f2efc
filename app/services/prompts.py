"""Prompt builders for the four provider operations.

Structured prompts embed a JSON example the model is asked to follow; the
normalizer does not rely on the model honouring it.
"""

from __future__ import annotations

from app.core.config import settings
from app.schemas.domain import ContractType

JSON_ONLY = "You MUST respond with valid JSON only - no markdown, no explanations, no preamble."


def truncate_text(text: str, max_chars: int) -> str:
    """Truncate text to max_chars, preserving complete sentences where possible."""
    if len(text) <= max_chars:
        return text

    truncated = text[:max_chars]
    # Try to end at a sentence boundary
    last_period = truncated.rfind(".")
    if last_period > max_chars * 0.8:  # Only if we keep at least 80%
        truncated = truncated[: last_period + 1]

    return truncated


def _clause_example(*clause_types: str) -> str:
    rows = ",\n".join(
        f'    {{ "clause_type": "{ct}", "title": "...", "text": "exact quoted text", '
        f'"section_reference": "Section X", "importance": "high|medium|low" }}'
        for ct in clause_types
    )
    return rows


def _extraction_schema(parties: str, contract_type: ContractType, clauses: str) -> str:
    return (
        "{\n"
        f'  "parties": [{parties}],\n'
        '  "effective_date": "YYYY-MM-DD or null",\n'
        '  "termination_date": "YYYY-MM-DD or null",\n'
        '  "clauses": [\n'
        f"{clauses}\n"
        "  ],\n"
        f'  "contract_type": "{contract_type.value}"\n'
        "}"
    )


EXTRACTION_SCHEMAS = {
    ContractType.nda: _extraction_schema(
        '"Party A name", "Party B name"',
        ContractType.nda,
        _clause_example(
            "definition_of_confidential_info",
            "obligations_of_receiving_party",
            "exclusions",
            "term_and_duration",
            "return_of_materials",
            "remedies",
            "non_solicitation",
            "governing_law",
            "dispute_resolution",
        ),
    ),
    ContractType.service_agreement: _extraction_schema(
        '"Service Provider name", "Client name"',
        ContractType.service_agreement,
        _clause_example(
            "scope_of_services",
            "payment_terms",
            "term_and_termination",
            "indemnification",
            "limitation_of_liability",
            "intellectual_property",
            "confidentiality",
            "warranties",
            "force_majeure",
            "governing_law",
            "dispute_resolution",
        ),
    ),
    ContractType.lease: _extraction_schema(
        '"Landlord name", "Tenant name"',
        ContractType.lease,
        _clause_example(
            "premises_description",
            "rent_and_payment",
            "security_deposit",
            "lease_term",
            "maintenance_and_repairs",
            "use_restrictions",
            "insurance_requirements",
            "termination_and_renewal",
            "default_and_remedies",
            "governing_law",
        ),
    ),
}

RISK_ASSESSMENT_SCHEMA = """{
  "overall_score": 45,
  "risk_level": "medium",
  "flags": [
    {
      "category": "indemnification|liability|termination|non_compete|confidentiality|payment|governing_law|other",
      "severity": "high|medium|low",
      "description": "Clear description of the risk",
      "clause_reference": "Section X or null",
      "suggestion": "Recommended action to mitigate"
    }
  ],
  "summary": "2-3 sentence risk overview"
}"""

COMPARISON_SCHEMA = """{
  "differences": [
    {
      "category": "parties|payment|term|liability|indemnification|confidentiality|termination|other",
      "diff_type": "substantive|formatting",
      "description": "What changed and why it matters",
      "text_a": "Exact text from document A or null",
      "text_b": "Exact text from document B or null",
      "significance": "high|medium|low"
    }
  ],
  "summary": "Overall comparison summary"
}"""


def extraction_system_prompt(contract_type: ContractType) -> str:
    return (
        f"You are a legal document analysis expert specializing in {contract_type.display_name}. "
        f"Extract key clauses and terms from the provided contract text. {JSON_ONLY}"
    )


def extraction_user_prompt(text: str, contract_type: ContractType) -> str:
    return (
        f"Analyze the following {contract_type.display_name} and extract all key clauses.\n\n"
        "RULES:\n"
        "1. Quote exact text from the document - do not paraphrase\n"
        "2. Use null for any clause or field not found in the document\n"
        "3. Respond with ONLY the JSON object below - no other text\n\n"
        f"JSON Schema:\n{EXTRACTION_SCHEMAS[contract_type]}\n\n"
        f"DOCUMENT TEXT:\n---\n{truncate_text(text, settings.LLM_MAX_CHARS)}\n---"
    )


def risk_system_prompt() -> str:
    return (
        "You are a legal risk assessment expert. Analyze the extracted clauses "
        f"and identify potential risks. {JSON_ONLY}"
    )


def risk_user_prompt(extraction_json: str, contract_type: ContractType) -> str:
    return (
        f"Analyze the following extracted clauses from a {contract_type.display_name} "
        "and provide a risk assessment.\n\n"
        "RULES:\n"
        "1. Score overall risk 0-100 (0=no risk, 100=extreme risk)\n"
        '2. Set risk_level to "low" (0-33), "medium" (34-66), or "high" (67-100)\n'
        "3. Flag specific issues with severity, description, and fix suggestions\n"
        "4. Common risks: missing indemnification cap, one-sided termination, auto-renewal traps, "
        "broad non-compete, unlimited liability, missing governing law\n"
        "5. Respond with ONLY the JSON object below - no other text\n\n"
        f"JSON Schema:\n{RISK_ASSESSMENT_SCHEMA}\n\n"
        f"EXTRACTED CLAUSES:\n---\n{extraction_json}\n---"
    )


def comparison_system_prompt() -> str:
    return (
        "You are a legal document comparison expert. Compare two contract versions "
        f"and categorize differences. {JSON_ONLY}"
    )


def comparison_user_prompt(text_a: str, text_b: str, contract_type: ContractType) -> str:
    # Both documents share one context window
    limit = settings.LLM_MAX_CHARS // 2
    return (
        f"Compare these two versions of a {contract_type.display_name} "
        "and identify all differences.\n\n"
        "RULES:\n"
        '1. Categorize each difference as "substantive" or "formatting"\n'
        '2. Rate significance as "high", "medium", or "low"\n'
        "3. Quote exact text from each document\n"
        "4. Respond with ONLY the JSON object below - no other text\n\n"
        f"JSON Schema:\n{COMPARISON_SCHEMA}\n\n"
        f"DOCUMENT A:\n---\n{truncate_text(text_a, limit)}\n---\n\n"
        f"DOCUMENT B:\n---\n{truncate_text(text_b, limit)}\n---"
    )


def summary_system_prompt() -> str:
    return (
        "You are a legal document summarizer. Write a concise, client-ready executive summary. "
        "Respond with plain text only - no JSON, no markdown headers."
    )


def summary_user_prompt(extraction_json: str, risk_json: str) -> str:
    return (
        "Write a 2-3 paragraph executive summary of this contract review for a client.\n\n"
        "Include:\n"
        "1. Key parties and terms\n"
        "2. Notable clauses and their implications\n"
        "3. Risk highlights and recommended actions\n\n"
        "Keep it professional, concise, and actionable.\n\n"
        f"EXTRACTED CLAUSES:\n{extraction_json}\n\n"
        f"RISK ASSESSMENT:\n{risk_json}"
    )
