"""Business logic services."""

from app.services.normalizer import (
    parse_comparison,
    parse_extraction,
    parse_risk,
    unwrap_json,
)
from app.services.risk_rules import apply_rules

__all__ = [
    "apply_rules",
    "parse_comparison",
    "parse_extraction",
    "parse_risk",
    "unwrap_json",
]
