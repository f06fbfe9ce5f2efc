"""Database package: engines, sessions and models."""

from app.db.session import (
    AsyncSessionLocal,
    Base,
    SyncSessionLocal,
    get_db,
    get_sync_db,
    init_db,
)
from app.db.models import Comparison, Document, Extraction, RiskAssessment, Setting, Template

__all__ = [
    "AsyncSessionLocal",
    "Base",
    "Comparison",
    "Document",
    "Extraction",
    "RiskAssessment",
    "Setting",
    "SyncSessionLocal",
    "Template",
    "get_db",
    "get_sync_db",
    "init_db",
]
