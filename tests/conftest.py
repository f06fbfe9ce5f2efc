"""Pytest configuration and fixtures."""

import os

# Set test database URL BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"

from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db import repository
from app.db.session import Base
from app.schemas.domain import (
    ComparisonResponse,
    Difference,
    ExtractedClause,
    ExtractionResponse,
    RiskAssessmentResponse,
    RiskFlag,
)


@pytest.fixture(scope="function")
def sqlite_sessionmaker(tmp_path):
    """Create a SQLite database with schema for testing."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    yield SessionLocal
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_sessionmaker):
    """Commit-on-success session context manager bound to the test database."""

    @contextmanager
    def factory():
        session = sqlite_sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


@pytest.fixture
def make_document(session_factory):
    """Insert a document and return its id."""

    def _make(contract_type="nda", raw_text="This Agreement is made between Acme and Beta.", **kwargs):
        with session_factory() as db:
            doc = repository.create_document(
                db,
                filename=kwargs.pop("filename", "contract.pdf"),
                contract_type=contract_type,
                raw_text=raw_text,
                **kwargs,
            )
            return doc.id

    return _make


def clause(clause_type, text="Quoted clause text.", importance="medium"):
    return ExtractedClause(
        clause_type=clause_type,
        title=clause_type.replace("_", " ").title(),
        text=text,
        importance=importance,
    )


class FakeProvider:
    """In-memory AIProvider returning canned records.

    Set ``errors[op]`` to make an operation raise.
    """

    name = "fake"
    model = "fake-model"

    def __init__(self):
        self.extraction = ExtractionResponse(
            parties=["Acme Corp", "Beta LLC"],
            effective_date="2024-01-01",
            clauses=[clause("governing_law"), clause("termination"), clause("exclusions")],
            contract_type="nda",
            raw_json="{}",
        )
        self.risk = RiskAssessmentResponse(
            overall_score=20,
            risk_level="low",
            flags=[RiskFlag(category="other", severity="low", description="Minor wording issue")],
            summary="Low risk overall.",
        )
        self.comparison = ComparisonResponse(
            differences=[Difference(category="payment", description="Fee increased")],
            summary="Version B raises fees.",
        )
        self.summary = "Executive summary of the contract."
        self.errors = {}
        self.calls = []
        self.closed = False

    async def _result(self, op, result):
        self.calls.append(op)
        if op in self.errors:
            raise self.errors[op]
        return result

    async def extract_clauses(self, text, contract_type):
        return await self._result("extract_clauses", self.extraction)

    async def score_risk(self, extraction, contract_type):
        return await self._result("score_risk", self.risk)

    async def compare_documents(self, text_a, text_b, contract_type):
        return await self._result("compare_documents", self.comparison)

    async def generate_summary(self, extraction, risk):
        return await self._result("generate_summary", self.summary)

    async def aclose(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def mock_db_session():
    """Create a mock async database session."""
    mock_session = MagicMock()
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    mock_session.execute = AsyncMock()
    mock_session.add = MagicMock()
    mock_session.commit = AsyncMock()
    return mock_session
