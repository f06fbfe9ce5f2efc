"""Ensure logging setup does not crash and quiets client libraries."""

import logging

from app.core.logging import setup_logging


def test_setup_logging():
    setup_logging()
    logger = logging.getLogger()
    # Should configure without raising; ensure at least one handler attached
    assert logger.handlers


def test_client_libraries_quieted(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    setup_logging()
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("openai").level == logging.WARNING
