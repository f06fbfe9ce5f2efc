"""Logging configuration."""

import logging
import os

# Chatty client libraries only log above this level unless LOG_LEVEL is DEBUG.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logging() -> None:
    """Configure application logging."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if level != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
