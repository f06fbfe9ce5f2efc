"""Tests for environment-driven configuration."""

from app.core.config import Settings
from worker.config import WorkerSettings


def test_defaults(monkeypatch):
    for key in ("AI_PROVIDER", "LLM_MAX_RETRIES", "OLLAMA_MODEL"):
        monkeypatch.delenv(key, raising=False)
    settings = Settings(_env_file=None)

    assert settings.AI_PROVIDER == "ollama"
    assert settings.OLLAMA_MODEL == "llama3"
    assert settings.LLM_MAX_RETRIES == 0
    assert settings.LLM_MAX_CHARS == 200000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ai_provider", "openai")
    monkeypatch.setenv("LLM_MAX_RETRIES", "2")
    settings = Settings(_env_file=None)

    assert settings.AI_PROVIDER == "openai"
    assert settings.LLM_MAX_RETRIES == 2


def test_worker_settings(monkeypatch):
    monkeypatch.setenv("WORKER_TASK_QUEUE", "custom-queue")
    monkeypatch.setenv("MAX_CONCURRENT_ACTIVITIES", "8")
    settings = WorkerSettings()

    assert settings.WORKER_TASK_QUEUE == "custom-queue"
    assert settings.MAX_CONCURRENT_ACTIVITIES == 8
    assert "custom-queue" in repr(settings)
