"""Tests for provider configuration resolution and construction."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from app.core.errors import ValidationError
from app.db import repository
from app.providers import ClaudeProvider, OllamaProvider, OpenAIProvider, RetryingProvider
from app.providers.factory import (
    ProviderConfig,
    build_provider,
    env_lookup,
    layered_lookup,
    provider_from_db,
    resolve_provider_config,
)


def dict_lookup(values):
    return lambda key: values.get(key)


class TestResolveProviderConfig:
    def test_defaults_to_ollama(self):
        config = resolve_provider_config(dict_lookup({}))

        assert config.provider == "ollama"
        assert config.model == "llama3"
        assert config.base_url == "http://localhost:11434"
        assert config.api_key is None

    def test_ollama_overrides(self):
        config = resolve_provider_config(
            dict_lookup({"ai_provider": "Ollama", "ollama_url": "http://gpu:11434", "ollama_model": "mistral"})
        )
        assert config.base_url == "http://gpu:11434"
        assert config.model == "mistral"

    def test_claude_requires_key(self):
        with pytest.raises(ValidationError, match="Claude API key not configured"):
            resolve_provider_config(dict_lookup({"ai_provider": "claude"}))

    def test_claude(self):
        config = resolve_provider_config(dict_lookup({"ai_provider": "claude", "claude_api_key": "sk-ant"}))

        assert config.provider == "claude"
        assert config.model == "claude-sonnet-4-5-20250929"
        assert config.api_key.get_secret_value() == "sk-ant"
        assert "sk-ant" not in repr(config)

    def test_openai(self):
        config = resolve_provider_config(
            dict_lookup({"ai_provider": "openai", "openai_api_key": "sk-oa", "openai_model": "gpt-4o-mini"})
        )
        assert config.provider == "openai"
        assert config.model == "gpt-4o-mini"

    def test_openai_requires_key(self):
        with pytest.raises(ValidationError, match="OpenAI API key not configured"):
            resolve_provider_config(dict_lookup({"ai_provider": "openai"}))

    def test_unknown_provider(self):
        with pytest.raises(ValidationError, match="Unknown AI provider: gemini"):
            resolve_provider_config(dict_lookup({"ai_provider": "gemini"}))


class TestLookups:
    def test_layered_lookup_first_non_empty_wins(self):
        lookup = layered_lookup(
            dict_lookup({"a": "  ", "b": "first"}),
            dict_lookup({"a": "second", "b": "ignored", "c": " padded "}),
        )
        assert lookup("a") == "second"
        assert lookup("b") == "first"
        assert lookup("c") == "padded"
        assert lookup("missing") is None

    def test_env_lookup_reads_settings(self):
        with patch("app.providers.factory.settings.OLLAMA_MODEL", "phi3"):
            assert env_lookup("ollama_model") == "phi3"
        with patch("app.providers.factory.settings.CLAUDE_API_KEY", ""):
            assert env_lookup("claude_api_key") is None
        assert env_lookup("not_a_setting") is None


class TestBuildProvider:
    @pytest.mark.asyncio
    async def test_builds_each_backend(self):
        ollama = build_provider(ProviderConfig(provider="ollama", model="llama3"), max_retries=0)
        claude = build_provider(
            ProviderConfig(provider="claude", model="m", api_key="k"), max_retries=0
        )
        openai = build_provider(
            ProviderConfig(provider="openai", model="gpt-4o", api_key="k"), max_retries=0
        )

        assert isinstance(ollama, OllamaProvider)
        assert isinstance(claude, ClaudeProvider)
        assert isinstance(openai, OpenAIProvider)
        assert claude.model == "m"

        for provider in (ollama, claude, openai):
            await provider.aclose()

    @pytest.mark.asyncio
    async def test_wraps_with_retries(self):
        provider = build_provider(ProviderConfig(provider="ollama", model="llama3"), max_retries=2)

        assert isinstance(provider, RetryingProvider)
        assert provider.max_attempts == 3
        assert provider.name == "ollama"
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_provider_from_db_prefers_settings_table(self, session_factory):
        with session_factory() as db:
            repository.set_setting(db, "ai_provider", "claude")
            repository.set_setting(db, "claude_api_key", "sk-from-db")
            repository.set_setting(db, "claude_model", "claude-test")

        with session_factory() as db:
            provider = provider_from_db(db, max_retries=0)

        assert isinstance(provider, ClaudeProvider)
        assert provider.model == "claude-test"
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_provider_from_db_falls_back_to_environment(self, session_factory):
        with patch("app.providers.factory.settings.AI_PROVIDER", "ollama"), patch(
            "app.providers.factory.settings.OLLAMA_MODEL", "env-model"
        ):
            with session_factory() as db:
                provider = provider_from_db(db, max_retries=0)

        assert isinstance(provider, OllamaProvider)
        assert provider.model == "env-model"
        await provider.aclose()
