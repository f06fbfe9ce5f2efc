"""Build the active AI provider from configuration.

Configuration is read through a key lookup so the same resolution works
against the settings table, the environment, or a plain dict in tests.
"""

from __future__ import annotations

from typing import Callable, Literal, Optional

from pydantic import BaseModel, SecretStr
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ValidationError
from app.db import repository
from app.providers import claude_impl, ollama_impl, openai_impl
from app.providers.contracts import AIProvider
from app.providers.retry import RetryingProvider

Lookup = Callable[[str], Optional[str]]

PROVIDER_NAMES = ("ollama", "claude", "openai")

# Keys understood by resolve_provider_config
SETTING_KEYS = (
    "ai_provider",
    "ollama_url",
    "ollama_model",
    "claude_api_key",
    "claude_model",
    "openai_api_key",
    "openai_model",
)


class ProviderConfig(BaseModel):
    """Resolved settings for one provider."""

    provider: Literal["ollama", "claude", "openai"]
    model: str
    base_url: Optional[str] = None
    api_key: Optional[SecretStr] = None


def env_lookup(key: str) -> Optional[str]:
    """Read a setting key from the environment-backed Settings object."""
    value = getattr(settings, key.upper(), None)
    if value is None or value == "":
        return None
    return str(value)


def layered_lookup(*lookups: Lookup) -> Lookup:
    """First non-empty value wins."""

    def lookup(key: str) -> Optional[str]:
        for source in lookups:
            value = source(key)
            if value is not None and value.strip() != "":
                return value.strip()
        return None

    return lookup


def resolve_provider_config(lookup: Lookup) -> ProviderConfig:
    """Resolve provider selection and its settings.

    Raises:
        ValidationError: Unknown provider name or missing cloud API key.
    """
    name = (lookup("ai_provider") or "ollama").lower()

    if name == "ollama":
        return ProviderConfig(
            provider="ollama",
            base_url=lookup("ollama_url") or ollama_impl.DEFAULT_URL,
            model=lookup("ollama_model") or ollama_impl.DEFAULT_MODEL,
        )
    if name == "claude":
        api_key = lookup("claude_api_key")
        if not api_key:
            raise ValidationError("Claude API key not configured")
        return ProviderConfig(
            provider="claude",
            api_key=api_key,
            model=lookup("claude_model") or claude_impl.DEFAULT_MODEL,
        )
    if name == "openai":
        api_key = lookup("openai_api_key")
        if not api_key:
            raise ValidationError("OpenAI API key not configured")
        return ProviderConfig(
            provider="openai",
            api_key=api_key,
            model=lookup("openai_model") or openai_impl.DEFAULT_MODEL,
        )
    raise ValidationError(f"Unknown AI provider: {name}")


def build_provider(
    config: ProviderConfig,
    *,
    max_retries: Optional[int] = None,
    timeout: Optional[float] = None,
) -> AIProvider:
    """Instantiate the configured provider, wrapped for retries if enabled."""
    timeout = float(settings.LLM_TIMEOUT_S if timeout is None else timeout)
    max_retries = settings.LLM_MAX_RETRIES if max_retries is None else max_retries

    if config.provider == "ollama":
        provider: AIProvider = ollama_impl.OllamaProvider(
            base_url=config.base_url or ollama_impl.DEFAULT_URL,
            model=config.model,
            timeout=timeout,
        )
    elif config.provider == "claude":
        provider = claude_impl.ClaudeProvider(
            config.api_key.get_secret_value(), config.model, timeout=timeout
        )
    else:
        provider = openai_impl.OpenAIProvider(
            config.api_key.get_secret_value(), config.model, timeout=timeout
        )

    if max_retries > 0:
        return RetryingProvider(provider, max_attempts=max_retries + 1)
    return provider


def provider_from_db(db: Session, **kwargs) -> AIProvider:
    """Build the provider from the settings table, falling back to environment."""
    lookup = layered_lookup(lambda key: repository.get_setting(db, key), env_lookup)
    return build_provider(resolve_provider_config(lookup), **kwargs)


__all__ = [
    "PROVIDER_NAMES",
    "ProviderConfig",
    "SETTING_KEYS",
    "build_provider",
    "env_lookup",
    "layered_lookup",
    "provider_from_db",
    "resolve_provider_config",
]
