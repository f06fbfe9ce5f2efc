"""AI provider package: interface, backends and factory."""

from app.providers.claude_impl import ClaudeProvider
from app.providers.contracts import AIProvider
from app.providers.ollama_impl import OllamaProvider
from app.providers.openai_impl import OpenAIProvider
from app.providers.retry import RetryingProvider

__all__ = [
    "AIProvider",
    "ClaudeProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "RetryingProvider",
]
