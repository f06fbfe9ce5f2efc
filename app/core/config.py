"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./contract_review.db"

    # Temporal
    TEMPORAL_ADDRESS: str = "localhost:7233"
    TEMPORAL_NAMESPACE: str = "default"
    WORKER_TASK_QUEUE: str = "analysis-queue"

    # AI provider selection (overridable per key from the settings table)
    AI_PROVIDER: str = "ollama"
    OLLAMA_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3"
    CLAUDE_API_KEY: str = ""
    CLAUDE_MODEL: str = "claude-sonnet-4-5-20250929"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"

    # LLM call behaviour
    LLM_TIMEOUT_S: int = 120
    LLM_MAX_RETRIES: int = 0
    LLM_MAX_CHARS: int = 200000

    # Application
    APP_NAME: str = "Contract Review - Analysis Core"
    APP_ENV: str = "dev"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


# Global settings instance
settings = Settings()
