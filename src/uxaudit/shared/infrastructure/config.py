"""
Application configuration using Pydantic Settings.

Loads process-level configuration from environment variables (prefix
``UXAUDIT_``) and an optional .env file. Audit-scoped options live in
AuditConfig and are passed explicitly to the orchestrator.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="UXAUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="uxaudit-core", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="INFO", description="Logging level")

    # Logging / Privacy
    log_redaction_enabled: bool = Field(default=True, description="Enable PII redaction in logs")

    # Reasoning agent backend (OpenAI-compatible chat completions)
    agent_endpoint: str | None = Field(
        default=None,
        description="Base URL of the reasoning agent backend, e.g. https://api.openai.com/v1",
    )
    agent_api_key: str | None = Field(default=None, description="API key for the reasoning agent backend")
    agent_model: str = Field(default="gpt-4o-mini", description="Model used for validation cycles")
    agent_timeout_seconds: int = Field(default=60, description="Per-request timeout for agent calls")

    # Validation artifacts
    artifact_dir_name: str = Field(
        default=".uxaudit/validation",
        description="Directory (relative to the audited path) for validation artifacts",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"

    @property
    def agent_configured(self) -> bool:
        """Check if a live reasoning agent backend is configured."""
        return bool(self.agent_endpoint and self.agent_api_key)


# Global settings instance
settings = Settings()
