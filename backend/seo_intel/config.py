"""Application configuration using pydantic-settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Anthropic (completion service adapter)
    anthropic_api_key: Optional[str] = None
    claude_model: str = "claude-sonnet-4-20250514"

    # Crawler
    crawl_user_agent: str = "SEO-Optimizer-Bot/1.0 (+https://seooptimizer.com/bot)"
    crawl_request_timeout: float = 10.0  # seconds per page fetch

    # AI-assisted duplicate analysis
    ai_enabled: bool = True
    ai_max_output_tokens: int = 3000
    ai_call_delay_ms: int = 100  # pause between sequential completion calls

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings for testing."""
    global _settings
    _settings = None
