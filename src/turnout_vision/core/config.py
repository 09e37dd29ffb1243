"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMConfig(BaseSettings):
    """LLM provider configuration for the insight requester."""

    model_config = {"env_prefix": "TURNOUT_VISION_LLM_"}

    provider: str = "ollama"
    base_url: str = "http://localhost:11434"
    model: str = "llama3.1:8b"
    api_key: str | None = None
    timeout_seconds: int = 60
    max_retries: int = 1
    max_tokens: int = 1024
    top_p: float | None = None
    temperature: float = 0.2


class DashboardConfig(BaseSettings):
    """Derived-view and upload limits."""

    model_config = {"env_prefix": "TURNOUT_VISION_DASHBOARD_"}

    histogram_bins: int = 10
    extremes_limit: int = 5
    max_upload_bytes: int = 20 * 1024 * 1024


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "TURNOUT_VISION_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    llm: LLMConfig = Field(default_factory=LLMConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
