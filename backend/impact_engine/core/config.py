"""
Application configuration using Pydantic Settings.

Upstream endpoints, LLM selection and report output are all controlled
through environment variables (or a local .env file).
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Operations REST API (projects, bays, schedules, team members)
    # ===========================================
    OPS_API_BASE_URL: str = "http://localhost:5000"
    OPS_API_TOKEN: str = ""
    OPS_API_TIMEOUT_SECONDS: float = 15.0

    # ===========================================
    # AI insight service
    # ===========================================
    # Endpoint the insight adapter POSTs assessments to.
    # Defaults to this service's own /api/ai/impact-assessment route.
    INSIGHTS_API_URL: str = "http://localhost:8000/api/ai/impact-assessment"
    INSIGHTS_TIMEOUT_SECONDS: float = 30.0

    # ===========================================
    # LLM Configuration (used by the insight endpoint)
    # ===========================================
    # LLM Provider: "gemini-api" | "litellm" | "none"
    # - gemini-api: Gemini API (API Key)
    # - litellm: LiteLLM (Bedrock, OpenAI, etc. with optional custom endpoint)
    # - none: always answer with the rule-based insights
    LLM_PROVIDER: Literal["gemini-api", "litellm", "none"] = "none"

    # Gemini model name (for gemini-api)
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Google API Key (for gemini-api provider)
    GOOGLE_API_KEY: str = ""

    # LiteLLM model identifier (for litellm provider)
    LITELLM_MODEL: str = "openai/gpt-4o"

    # LiteLLM custom endpoint (optional, for proxy servers)
    LITELLM_API_BASE: str = ""

    # LiteLLM custom API key (optional, for custom endpoints)
    LITELLM_API_KEY: str = ""

    # ===========================================
    # Reports
    # ===========================================
    REPORT_OUTPUT_DIR: str = "./reports"
    REPORT_PRODUCT_NAME: str = "TIER IV PRO"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
