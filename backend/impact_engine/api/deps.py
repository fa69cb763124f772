"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that wire the configured
infrastructure (operations data source, insight client, LLM provider)
into the services.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends

from impact_engine.core.config import Settings, get_settings
from impact_engine.interfaces.llm_provider import ILLMProvider
from impact_engine.interfaces.ops_data_source import IOpsDataSource
from impact_engine.services.assessment_service import AssessmentService
from impact_engine.services.insight_adapter import InsightAdapter
from impact_engine.services.insight_generator import InsightGenerator


# ===========================================
# Infrastructure Dependencies
# ===========================================


@lru_cache()
def get_ops_data_source() -> IOpsDataSource:
    """Get operations data source instance."""
    from impact_engine.infrastructure.http.ops_api_client import HttpOpsDataSource

    return HttpOpsDataSource(get_settings())


@lru_cache()
def get_llm_provider() -> Optional[ILLMProvider]:
    """
    Get LLM provider instance based on LLM_PROVIDER setting.

    Supports:
    - gemini-api: Gemini API (API Key)
    - litellm: LiteLLM (Bedrock, OpenAI, etc. with optional custom endpoint)
    - none: no LLM, insights are rule-based
    """
    settings = get_settings()

    if settings.LLM_PROVIDER == "gemini-api":
        from impact_engine.infrastructure.llm.gemini_api_provider import GeminiAPIProvider
        return GeminiAPIProvider(settings.GEMINI_MODEL)

    elif settings.LLM_PROVIDER == "litellm":
        from impact_engine.infrastructure.llm.litellm_provider import LiteLLMProvider
        return LiteLLMProvider(
            settings.LITELLM_MODEL,
            api_base=settings.LITELLM_API_BASE,
            api_key=settings.LITELLM_API_KEY,
        )

    elif settings.LLM_PROVIDER == "none":
        return None

    else:
        raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")


# ===========================================
# Service Dependencies
# ===========================================


@lru_cache()
def get_insight_adapter() -> InsightAdapter:
    """Get insight client instance."""
    return InsightAdapter(get_settings())


@lru_cache()
def get_insight_generator() -> InsightGenerator:
    """Get insight generator instance."""
    return InsightGenerator(get_llm_provider())


@lru_cache()
def get_assessment_service() -> AssessmentService:
    """Get assessment service instance (shared so report generation stays single-flight)."""
    return AssessmentService(
        data_source=get_ops_data_source(),
        insight_adapter=get_insight_adapter(),
        settings=get_settings(),
    )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

AppSettings = Annotated[Settings, Depends(get_settings)]
OpsDataSource = Annotated[IOpsDataSource, Depends(get_ops_data_source)]
InsightGen = Annotated[InsightGenerator, Depends(get_insight_generator)]
AssessmentSvc = Annotated[AssessmentService, Depends(get_assessment_service)]
