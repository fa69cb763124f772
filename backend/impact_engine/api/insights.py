"""
Insight generation endpoint.

Serves the narrative insights requested by the report flow.
"""

from fastapi import APIRouter

from impact_engine.api.deps import InsightGen
from impact_engine.core.logger import logger
from impact_engine.models.insight import AIInsight, InsightRequest
from impact_engine.services.insight_generator import describe_request

router = APIRouter()


@router.post("/impact-assessment", response_model=AIInsight)
async def generate_impact_assessment(request: InsightRequest, generator: InsightGen):
    """Generate insights for an impact assessment."""
    logger.info(f"Generating impact insights: {describe_request(request)}")
    return await generator.generate(request)
