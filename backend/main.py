"""
Impact Assessment Engine - Main Application Entry Point

Schedule variance, department impact and capacity analysis for manufacturing
projects, with PDF impact reports.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from impact_engine.core.config import get_settings
from impact_engine.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(
        f"Starting Impact Assessment Engine in {settings.ENVIRONMENT} mode "
        f"(ops API: {settings.OPS_API_BASE_URL}, LLM: {settings.LLM_PROVIDER})"
    )

    yield

    # Shutdown
    logger.info("Shutting down Impact Assessment Engine...")
    from impact_engine.api.deps import get_ops_data_source

    if get_ops_data_source.cache_info().currsize:
        await get_ops_data_source().aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Impact Assessment Engine",
        description="Schedule variance and department impact analysis for manufacturing projects",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from impact_engine.api import assessments, capacity, insights

    app.include_router(assessments.router, prefix="/api/assessments", tags=["assessments"])
    app.include_router(capacity.router, prefix="/api/capacity", tags=["capacity"])
    app.include_router(insights.router, prefix="/api/ai", tags=["insights"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": "0.1.0",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
