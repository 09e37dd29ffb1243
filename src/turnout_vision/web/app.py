"""FastAPI application for Turnout Vision.

Serves the dashboard page and the JSON API behind it. All session data is
held in memory and discarded when the process restarts.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from turnout_vision.core.config import Settings
from turnout_vision.core.types import HealthStatus
from turnout_vision.insights.requester import InsightRequester
from turnout_vision.llm.client import LLMClient, create_llm_client
from turnout_vision.llm.health import check_llm_health
from turnout_vision.session.manager import DashboardSessionManager
from turnout_vision.web.dashboard_router import router as dashboard_router

_WEB_DIR = Path(__file__).parent
_TEMPLATES_DIR = _WEB_DIR / "templates"

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = "0.1.0"


def create_app(
    settings: Settings | None = None,
    llm_client: LLMClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. Defaults to Settings().
        llm_client: Optional pre-built LLM client; tests pass a fake here.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("turnout_vision").setLevel(settings.log_level.upper())

    if llm_client is None:
        llm_client = create_llm_client(settings.llm)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await llm_client.close()

    app = FastAPI(
        title="Turnout Vision",
        description="Precinct-level election turnout dashboard",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.llm_client = llm_client
    app.state.session_manager = DashboardSessionManager()
    app.state.insight_requester = InsightRequester(llm_client)

    app.include_router(dashboard_router)

    templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))

    @app.get("/", response_class=HTMLResponse)
    async def serve_dashboard(request: Request) -> HTMLResponse:
        """Serve the dashboard page."""
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {"extremes_limit": settings.dashboard.extremes_limit},
        )

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        return HealthResponse(status="healthy", service="turnout-vision")

    @app.get("/api/health/llm", response_model=HealthStatus)
    async def llm_health_check() -> HealthStatus:
        """Probe the configured insight provider."""
        return await check_llm_health(settings.llm, client=llm_client)

    logger.info("Turnout Vision app created (environment=%s)", settings.environment)
    return app
