"""FastAPI metrics-feed application factory with WebSocket hub."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from ammsim.dashboard.routes import api, ws
from ammsim.dashboard.routes.ws import MetricsHub


def create_dashboard_app(lifespan: Any = None, hub: MetricsHub | None = None) -> FastAPI:
    """Create and configure the metrics-feed application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to start and stop the simulation.
        hub: WebSocket hub the sampler publishes to; a new one when omitted.

    Returns:
        Configured FastAPI application with JSON API and WebSocket routes.
        ``app.state.simulation`` must be set before requests are served.
    """
    app = FastAPI(
        title="AMM Order-Flow Simulator",
        lifespan=lifespan,
    )

    app.state.hub = hub if hub is not None else MetricsHub()
    app.state.simulation = None

    app.include_router(api.router, prefix="/api")
    app.include_router(ws.router)

    return app
