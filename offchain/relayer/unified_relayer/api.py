"""
HTTP health endpoint for the relayer.

The FastAPI lifespan owns the chain monitors, so the monitors and the HTTP
server share one event loop.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import MonitorConfig
from .models import HealthResponse
from .monitor import MonitorService

logger = structlog.get_logger()


def create_app(config: MonitorConfig, service: Optional[MonitorService] = None) -> FastAPI:
    """Build the FastAPI application around a monitor service."""
    service = service if service is not None else MonitorService(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        service.start()
        logger.info(
            "relayer_started",
            version=__version__,
            host=config.host,
            port=config.port,
            monitors=service.monitored_chains,
        )

        yield

        await service.stop()
        logger.info("relayer_stopped")

    app = FastAPI(
        title="Unified Deposit Relayer",
        description="Relays USDC deposits received by the unified contract",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.allowed_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse, response_model_by_alias=True)
    async def health_check() -> HealthResponse:
        """Report liveness and which chains have an RPC URL configured."""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            monitored_chains=[chain.name for chain in config.configured_chains],
        )

    return app
