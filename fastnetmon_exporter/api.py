"""FastNetMon Exporter - FastAPI application serving metrics and health."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse

from . import __version__
from .config import ExporterConfig
from .fetcher import BlockedIPFetcher
from .metrics import BlockedIPStore, ScrapeMetrics, create_registry, get_metrics_content, get_metrics_content_type
from .models import HealthResponse
from .scraper import ScrapeLoop

logger = logging.getLogger(__name__)


def create_app(config: ExporterConfig, store: Optional[BlockedIPStore] = None,
               fetcher: Optional[BlockedIPFetcher] = None, start_scraping: bool = True) -> FastAPI:
    """
    Build the exporter application.

    The store, registry and scrape loop are owned by the returned app and
    reachable through ``app.state``.

    Args:
        config: Exporter configuration
        store: Blocked IP store, a fresh empty one if omitted
        fetcher: API fetcher, built from config if omitted
        start_scraping: Whether to run the scrape loop for the app's lifetime
    """
    store = BlockedIPStore() if store is None else store
    registry = create_registry(store)
    scrape_metrics = ScrapeMetrics(registry)
    fetcher = BlockedIPFetcher(config) if fetcher is None else fetcher
    scrape_loop = ScrapeLoop(config, fetcher, store, scrape_metrics)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting FastNetMon exporter")
        if start_scraping:
            scrape_loop.start()
        yield
        logger.info("Shutting down FastNetMon exporter")
        scrape_loop.stop()
        await fetcher.aclose()

    app = FastAPI(
        title="FastNetMon Exporter",
        description="Prometheus exporter for IPs blocked by FastNetMon",
        version=__version__,
        lifespan=lifespan
    )
    app.state.config = config
    app.state.store = store
    app.state.registry = registry
    app.state.scrape_loop = scrape_loop

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Liveness check. Does not depend on upstream scrape health."""
        return HealthResponse(status="ok")

    @app.get("/metrics", response_class=PlainTextResponse)
    async def prometheus_metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=get_metrics_content(registry),
            media_type=get_metrics_content_type()
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "not_found", "message": "The requested resource was not found"}
        )

    return app
