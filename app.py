"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_claims, handle_forward
from core.config import Config, validate_config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.perimeter_service import PerimeterService
from services.upstream import UpstreamClient

FORWARD_PATH = "/api/jwt-terminate-rewrite-and-forward"
CLAIMS_PATH = "/api/jwt-terminate"


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    validate_config(config)
    header_builder = HeaderBuilder(config.identity.header)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        destination_client = httpx.AsyncClient(
            timeout=config.destination.timeout,
            limits=limits,
            transport=transport,
        )
        app.state.upstream_client = UpstreamClient(
            destination_client,
            timeout=config.destination.timeout,
            header_builder=header_builder,
        )
        app.state.perimeter_service = PerimeterService(
            config=config,
            logger=logger,
            header_builder=header_builder,
        )
        try:
            yield
        finally:
            await destination_client.aclose()

    app = FastAPI(title="Perimeter Proxy", version="0.1.0", lifespan=lifespan)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post(FORWARD_PATH)
    @app.post(FORWARD_PATH + "/{path:path}")
    async def jwt_terminate_rewrite_and_forward(request: Request):
        return await handle_forward(request, config, logger)

    @app.api_route(CLAIMS_PATH, methods=["GET", "POST"])
    async def jwt_terminate(request: Request):
        return await handle_claims(request, config, logger)

    return app
