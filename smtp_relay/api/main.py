"""SMTP Relay API.

FastAPI application hosting the relay:
- POST {API_ROUTE_PATH}: Validate a JSON email and relay it via SMTP
- GET /health: Service health check

The application is built by ``create_app``; configuration is loaded once
there and handed to the dispatch handler. Run with ``smtp-relay`` or
``uvicorn smtp_relay.api.main:create_app --factory``.

Author: Odiseo
Version: 2.0.0
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smtp_relay.api.handler import InboundRequest, MailDispatchHandler, MailSender
from smtp_relay.api.schemas import (
    ErrorResponse,
    HealthResponse,
    SendEmailResponse,
)
from smtp_relay.clients.smtp import SMTPClient
from smtp_relay.config import RelayConfig, load_config
from smtp_relay.core.exceptions import RelayConfigError
from smtp_relay.core.logger import get_logger, setup_logging

logger = get_logger(__name__)

# Every method is routed to the handler so it can answer 405 itself.
RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# =============================================================================
# Application State (Dependency Injection)
# =============================================================================
@dataclass
class AppState:
    """Application state container for dependency injection."""

    config: RelayConfig | None
    handler: MailDispatchHandler | None = None
    config_error: RelayConfigError | None = None


def get_app_state(request: Request) -> AppState:
    """Dependency: Get the state of the application serving the request."""
    return request.app.state.relay


def is_secure_request(request: Request, config: RelayConfig) -> bool:
    """Decide whether a request arrived over HTTPS.

    A request is secure when its scheme is https, when it reached the
    server on port 443, or, if the proxy is trusted, when
    X-Forwarded-Proto says https.
    """
    if request.url.scheme == "https":
        return True

    server = request.scope.get("server")
    if server and server[1] == 443:
        return True

    if config.TRUST_FORWARDED_PROTO:
        proto = request.headers.get("X-Forwarded-Proto", "")
        return proto.split(",")[0].strip().lower() == "https"

    return False


def _build_state(
    config: RelayConfig | None, smtp_client: MailSender | None
) -> AppState:
    """Load configuration and wire the dispatch handler."""
    if config is None:
        try:
            config = load_config()
        except RelayConfigError as e:
            return AppState(config=None, config_error=e)

    try:
        smtp_config = config.get_smtp_config()
    except RelayConfigError as e:
        return AppState(config=config, config_error=e)

    sender = smtp_client or SMTPClient(smtp_config)
    return AppState(config=config, handler=MailDispatchHandler(config, sender))


# =============================================================================
# Endpoints
# =============================================================================
router = APIRouter()


async def relay_email(
    request: Request,
    state: Annotated[AppState, Depends(get_app_state)],
) -> JSONResponse:
    """Validate a JSON email and relay it through the SMTP server.

    Only POST is accepted. Plain-HTTP requests are rejected when
    REQUIRE_HTTPS is enabled.
    """
    if state.handler is None or state.config is None:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Server configuration error",
                "message": str(state.config_error),
            },
        )

    inbound = InboundRequest(
        method=request.method,
        body=await request.body(),
        is_secure=is_secure_request(request, state.config),
    )
    response = await run_in_threadpool(state.handler.handle, inbound)

    return JSONResponse(status_code=response.status_code, content=response.payload)


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Not configured"}},
)
async def health_check(
    state: Annotated[AppState, Depends(get_app_state)],
) -> HealthResponse | JSONResponse:
    """Check service health.

    Reports whether the SMTP configuration is complete. No connection to
    the SMTP server is made.
    """
    config = state.config or RelayConfig.model_construct()
    configured = state.handler is not None

    response = HealthResponse(
        status="ok" if configured else "degraded",
        service=config.SERVICE_NAME,
        email_provider="ok" if configured else "not_configured",
        version=config.SERVICE_VERSION,
    )

    if not configured:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(mode="json"),
        )

    return response


# =============================================================================
# FastAPI Application
# =============================================================================
def create_app(
    config: RelayConfig | None = None,
    smtp_client: MailSender | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Relay configuration (loaded from the environment if None).
        smtp_client: Sender to use instead of an SMTPClient built from config.
        configure_logging: Whether startup configures the root logger.

    Returns:
        Configured application. An invalid configuration does not raise
        here; every relay request is then answered with HTTP 500.
    """
    relay_state = _build_state(config, smtp_client)
    settings = relay_state.config or RelayConfig.model_construct()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        if configure_logging:
            setup_logging(
                log_dir=settings.LOG_DIR,
                log_level=settings.LOG_LEVEL,
                enable_file=settings.LOG_TO_FILE,
                max_size_mb=settings.LOG_MAX_SIZE_MB,
                backup_count=settings.LOG_BACKUP_COUNT,
                settings=relay_state.config,
            )

        if relay_state.config_error:
            logger.critical(
                f"Server configuration error: {relay_state.config_error}"
            )
        else:
            logger.info(
                f"{settings.SERVICE_NAME} relaying on {settings.API_ROUTE_PATH} "
                f"via {settings.SMTP_HOST}:{settings.SMTP_PORT}"
            )

        yield  # Application runs here

        logger.info(f"{settings.SERVICE_NAME} stopped")

    application = FastAPI(
        title=settings.SERVICE_NAME,
        description="Single-endpoint HTTP to SMTP relay",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    application.state.relay = relay_state

    application.add_api_route(
        settings.API_ROUTE_PATH,
        relay_email,
        methods=RELAY_METHODS,
        response_model=None,
        responses={
            200: {"model": SendEmailResponse, "description": "Email sent"},
            400: {"model": ErrorResponse, "description": "Invalid request"},
            405: {"model": ErrorResponse, "description": "Method not allowed"},
            500: {"model": ErrorResponse, "description": "Send or configuration failure"},
        },
    )
    application.include_router(router)

    @application.exception_handler(StarletteHTTPException)
    async def relay_method_handler(request: Request, exc: StarletteHTTPException):
        """Let the relay answer methods its route does not list."""
        if (
            exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
            and request.url.path == settings.API_ROUTE_PATH
        ):
            return await relay_email(request, get_app_state(request))
        return await http_exception_handler(request, exc)

    return application


# =============================================================================
# Entry Point
# =============================================================================
def run() -> None:
    """Run the API server.

    Exits with status 1 without serving if the configuration is invalid.
    """
    import uvicorn

    try:
        config = load_config()
        config.get_smtp_config()
    except RelayConfigError as e:
        setup_logging()
        logger.critical(f"Refusing to start: {e}")
        sys.exit(1)

    setup_logging(
        log_dir=config.LOG_DIR,
        log_level=config.LOG_LEVEL,
        enable_file=config.LOG_TO_FILE,
        max_size_mb=config.LOG_MAX_SIZE_MB,
        backup_count=config.LOG_BACKUP_COUNT,
        settings=config,
    )
    logger.info(f"Starting {config.SERVICE_NAME} on {config.API_HOST}:{config.API_PORT}")
    uvicorn.run(
        create_app(config, configure_logging=False),
        host=config.API_HOST,
        port=config.API_PORT,
    )


if __name__ == "__main__":
    run()
