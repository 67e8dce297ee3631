"""
FastAPI application for the VPN Admin Portal.

PURPOSE: Application factory, error boundary and server runner.
AI CONTEXT: Creates the app with all routes registered and every
collaborator (config, server API client, authenticator, clock, chart
renderer) stored on app.state for the route dependencies to pick up.

ERROR HANDLING STRATEGY:
- HTTPException (including 400 InputValidationError and 401): plain text
  detail with the exception's status and headers
- ServerClientError and any other exception: logged with traceback,
  answered with "ERROR: <message>" and status 500
- Every response, error pages included, carries the security headers
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..__version__ import __version__
from ..auth import build_authenticator
from ..config import Config
from ..graph import GraphRenderer
from ..presenters import Clock
from ..server_client import ServerClient, ServerClientError
from .routes import router

__all__ = ["create_app", "run_portal"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    Manage application lifecycle with startup/shutdown hooks.

    Business context: Startup logging confirms which server API the
    portal talks to; shutdown closes the pooled HTTP connections to it.

    Args:
        app: The FastAPI application instance (provided by FastAPI).

    Yields:
        None. Control returns to FastAPI to handle requests.
    """
    config: Config = app.state.config
    logger.info(
        "VPN Admin Portal starting (v%s), server API %s, %s authentication",
        __version__,
        config.server_api_uri,
        config.auth_method,
    )
    yield
    app.state.server_client.close()
    logger.info("VPN Admin Portal shutting down")


def _error_response(exc: Exception) -> Response:
    return PlainTextResponse(
        f"ERROR: {exc}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers=Config.SECURITY_HEADERS,
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    return PlainTextResponse("invalid request", status_code=status.HTTP_400_BAD_REQUEST)


async def _server_client_error_handler(request: Request, exc: ServerClientError) -> Response:
    logger.exception("Server API call %s failed on %s", exc.operation, request.url.path)
    return _error_response(exc)


async def _security_headers(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """
    Outermost boundary: add security headers, turn crashes into 500s.

    Exceptions without a registered handler surface here rather than in
    Starlette's ServerErrorMiddleware, so the error page still carries
    the headers.
    """
    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(exc)
    response.headers.update(Config.SECURITY_HEADERS)
    return response


def create_app(
    config: Config | None = None,
    *,
    server_client: ServerClient | None = None,
    clock: Clock | None = None,
    graph_renderer: GraphRenderer | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI portal application.

    Factory function that creates a new FastAPI instance with all routes
    registered and static files mounted. Collaborators default to the
    production ones built from the environment; tests inject their own.

    Business context: The portal is the administrators' window onto the
    VPN server: active sessions, profile settings, user management, the
    connection log, usage statistics and the message of the day.

    Args:
        config: Portal configuration. Defaults to Config.from_env().
        server_client: Server API client. Defaults to one built from the
            config's URI, credentials and timeout.
        clock: Callable returning the current local datetime.
        graph_renderer: Chart renderer. Defaults to GraphRenderer().

    Returns:
        Configured FastAPI application instance.

    Raises:
        ValueError: If the configuration is invalid (e.g. Basic
            authentication without users).

    Example:
        >>> from fastapi.testclient import TestClient
        >>> app = create_app(Config(basic_users={"admin": "pw"}))
        >>> client = TestClient(app)
        >>> client.get("/connections", auth=("admin", "pw")).status_code
        200
    """
    config = Config.from_env() if config is None else config
    if server_client is None:
        server_client = ServerClient(
            config.server_api_uri,
            config.server_api_user,
            config.server_api_pass,
            timeout=config.server_api_timeout,
        )

    app = FastAPI(
        title="VPN Admin Portal",
        description="Administration portal for a VPN service",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.server_client = server_client
    app.state.authenticator = build_authenticator(config)
    app.state.clock = datetime.now if clock is None else clock
    app.state.graph_renderer = GraphRenderer() if graph_renderer is None else graph_renderer

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(ServerClientError, _server_client_error_handler)
    app.middleware("http")(_security_headers)

    app.include_router(router)

    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    return app


def run_portal(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Launch the VPN Admin Portal web server.

    Starts a uvicorn ASGI server hosting the portal. Configuration is
    read from VPN_ADMIN_* environment variables when the factory runs.

    Business context: The portal is meant to sit behind a TLS-terminating
    reverse proxy; bind to 127.0.0.1 unless the proxy runs elsewhere.

    Args:
        host: Network interface to bind the server to.
        port: TCP port number for the HTTP server. Default 8000.
        reload: Enable auto-reload on code changes for development.
        log_level: Uvicorn logging verbosity.

    Returns:
        None. This function blocks until the server is stopped (Ctrl+C).

    Raises:
        OSError: If the port is already in use or host is invalid.

    Example:
        >>> run_portal(host="127.0.0.1", port=8080)
    """
    uvicorn.run(
        "vpn_admin_portal.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# For direct execution
if __name__ == "__main__":
    run_portal()
