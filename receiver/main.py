"""FastAPI application and server bootstrap for the webhook receiver."""
from __future__ import annotations

import asyncio
import logging
import socket
import sys
from typing import Any, Callable, NamedTuple, Optional, Sequence

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from receiver.config import Settings, load_settings
from receiver.endpoints import health, webhook
from receiver.utils.logging import build_logger


class Route(NamedTuple):
    """One routing table entry; ``methods=None`` accepts any HTTP method."""

    path: str
    methods: Optional[Sequence[str]]
    endpoint: Callable[..., Any]
    name: str
    response_model: Any = None


def build_routes(settings: Settings, logger: logging.Logger) -> tuple[Route, ...]:
    """Return the routing table served by the application."""

    webhook_handler = webhook.WebhookHandler(logger, settings)
    routes = [
        Route("/webhook", None, webhook_handler.handle, "webhook"),
    ]
    if settings.health_enabled:
        routes.append(
            Route("/healthz", ["GET"], health.healthz, "healthz", health.HealthResponse)
        )
    return tuple(routes)


class WriteTimeoutMiddleware:
    """Abort a response whose individual writes stall past ``timeout`` seconds."""

    def __init__(self, app: Any, timeout: float) -> None:
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_timeout(message: dict) -> None:
            await asyncio.wait_for(send(message), timeout=self.timeout)

        await self.app(scope, receive, send_with_timeout)


def create_app(
    settings: Optional[Settings] = None,
    logger: Optional[logging.Logger] = None,
    routes: Optional[Sequence[Route]] = None,
) -> FastAPI:
    """Build the ASGI application from an explicit routing table."""

    settings = settings or load_settings()
    logger = logger or build_logger(settings.log_level)
    if routes is None:
        routes = build_routes(settings, logger)

    app = FastAPI(title="Webhook Receiver", docs_url=None, redoc_url=None, openapi_url=None)
    for route in routes:
        if route.methods is None:
            # Matches every method, including ones FastAPI has no name for.
            app.add_route(route.path, route.endpoint, name=route.name)
            continue
        app.add_api_route(
            route.path,
            route.endpoint,
            methods=list(route.methods),
            name=route.name,
            response_model=route.response_model,
        )
    app.add_middleware(WriteTimeoutMiddleware, timeout=settings.write_timeout)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> PlainTextResponse:
        _ = request  # FastAPI requires this argument
        logger.error(
            "Unhandled exception during request processing",
            extra={"error": str(exc)},
            exc_info=exc,
        )
        return PlainTextResponse(webhook.INTERNAL_ERROR_TEXT, status_code=500)

    return app


def bind_socket(settings: Settings) -> socket.socket:
    family = socket.AF_INET6 if ":" in settings.host else socket.AF_INET
    return socket.create_server((settings.host, settings.port), family=family)


def run(settings: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> None:
    """Serve the application until interrupted.

    Exits the process with status 1 when the listening socket cannot be bound.
    """

    settings = settings or load_settings()
    logger = logger or build_logger(settings.log_level)
    app = create_app(settings, logger)

    logger.info("Server starting to listen", extra={"addr": settings.addr})
    try:
        sock = bind_socket(settings)
    except (OSError, OverflowError) as exc:
        logger.error("Failed to start server", extra={"addr": settings.addr, "error": str(exc)})
        sys.exit(1)

    config = uvicorn.Config(
        app,
        timeout_keep_alive=int(settings.idle_timeout),
        log_config=None,
        access_log=False,
    )
    server = uvicorn.Server(config)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()


__all__ = ["Route", "WriteTimeoutMiddleware", "bind_socket", "build_routes", "create_app", "run"]
