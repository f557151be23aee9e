"""Inbound webhook endpoint."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import Request, Response, status
from fastapi.responses import PlainTextResponse
from starlette.requests import ClientDisconnect

from receiver.config import Settings

METHOD_NOT_ALLOWED_TEXT = "Only POST method is supported"
INVALID_JSON_TEXT = "Bad Request: Invalid JSON"
INTERNAL_ERROR_TEXT = "Internal Server Error"


class InvalidPayload(ValueError):
    """The request body is not a JSON object."""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def parse_payload(raw: bytes) -> dict[str, Any]:
    """Decode ``raw`` as a JSON object.

    An empty body is treated as an empty mapping. ``NaN`` and ``Infinity``
    are not JSON and are rejected, as is nesting too deep to decode.
    """

    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise InvalidPayload(str(exc) or type(exc).__name__) from exc
    if not isinstance(payload, dict):
        raise InvalidPayload(f"expected a JSON object, got {type(payload).__name__}")
    return payload


class WebhookHandler:
    """Reads, checks and logs one webhook delivery per call."""

    def __init__(self, logger: logging.Logger, settings: Settings) -> None:
        self.logger = logger
        self.settings = settings

    async def _read_body(self, request: Request) -> bytes:
        return await asyncio.wait_for(request.body(), timeout=self.settings.read_timeout)

    async def handle(self, request: Request) -> Response:
        if request.method != "POST":
            return PlainTextResponse(
                METHOD_NOT_ALLOWED_TEXT,
                status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
                headers={"Allow": "POST"},
            )

        try:
            raw = await self._read_body(request)
        except (ClientDisconnect, OSError, asyncio.TimeoutError) as exc:
            self.logger.error(
                "Failed to read request body",
                extra={"error": str(exc) or type(exc).__name__},
            )
            return PlainTextResponse(
                INTERNAL_ERROR_TEXT, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        if self.settings.validate_json:
            try:
                body: Any = parse_payload(raw)
            except InvalidPayload as exc:
                self.logger.error("Failed to parse JSON", extra={"error": str(exc)})
                return PlainTextResponse(INVALID_JSON_TEXT, status_code=status.HTTP_400_BAD_REQUEST)
        else:
            body = raw.decode("utf-8", errors="replace")

        self.logger.info("Received webhook request", extra={"body": body})
        return Response(status_code=status.HTTP_200_OK)


__all__ = [
    "INTERNAL_ERROR_TEXT",
    "INVALID_JSON_TEXT",
    "METHOD_NOT_ALLOWED_TEXT",
    "InvalidPayload",
    "WebhookHandler",
    "parse_payload",
]
