"""Liveness endpoint."""
from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Schema describing the payload returned by the health-check endpoint."""

    alive: bool = Field(..., description="Always true while the process accepts connections.")


def healthz() -> HealthResponse:
    return HealthResponse(alive=True)


__all__ = ["HealthResponse", "healthz"]
