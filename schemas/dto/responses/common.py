"""
Response DTOs used by more than one router.

Error bodies are not modelled here; they come from AppError.to_dict().
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by endpoints with no payload."""

    message: str


class HealthResponse(BaseModel):
    status: Literal["healthy", "unhealthy"]
    checks: dict[str, Literal["ok", "error"]]
