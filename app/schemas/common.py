"""Small response envelopes shared by several routers."""

from __future__ import annotations

from pydantic import BaseModel


class DeleteResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    status: str
    database: str
    version: str
