"""Pydantic schemas for the authorization check endpoint."""

from __future__ import annotations

from pydantic import BaseModel


class AuthorizeRequest(BaseModel):
    action: str
    resource_type: str
    resource_id: int | None = None


class DecisionRead(BaseModel):
    allowed: bool
    reason: str | None = None
