"""Pydantic schemas for User CRUD."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, field_validator

from app.policy.types import Role

_VALID_ROLES = {r.value for r in Role}


class UserCreate(BaseModel):
    email: str
    password: str
    name: str
    role: str = Role.EMPLOYEE.value

    # Profile fields, used when the new user is a manager or employee.
    position: str = ""
    department: str = ""
    salary: float | None = None
    phone: str | None = None
    address: str | None = None
    hire_date: date | None = None
    manager_id: int | None = None

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in _VALID_ROLES:
            raise ValueError(f"Role must be one of: {sorted(_VALID_ROLES)}")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    role: str
    created_at: datetime | None

    model_config = {"from_attributes": True}
