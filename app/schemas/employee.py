"""Pydantic schemas for employee profiles.

Sensitive fields are optional on the read model; endpoints serialise with
``response_model_exclude_none`` so redacted fields are absent, not null.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ValidationInfo, field_validator


class EmployeeProfileRead(BaseModel):
    id: int
    user_id: int
    name: str | None = None
    email: str | None = None
    position: str
    department: str
    salary: float | None = None
    phone: str | None = None
    address: str | None = None
    hire_date: date | None = None
    manager_id: int | None = None


class EmployeeProfileUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    position: str | None = None
    department: str | None = None
    salary: float | None = None
    phone: str | None = None
    address: str | None = None
    manager_id: int | None = None

    @field_validator("name", "position", "department")
    @classmethod
    def _required_text(cls, v: str | None, info: ValidationInfo) -> str:
        # Omit a field to leave it unchanged; null would clear a required column.
        if v is None:
            raise ValueError(f"{info.field_name} must not be null")
        v = v.strip()
        if not v:
            raise ValueError(f"{info.field_name} must not be empty")
        limit = 200 if info.field_name == "name" else 100
        if len(v) > limit:
            raise ValueError(f"{info.field_name} must not exceed {limit} characters")
        return v

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("salary")
    @classmethod
    def _salary(cls, v: float | None) -> float | None:
        if v is not None and v < 0:
            raise ValueError("Salary must not be negative")
        return v
