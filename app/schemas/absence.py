"""Pydantic schemas for absence requests."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, model_validator

from app.policy.absence_workflow import validate_absence


class AbsenceCreate(BaseModel):
    start_date: date
    end_date: date
    reason: str

    @model_validator(mode="after")
    def _check(self) -> AbsenceCreate:
        self.reason = validate_absence(self.start_date, self.end_date, self.reason)
        return self


class AbsenceStatusUpdate(BaseModel):
    status: str


class AbsenceRead(BaseModel):
    id: int
    user_id: int
    start_date: date
    end_date: date
    reason: str
    status: str
    created_at: datetime | None
    decided_by: int | None = None
    decided_at: datetime | None = None

    model_config = {"from_attributes": True}
