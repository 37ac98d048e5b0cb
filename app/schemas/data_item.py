"""Pydantic schemas for data items and feedback."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, field_validator, model_validator

from app.policy.feedback import validate_feedback_content


def _title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Title must not be empty")
    if len(v) > 200:
        raise ValueError("Title must not exceed 200 characters")
    return v


# ── Feedback ────────────────────────────────────────────────────────
class FeedbackContent(BaseModel):
    content: str
    polish: bool = False

    @field_validator("content")
    @classmethod
    def _content(cls, v: str) -> str:
        return validate_feedback_content(v)


class FeedbackCreate(FeedbackContent):
    employee_id: int | None = None
    data_item_id: int | None = None

    @model_validator(mode="after")
    def _single_parent(self) -> FeedbackCreate:
        if (self.employee_id is None) == (self.data_item_id is None):
            raise ValueError("Exactly one of employee_id or data_item_id is required")
        return self


class FeedbackRead(BaseModel):
    id: int
    data_item_id: int | None = None
    employee_id: int | None = None
    from_user_id: int | None = None
    content: str
    polished_content: str | None = None
    created_at: datetime | None

    model_config = {"from_attributes": True}


# ── Data items ──────────────────────────────────────────────────────
class DataItemCreate(BaseModel):
    title: str
    description: str = ""
    owner_id: int | None = None  # defaults to the acting user

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _title(v)


class DataItemUpdate(BaseModel):
    title: str | None = None
    description: str | None = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        return None if v is None else _title(v)


class DataItemRead(BaseModel):
    id: int
    title: str
    description: str
    owner_id: int
    is_deleted: bool
    created_at: datetime | None
    updated_at: datetime | None
    feedback: list[FeedbackRead] | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        # SQLite hands back naive datetimes
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    model_config = {"from_attributes": True}
