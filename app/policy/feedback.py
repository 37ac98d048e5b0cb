"""Feedback content rules."""

from __future__ import annotations

from app.policy.types import FEEDBACK_MAX_LENGTH, ValidationFailed


def validate_feedback_content(content: str | None) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationFailed("content", "content must not be empty")
    if len(content) > FEEDBACK_MAX_LENGTH:
        raise ValidationFailed(
            "content", f"content must not exceed {FEEDBACK_MAX_LENGTH} characters"
        )
    return content
