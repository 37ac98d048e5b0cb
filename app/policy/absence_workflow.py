"""
Absence request lifecycle.

    pending ──approve──▶ approved   (terminal)
       └─────reject───▶ rejected   (terminal)

Only managers drive transitions, and only out of ``pending``.  Anything else
is reported as a failed ``TransitionResult``; nothing is silently ignored.
Resubmitting after a decision means creating a new request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from app.policy.evaluator import authorize
from app.policy.types import (
    INVALID_TARGET,
    NOT_PENDING,
    AbsenceStatus,
    Action,
    ResourceType,
    ValidationFailed,
    coerce,
)

TRANSITIONS: dict[AbsenceStatus, frozenset[AbsenceStatus]] = {
    AbsenceStatus.PENDING: frozenset({AbsenceStatus.APPROVED, AbsenceStatus.REJECTED}),
    AbsenceStatus.APPROVED: frozenset(),
    AbsenceStatus.REJECTED: frozenset(),
}


@dataclass(frozen=True)
class TransitionResult:
    ok: bool
    new_status: AbsenceStatus | None = None
    reason: str | None = None

    @classmethod
    def success(cls, status: AbsenceStatus) -> TransitionResult:
        return cls(True, new_status=status)

    @classmethod
    def failure(cls, reason: str) -> TransitionResult:
        return cls(False, reason=reason)

    def as_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "new_status": self.new_status.value}  # type: ignore[union-attr]
        return {"ok": False, "reason": self.reason}


def validate_absence(start_date: date, end_date: date, reason: str | None) -> str:
    """Check creation preconditions; returns the trimmed reason."""
    if end_date < start_date:
        raise ValidationFailed("end_date", "end_date must not be before start_date")
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("reason", "reason must not be empty")
    return reason


def evaluate_transition(actor: Any, request: Any, target: AbsenceStatus | str) -> TransitionResult:
    """Decide a transition without touching ``request``."""
    decision = authorize(actor, Action.TRANSITION, ResourceType.ABSENCE_REQUEST, request)
    if not decision.allowed:
        return TransitionResult.failure(decision.reason)  # type: ignore[arg-type]
    if request is None:
        return TransitionResult.failure(NOT_PENDING)

    target_status = coerce(AbsenceStatus, target)
    if target_status is None or target_status not in TRANSITIONS[AbsenceStatus.PENDING]:
        return TransitionResult.failure(INVALID_TARGET)
    return TransitionResult.success(target_status)  # type: ignore[arg-type]


def apply_absence_transition(actor: Any, request: Any, target: AbsenceStatus | str) -> TransitionResult:
    """Evaluate a transition and, when allowed, set the new status on ``request``.

    Persisted requests must not be mutated this way; the endpoint evaluates
    first and then commits with a compare-and-set on the status column.
    """
    result = evaluate_transition(actor, request, target)
    if result.ok:
        if isinstance(request, dict):
            request["status"] = result.new_status
        else:
            request.status = result.new_status
    return result
