"""
Shared vocabulary of the access policy: roles, actions, resource types,
the acting principal and the decision object returned by the evaluator.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    MANAGER = "manager"
    EMPLOYEE = "employee"
    COWORKER = "coworker"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    READ_SENSITIVE = "read_sensitive"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    TRANSITION = "transition"


class ResourceType(str, Enum):
    USER = "user"
    EMPLOYEE_PROFILE = "employee_profile"
    ABSENCE_REQUEST = "absence_request"
    DATA_ITEM = "data_item"
    FEEDBACK = "feedback"


class AbsenceStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Deny reasons
UNRECOGNIZED = "unrecognized"
FORBIDDEN = "forbidden"
NOT_OWNER = "not owner"
CANNOT_SELF_DELETE = "cannot self-delete"
NOT_PENDING = "not pending"
DELETED = "deleted"
INVALID_TARGET = "invalid target"

SENSITIVE_PROFILE_FIELDS = frozenset({"salary", "phone", "address"})
FEEDBACK_MAX_LENGTH = 500


@dataclass(frozen=True)
class Actor:
    """The authenticated user performing an action."""

    id: int
    role: Role | str

    @classmethod
    def from_user(cls, user: Any) -> Actor:
        return cls(id=user.id, role=user.role)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> Decision:
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> Decision:
        return cls(False, reason)

    def __bool__(self) -> bool:
        return self.allowed

    def as_dict(self) -> dict[str, Any]:
        if self.allowed:
            return {"allowed": True}
        return {"allowed": False, "reason": self.reason}


class ValidationFailed(ValueError):
    """A field-level validation error, distinct from an authorization denial.

    Subclasses ``ValueError`` so pydantic validators that call into the
    workflow surface it as a regular 422.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


def coerce(enum_cls: type[Enum], value: Any) -> Enum | None:
    """Return ``value`` as a member of ``enum_cls`` or ``None`` if it is not one."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


def field_of(record: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from an ORM object, dataclass or mapping."""
    if record is None:
        return default
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)
