"""
Visibility filter: narrows a retrieved record set to what an actor may see.

Applied after retrieval and before anything reaches a response.  Filtering
keeps the original order and is idempotent.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from app.policy.evaluator import can
from app.policy.types import (
    SENSITIVE_PROFILE_FIELDS,
    Action,
    ResourceType,
    coerce,
    field_of,
)

PROFILE_FIELDS = (
    "id",
    "user_id",
    "name",
    "email",
    "position",
    "department",
    "salary",
    "phone",
    "address",
    "hire_date",
    "manager_id",
)

DATA_ITEM_FIELDS = (
    "id",
    "title",
    "description",
    "owner_id",
    "is_deleted",
    "created_at",
    "updated_at",
)


def filter_visible(
    actor: Any,
    resource_type: ResourceType | str,
    records: Iterable[Any],
) -> list[Any]:
    """Return the subset of ``records`` the actor may read, order preserved.

    Employee profiles are never dropped: every profile is readable, so they
    are returned as projections (see ``project_profile``) instead.
    """
    rtype = coerce(ResourceType, resource_type)
    if rtype is None:
        return []
    if rtype is ResourceType.EMPLOYEE_PROFILE:
        if not can(actor, Action.READ, rtype):
            return []
        return [project_profile(actor, r) for r in records]
    return [r for r in records if can(actor, Action.READ, rtype, r)]


def project_profile(actor: Any, profile: Any) -> dict[str, Any]:
    """Shape a profile for ``actor``.

    Without ``read_sensitive`` on this profile, salary / phone / address are
    left out of the result entirely rather than set to ``None``.
    """
    shape = {name: field_of(profile, name) for name in PROFILE_FIELDS}
    user = field_of(profile, "user")
    if user is not None:
        shape["name"] = field_of(user, "name")
        shape["email"] = field_of(user, "email")
    if not can(actor, Action.READ_SENSITIVE, ResourceType.EMPLOYEE_PROFILE, shape):
        for name in SENSITIVE_PROFILE_FIELDS:
            shape.pop(name, None)
    return shape


def project_data_item(actor: Any, item: Any) -> dict[str, Any]:
    """Shape a data item, attaching feedback only for actors who may read it."""
    shape = {name: field_of(item, name) for name in DATA_ITEM_FIELDS}
    if can(actor, Action.READ, ResourceType.FEEDBACK):
        shape["feedback"] = list(field_of(item, "feedback", None) or [])
    return shape
