"""
Policy evaluator: the single rule table for every role, action and resource.

``authorize`` is a pure, total function: for any input it returns a
``Decision`` and never raises.  Unknown roles, actions or resource types are
denied with ``"unrecognized"``.

Evaluation order:

1. coerce role / action / resource type (unknown → unrecognized)
2. self-delete guard on users
3. capability lookup in ``CAPABILITIES`` (missing → forbidden)
4. ownership, for grants listed in ``OWN_ONLY`` (only when a resource is given)
5. record-state rules (soft-deleted data items, non-pending absences)
"""

from __future__ import annotations

import logging
from typing import Any

from app.policy.types import (
    CANNOT_SELF_DELETE,
    DELETED,
    FORBIDDEN,
    NOT_OWNER,
    NOT_PENDING,
    UNRECOGNIZED,
    AbsenceStatus,
    Action,
    Decision,
    ResourceType,
    Role,
    coerce,
    field_of,
)

logger = logging.getLogger(__name__)

_M, _E, _C = Role.MANAGER, Role.EMPLOYEE, Role.COWORKER
_USER = ResourceType.USER
_PROFILE = ResourceType.EMPLOYEE_PROFILE
_ABSENCE = ResourceType.ABSENCE_REQUEST
_ITEM = ResourceType.DATA_ITEM
_FEEDBACK = ResourceType.FEEDBACK

# ── Rule table ──────────────────────────────────────────────────────
CAPABILITIES: dict[tuple[Role, ResourceType], frozenset[Action]] = {
    (_M, _USER): frozenset({Action.CREATE, Action.READ, Action.DELETE}),
    (_E, _USER): frozenset({Action.READ}),
    (_C, _USER): frozenset({Action.READ}),
    (_M, _PROFILE): frozenset({Action.READ, Action.READ_SENSITIVE, Action.UPDATE}),
    (_E, _PROFILE): frozenset({Action.READ, Action.READ_SENSITIVE, Action.UPDATE}),
    (_C, _PROFILE): frozenset({Action.READ}),
    (_M, _ABSENCE): frozenset({Action.READ, Action.TRANSITION}),
    (_E, _ABSENCE): frozenset({Action.CREATE, Action.READ}),
    (_C, _ABSENCE): frozenset(),
    (_M, _ITEM): frozenset(
        {Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.RESTORE}
    ),
    (_E, _ITEM): frozenset(
        {Action.CREATE, Action.READ, Action.UPDATE, Action.DELETE, Action.RESTORE}
    ),
    (_C, _ITEM): frozenset({Action.READ}),
    (_M, _FEEDBACK): frozenset({Action.READ}),
    (_E, _FEEDBACK): frozenset({Action.READ}),
    (_C, _FEEDBACK): frozenset({Action.CREATE}),
}

# Grants that only hold when the actor owns the resource.
OWN_ONLY: frozenset[tuple[Role, ResourceType, Action]] = frozenset(
    {
        (_E, _USER, Action.READ),
        (_E, _PROFILE, Action.READ_SENSITIVE),
        (_E, _PROFILE, Action.UPDATE),
        (_E, _ABSENCE, Action.CREATE),
        (_E, _ABSENCE, Action.READ),
        (_E, _ITEM, Action.CREATE),
        (_E, _ITEM, Action.UPDATE),
        (_E, _ITEM, Action.DELETE),
        (_E, _ITEM, Action.RESTORE),
    }
)

# Attribute holding the owning user id, per resource type.
OWNER_FIELD: dict[ResourceType, str] = {
    _USER: "id",
    _PROFILE: "user_id",
    _ABSENCE: "user_id",
    _ITEM: "owner_id",
    _FEEDBACK: "from_user_id",
}


def owner_of(resource_type: ResourceType, resource: Any) -> Any:
    """Return the user id ``resource`` is scoped to, or ``None``."""
    return field_of(resource, OWNER_FIELD[resource_type])


def is_owner(actor_id: Any, resource_type: ResourceType, resource: Any) -> bool:
    owner = owner_of(resource_type, resource)
    return owner is not None and owner == actor_id


def _state_rules(
    role: Role,
    actor_id: Any,
    action: Action,
    resource_type: ResourceType,
    resource: Any,
) -> Decision:
    if resource_type is _ITEM and field_of(resource, "is_deleted", False):
        if action is Action.UPDATE:
            return Decision.deny(DELETED)
        if action is Action.READ:
            if role is _M or (role is _E and is_owner(actor_id, resource_type, resource)):
                return Decision.allow()
            return Decision.deny(DELETED)

    if resource_type is _ABSENCE and action is Action.TRANSITION:
        status = coerce(AbsenceStatus, field_of(resource, "status"))
        if status is not AbsenceStatus.PENDING:
            return Decision.deny(NOT_PENDING)

    return Decision.allow()


def authorize(
    actor: Any,
    action: Action | str,
    resource_type: ResourceType | str,
    resource: Any = None,
) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on ``resource``.

    ``actor`` is anything carrying ``id`` and ``role`` (an ``Actor``, a
    ``User`` row or a mapping).  ``resource`` is optional; without it only the
    role's capability is checked, which is what listings and creation forms
    need before the visibility filter narrows the result.
    """
    role = coerce(Role, field_of(actor, "role"))
    act = coerce(Action, action)
    rtype = coerce(ResourceType, resource_type)
    if role is None or act is None or rtype is None:
        return Decision.deny(UNRECOGNIZED)

    actor_id = field_of(actor, "id")

    if (
        rtype is _USER
        and act is Action.DELETE
        and resource is not None
        and is_owner(actor_id, rtype, resource)
    ):
        return Decision.deny(CANNOT_SELF_DELETE)

    if act not in CAPABILITIES.get((role, rtype), frozenset()):
        return Decision.deny(FORBIDDEN)

    if resource is None:
        return Decision.allow()

    if (role, rtype, act) in OWN_ONLY and not is_owner(actor_id, rtype, resource):
        return Decision.deny(NOT_OWNER)

    return _state_rules(role, actor_id, act, rtype, resource)


def can(actor: Any, action: Action | str, resource_type: ResourceType | str, resource: Any = None) -> bool:
    return authorize(actor, action, resource_type, resource).allowed
