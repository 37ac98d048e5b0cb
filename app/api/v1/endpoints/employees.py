"""
Employee profile endpoints.

- Every authenticated role may read profiles; salary / phone / address are
  only included for managers and for the profile's own employee.
- Managers update any profile, employees only their own, coworkers none.
- Profile feedback is listed here; it is written through ``POST /feedback``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import enforce, get_actor, get_db
from app.models.employee import EmployeeProfile
from app.models.feedback import Feedback
from app.models.user import User
from app.policy.types import Action, Actor, ResourceType
from app.policy.visibility import filter_visible, project_profile
from app.schemas.data_item import FeedbackRead
from app.schemas.employee import EmployeeProfileRead, EmployeeProfileUpdate

router = APIRouter(prefix="/employees", tags=["employees"])
logger = logging.getLogger(__name__)

_USER_FIELDS = {"name", "email"}


async def get_profile_or_404(db: AsyncSession, employee_id: int) -> EmployeeProfile:
    result = await db.execute(select(EmployeeProfile).where(EmployeeProfile.id == employee_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    return profile


@router.get(
    "",
    response_model=list[EmployeeProfileRead],
    response_model_exclude_none=True,
)
async def list_employees(
    department: str | None = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> list[dict[str, Any]]:
    enforce(actor, Action.READ, ResourceType.EMPLOYEE_PROFILE)
    query = select(EmployeeProfile).order_by(EmployeeProfile.id)
    if department:
        query = query.where(EmployeeProfile.department == department)
    result = await db.execute(query)
    return filter_visible(actor, ResourceType.EMPLOYEE_PROFILE, result.scalars().all())


@router.get(
    "/{employee_id}",
    response_model=EmployeeProfileRead,
    response_model_exclude_none=True,
)
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    profile = await get_profile_or_404(db, employee_id)
    enforce(actor, Action.READ, ResourceType.EMPLOYEE_PROFILE, profile)
    return project_profile(actor, profile)


@router.put(
    "/{employee_id}",
    response_model=EmployeeProfileRead,
    response_model_exclude_none=True,
)
async def update_employee(
    employee_id: int,
    body: EmployeeProfileUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    profile = await get_profile_or_404(db, employee_id)
    enforce(actor, Action.UPDATE, ResourceType.EMPLOYEE_PROFILE, profile)

    changes = body.model_dump(exclude_unset=True)
    new_email = changes.get("email")
    if new_email and new_email != profile.user.email:
        clash = await db.execute(select(User).where(User.email == new_email))
        if clash.scalar_one_or_none():
            raise HTTPException(status_code=400, detail="Email already registered")

    for field, value in changes.items():
        if field in _USER_FIELDS:
            if value is not None:
                setattr(profile.user, field, value)
        else:
            setattr(profile, field, value)

    await db.commit()
    logger.info("User %d updated employee profile %d: %s", actor.id, employee_id, sorted(changes))
    return project_profile(actor, profile)


@router.get("/{employee_id}/feedback", response_model=list[FeedbackRead])
async def list_employee_feedback(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> list[Feedback]:
    profile = await get_profile_or_404(db, employee_id)
    enforce(actor, Action.READ, ResourceType.EMPLOYEE_PROFILE, profile)
    enforce(actor, Action.READ, ResourceType.FEEDBACK)
    result = await db.execute(
        select(Feedback).where(Feedback.employee_id == profile.id).order_by(Feedback.id)
    )
    return list(result.scalars().all())
