"""
User account endpoints.

- Only managers create or delete accounts; nobody deletes themselves.
- Managers and coworkers list the whole directory; employees see only
  their own account.
- Creating a manager or employee also creates their employee profile.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import enforce, get_actor, get_db
from app.core.security import get_password_hash
from app.models.employee import EmployeeProfile
from app.models.user import User
from app.policy.types import Action, Actor, ResourceType, Role
from app.policy.visibility import filter_visible
from app.schemas.common import DeleteResponse
from app.schemas.user import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

_PROFILE_ROLES = {Role.MANAGER.value, Role.EMPLOYEE.value}


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> User:
    """Create a new account (manager only)."""
    enforce(actor, Action.CREATE, ResourceType.USER)

    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=body.email,
        hashed_password=get_password_hash(body.password),
        name=body.name,
        role=body.role,
    )
    db.add(user)
    await db.flush()

    if body.role in _PROFILE_ROLES:
        profile_fields = body.model_dump(
            include={"position", "department", "salary", "phone", "address", "manager_id"}
        )
        if body.hire_date is not None:
            profile_fields["hire_date"] = body.hire_date
        db.add(EmployeeProfile(user_id=user.id, **profile_fields))

    await db.commit()
    await db.refresh(user)
    logger.info("Manager %d created user %d (%s)", actor.id, user.id, user.role)
    return user


@router.get("", response_model=list[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> list[User]:
    enforce(actor, Action.READ, ResourceType.USER)
    result = await db.execute(select(User).order_by(User.id))
    return filter_visible(actor, ResourceType.USER, result.scalars().all())


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> User:
    user = await _get_user_or_404(db, user_id)
    enforce(actor, Action.READ, ResourceType.USER, user)
    return user


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> DeleteResponse:
    """Delete an account together with its profile, absences and data items."""
    user = await _get_user_or_404(db, user_id)
    enforce(actor, Action.DELETE, ResourceType.USER, user)

    email = user.email
    await db.delete(user)
    await db.commit()
    logger.info("Manager %d deleted user %d (%s)", actor.id, user_id, email)
    return DeleteResponse(success=True, message=f"User '{email}' deleted")
