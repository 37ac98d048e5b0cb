"""
Absence request endpoints.

- Employees file requests for themselves and list their own.
- Managers list every request and approve / reject pending ones.
- Coworkers have no access.

A decision is committed with a compare-and-set on ``status`` so two
managers deciding the same request concurrently cannot both win; the loser
receives ``403 not pending``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import enforce, get_actor, get_db
from app.models.absence import AbsenceRequest
from app.policy.absence_workflow import TransitionResult, evaluate_transition
from app.policy.types import (INVALID_TARGET, NOT_PENDING, AbsenceStatus,
                              Action, Actor, ResourceType)
from app.policy.visibility import filter_visible
from app.schemas.absence import AbsenceCreate, AbsenceRead, AbsenceStatusUpdate

router = APIRouter(prefix="/absences", tags=["absences"])
logger = logging.getLogger(__name__)


async def _compare_and_set_status(
    db: AsyncSession,
    request_id: int,
    new_status: AbsenceStatus,
    decided_by: int,
) -> bool:
    """Move a request out of ``pending`` atomically. Returns False if it already left."""
    result = await db.execute(
        update(AbsenceRequest)
        .where(
            AbsenceRequest.id == request_id,
            AbsenceRequest.status == AbsenceStatus.PENDING.value,
        )
        .values(
            status=new_status.value,
            decided_by=decided_by,
            decided_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1


@router.post("", response_model=AbsenceRead, status_code=201)
async def create_absence_request(
    body: AbsenceCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AbsenceRequest:
    """File a new request for the acting employee. Always starts as pending."""
    absence = AbsenceRequest(
        user_id=actor.id,
        start_date=body.start_date,
        end_date=body.end_date,
        reason=body.reason,
        status=AbsenceStatus.PENDING.value,
    )
    enforce(actor, Action.CREATE, ResourceType.ABSENCE_REQUEST, absence)

    db.add(absence)
    await db.commit()
    await db.refresh(absence)
    logger.info(
        "User %d requested absence %d (%s → %s)",
        actor.id,
        absence.id,
        absence.start_date,
        absence.end_date,
    )
    return absence


@router.get("", response_model=list[AbsenceRead])
async def list_absence_requests(
    status: str | None = None,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> list[AbsenceRequest]:
    """All requests for managers; an employee's own requests otherwise."""
    enforce(actor, Action.READ, ResourceType.ABSENCE_REQUEST)
    query = select(AbsenceRequest).order_by(AbsenceRequest.created_at.desc(), AbsenceRequest.id.desc())
    if status:
        query = query.where(AbsenceRequest.status == status)
    result = await db.execute(query)
    return filter_visible(actor, ResourceType.ABSENCE_REQUEST, result.scalars().all())


@router.get("/me", response_model=list[AbsenceRead])
async def list_my_absence_requests(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> list[AbsenceRequest]:
    enforce(actor, Action.READ, ResourceType.ABSENCE_REQUEST)
    result = await db.execute(
        select(AbsenceRequest)
        .where(AbsenceRequest.user_id == actor.id)
        .order_by(AbsenceRequest.created_at.desc(), AbsenceRequest.id.desc())
    )
    return filter_visible(actor, ResourceType.ABSENCE_REQUEST, result.scalars().all())


@router.put("/{absence_id}/status", response_model=AbsenceRead)
async def update_absence_status(
    absence_id: int,
    body: AbsenceStatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> AbsenceRequest:
    """Approve or reject a pending request (manager only)."""
    result = await db.execute(select(AbsenceRequest).where(AbsenceRequest.id == absence_id))
    absence = result.scalar_one_or_none()
    if absence is None:
        raise HTTPException(status_code=404, detail="Absence request not found")

    outcome = evaluate_transition(actor, absence, body.status)
    if outcome.ok and not await _compare_and_set_status(
        db, absence.id, outcome.new_status, actor.id  # type: ignore[arg-type]
    ):
        outcome = TransitionResult.failure(NOT_PENDING)

    if not outcome.ok:
        logger.info(
            "Transition of absence %d to %r by user %d refused: %s",
            absence_id,
            body.status,
            actor.id,
            outcome.reason,
        )
        status_code = 422 if outcome.reason == INVALID_TARGET else 403
        raise HTTPException(status_code=status_code, detail=outcome.reason)

    await db.refresh(absence)
    logger.info("User %d set absence %d to %s", actor.id, absence_id, absence.status)
    return absence
