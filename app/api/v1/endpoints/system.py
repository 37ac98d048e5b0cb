"""
Authorization check and health check.

``POST /policy/authorize`` lets the client ask whether the current user may
perform an action before offering it (edit / delete / approve buttons),
using the same evaluator every other route enforces.  A stored record the
actor may not read answers 404, exactly like a missing one.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_actor, get_db
from app.core.config import settings
from app.models.absence import AbsenceRequest
from app.models.data_item import DataItem
from app.models.employee import EmployeeProfile
from app.models.feedback import Feedback
from app.models.user import User
from app.policy.evaluator import authorize, can
from app.policy.types import Action, Actor, ResourceType, coerce
from app.schemas.common import HealthResponse
from app.schemas.policy import AuthorizeRequest, DecisionRead

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)

_MODELS: dict[ResourceType, Any] = {
    ResourceType.USER: User,
    ResourceType.EMPLOYEE_PROFILE: EmployeeProfile,
    ResourceType.ABSENCE_REQUEST: AbsenceRequest,
    ResourceType.DATA_ITEM: DataItem,
    ResourceType.FEEDBACK: Feedback,
}


@router.post("/policy/authorize", response_model=DecisionRead, response_model_exclude_none=True)
async def check_authorization(
    body: AuthorizeRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> dict[str, Any]:
    resource = None
    rtype = coerce(ResourceType, body.resource_type)
    if rtype is not None and body.resource_id is not None:
        model = _MODELS[rtype]  # type: ignore[index]
        result = await db.execute(select(model).where(model.id == body.resource_id))
        resource = result.scalar_one_or_none()
        # Records the actor cannot read are reported as missing.
        if resource is None or not can(actor, Action.READ, rtype, resource):
            raise HTTPException(status_code=404, detail="Resource not found")
    return authorize(actor, body.action, body.resource_type, resource).as_dict()


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Public health check — database connectivity."""
    database = "ok"
    try:
        await db.execute(select(1))
    except SQLAlchemyError as e:
        logger.error("Health check DB failure: %s", e)
        database = "unavailable"
    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        version=settings.VERSION,
    )
