"""
Feedback endpoint: coworkers comment on an employee profile or a data item.

Feedback is immutable: there is no update or delete route.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import enforce, get_actor, get_db
from app.api.v1.endpoints.data_items import get_item_or_404
from app.api.v1.endpoints.employees import get_profile_or_404
from app.models.feedback import Feedback
from app.policy.types import Action, Actor, ResourceType
from app.schemas.data_item import FeedbackCreate, FeedbackRead
from app.services.enhancer import FeedbackEnhancer, get_enhancer
from app.services.feedback import create_feedback

router = APIRouter(tags=["feedback"])


@router.post("/feedback", response_model=FeedbackRead, status_code=201)
async def submit_feedback(
    body: FeedbackCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
    enhancer: FeedbackEnhancer = Depends(get_enhancer),
) -> Feedback:
    """Leave feedback, optionally asking the enhancer to polish it."""
    enforce(actor, Action.CREATE, ResourceType.FEEDBACK)

    if body.employee_id is not None:
        profile = await get_profile_or_404(db, body.employee_id)
        enforce(actor, Action.READ, ResourceType.EMPLOYEE_PROFILE, profile)
        return await create_feedback(
            db, actor, enhancer, content=body.content, polish=body.polish, employee_id=profile.id
        )

    item = await get_item_or_404(db, body.data_item_id)  # type: ignore[arg-type]
    enforce(actor, Action.READ, ResourceType.DATA_ITEM, item)
    return await create_feedback(
        db, actor, enhancer, content=body.content, polish=body.polish, data_item_id=item.id
    )
