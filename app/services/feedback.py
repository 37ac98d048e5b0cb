"""
Feedback creation shared by ``POST /feedback`` and
``POST /data-items/{id}/feedback``.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.feedback import Feedback
from app.policy.feedback import validate_feedback_content
from app.policy.types import Actor
from app.services.enhancer import FeedbackEnhancer

logger = logging.getLogger(__name__)


async def create_feedback(
    db: AsyncSession,
    actor: Actor,
    enhancer: FeedbackEnhancer,
    *,
    content: str,
    polish: bool = False,
    data_item_id: int | None = None,
    employee_id: int | None = None,
) -> Feedback:
    """Persist a feedback entry; the caller has already authorized it.

    With ``polish`` the enhancer is consulted once.  If it yields nothing the
    entry is stored with the original content only.
    """
    content = validate_feedback_content(content)
    polished = await enhancer.enhance(content) if polish else None

    feedback = Feedback(
        data_item_id=data_item_id,
        employee_id=employee_id,
        from_user_id=actor.id,
        content=content,
        polished_content=polished,
    )
    db.add(feedback)
    await db.commit()
    await db.refresh(feedback)
    logger.info(
        "User %d left feedback %d on %s %d%s",
        actor.id,
        feedback.id,
        "data item" if data_item_id is not None else "employee",
        data_item_id if data_item_id is not None else employee_id,
        " (polished)" if polished else "",
    )
    return feedback
