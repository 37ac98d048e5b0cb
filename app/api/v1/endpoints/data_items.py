"""
Data item endpoints.

- Managers and employees create items; employees only for themselves,
  managers for any manager or employee.
- Deletion is soft and reversible.  Deleted items are shown to managers and
  to their owner only, and cannot be edited until restored.
- Coworkers read non-deleted items and leave feedback on them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import enforce, get_actor, get_db
from app.models.data_item import DataItem
from app.models.feedback import Feedback
from app.models.user import User
from app.policy.types import Action, Actor, ResourceType, Role, ValidationFailed
from app.policy.visibility import filter_visible, project_data_item
from app.schemas.common import DeleteResponse
from app.schemas.data_item import (DataItemCreate, DataItemRead, DataItemUpdate,
                                   FeedbackContent, FeedbackRead)
from app.services.enhancer import FeedbackEnhancer, get_enhancer
from app.services.feedback import create_feedback

router = APIRouter(prefix="/data-items", tags=["data-items"])
logger = logging.getLogger(__name__)

_OWNER_ROLES = {Role.MANAGER.value, Role.EMPLOYEE.value}


def _ensure_utc(dt: datetime | None) -> datetime | None:
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _touch(item: DataItem) -> None:
    """Advance ``updated_at``, strictly, even within one clock tick."""
    now = datetime.now(timezone.utc)
    previous = _ensure_utc(item.updated_at)
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    item.updated_at = now


def _to_read(actor: Actor, item: DataItem) -> DataItemRead:
    shape = project_data_item(actor, item)
    if "feedback" in shape:
        shape["feedback"] = [FeedbackRead.model_validate(f) for f in shape["feedback"]]
    return DataItemRead(**shape)


async def get_item_or_404(db: AsyncSession, item_id: int) -> DataItem:
    result = await db.execute(select(DataItem).where(DataItem.id == item_id))
    item = result.scalar_one_or_none()
    if item is None:
        raise HTTPException(status_code=404, detail="Data item not found")
    return item


@router.get("", response_model=list[DataItemRead], response_model_exclude_none=True)
async def list_data_items(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> list[DataItemRead]:
    enforce(actor, Action.READ, ResourceType.DATA_ITEM)
    result = await db.execute(
        select(DataItem).order_by(DataItem.created_at.desc(), DataItem.id.desc())
    )
    visible = filter_visible(actor, ResourceType.DATA_ITEM, result.scalars().all())
    return [_to_read(actor, item) for item in visible]


@router.post("", response_model=DataItemRead, status_code=201, response_model_exclude_none=True)
async def create_data_item(
    body: DataItemCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> DataItemRead:
    owner_id = body.owner_id if body.owner_id is not None else actor.id
    enforce(actor, Action.CREATE, ResourceType.DATA_ITEM, {"owner_id": owner_id})

    owner = (await db.execute(select(User).where(User.id == owner_id))).scalar_one_or_none()
    if owner is None or owner.role not in _OWNER_ROLES:
        raise ValidationFailed("owner_id", "owner must be an existing manager or employee")

    item = DataItem(
        title=body.title,
        description=body.description,
        owner_id=owner_id,
        is_deleted=False,
        feedback=[],
    )
    db.add(item)
    await db.commit()
    logger.info("User %d created data item %d for owner %d", actor.id, item.id, owner_id)
    return _to_read(actor, item)


@router.get("/{item_id}", response_model=DataItemRead, response_model_exclude_none=True)
async def get_data_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> DataItemRead:
    item = await get_item_or_404(db, item_id)
    enforce(actor, Action.READ, ResourceType.DATA_ITEM, item)
    return _to_read(actor, item)


@router.put("/{item_id}", response_model=DataItemRead, response_model_exclude_none=True)
async def update_data_item(
    item_id: int,
    body: DataItemUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> DataItemRead:
    """Edit title / description. Refused while the item is deleted."""
    item = await get_item_or_404(db, item_id)
    enforce(actor, Action.UPDATE, ResourceType.DATA_ITEM, item)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(item, field, value)
    _touch(item)

    await db.commit()
    logger.info("User %d updated data item %d: %s", actor.id, item_id, sorted(changes))
    return _to_read(actor, item)


async def _set_deleted(
    db: AsyncSession, actor: Actor, item_id: int, action: Action, deleted: bool
) -> DataItem:
    item = await get_item_or_404(db, item_id)
    enforce(actor, action, ResourceType.DATA_ITEM, item)
    item.is_deleted = deleted
    _touch(item)
    await db.commit()
    logger.info("User %d %s data item %d", actor.id, "deleted" if deleted else "restored", item_id)
    return item


@router.delete("/{item_id}", response_model=DeleteResponse)
async def delete_data_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> DeleteResponse:
    """Soft-delete: the item stays stored and can be restored."""
    item = await _set_deleted(db, actor, item_id, Action.DELETE, True)
    return DeleteResponse(success=True, message=f"Data item '{item.title}' deleted")


@router.post("/{item_id}/restore", response_model=DataItemRead, response_model_exclude_none=True)
async def restore_data_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> DataItemRead:
    item = await _set_deleted(db, actor, item_id, Action.RESTORE, False)
    return _to_read(actor, item)


@router.post("/{item_id}/feedback", response_model=FeedbackRead, status_code=201)
async def create_data_item_feedback(
    item_id: int,
    body: FeedbackContent,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_actor),
    enhancer: FeedbackEnhancer = Depends(get_enhancer),
) -> Feedback:
    item = await get_item_or_404(db, item_id)
    enforce(actor, Action.READ, ResourceType.DATA_ITEM, item)
    enforce(actor, Action.CREATE, ResourceType.FEEDBACK)
    return await create_feedback(
        db, actor, enhancer, content=body.content, polish=body.polish, data_item_id=item.id
    )
