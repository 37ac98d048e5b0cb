"""
Data item: a titled record owned by a manager or employee.

Deletion is soft: ``is_deleted`` toggles and ``updated_at`` advances.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Index, Integer,
                        String, Text)
from sqlalchemy.orm import relationship

from app.db.base import Base


class DataItem(Base):
    __tablename__ = "data_items"
    __table_args__ = (Index("ix_data_items_owner_deleted", "owner_id", "is_deleted"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    title: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    description: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    owner_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    is_deleted: bool = Column(  # type: ignore[assignment]
        Boolean, nullable=False, default=False, server_default="false"
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    feedback = relationship(
        "Feedback",
        back_populates="data_item",
        cascade="all, delete-orphan",
        order_by="Feedback.id",
        lazy="selectin",
    )
