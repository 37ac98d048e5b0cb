"""
Feedback: coworker comments on a data item or an employee profile.

Exactly one parent is set.  Rows are never updated or deleted on their own.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (CheckConstraint, Column, DateTime, ForeignKey, Integer,
                        String, Text)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Feedback(Base):
    __tablename__ = "feedback"
    __table_args__ = (
        CheckConstraint(
            "(data_item_id IS NULL) <> (employee_id IS NULL)",
            name="ck_feedback_single_parent",
        ),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    data_item_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("data_items.id", ondelete="CASCADE"), nullable=True, index=True
    )
    employee_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("employee_profiles.id", ondelete="CASCADE"), nullable=True, index=True
    )
    from_user_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    content: str = Column(String(500), nullable=False)  # type: ignore[assignment]
    polished_content: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    data_item = relationship("DataItem", back_populates="feedback")
    employee = relationship("EmployeeProfile", back_populates="feedback")
