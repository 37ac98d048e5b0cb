"""
Absence request: an employee's leave request and its manager decision.

``status`` moves ``pending → approved | rejected`` exactly once; the write is
a compare-and-set on this column (see ``endpoints/absences.py``).
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (CheckConstraint, Column, Date, DateTime, ForeignKey,
                        Index, Integer, String)

from app.db.base import Base


class AbsenceRequest(Base):
    __tablename__ = "absence_requests"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_absence_date_order"),
        Index("ix_absence_user_status", "user_id", "status"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    start_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    end_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    reason: str = Column(String(1000), nullable=False)  # type: ignore[assignment]
    status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="pending",
        server_default="pending",
    )  # pending | approved | rejected
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    decided_by: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    decided_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
