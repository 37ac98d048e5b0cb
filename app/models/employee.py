"""
Employee profile: HR record linked 1:1 to a manager or employee account.

``salary``, ``phone`` and ``address`` are sensitive and only leave the
service through ``app.policy.visibility.project_profile``.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class EmployeeProfile(Base):
    __tablename__ = "employee_profiles"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    position: str = Column(String(100), nullable=False, default="")  # type: ignore[assignment]
    department: str = Column(String(100), nullable=False, default="")  # type: ignore[assignment]
    salary: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    address: str | None = Column(String(300), nullable=True)  # type: ignore[assignment]
    hire_date: date = Column(  # type: ignore[assignment]
        Date,
        nullable=False,
        default=lambda: datetime.now(timezone.utc).date(),
    )
    manager_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    user = relationship(
        "User",
        back_populates="profile",
        foreign_keys=[user_id],
        lazy="joined",
    )
    feedback = relationship(
        "Feedback",
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by="Feedback.id",
    )
