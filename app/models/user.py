"""
User model — authentication identity and role.

Role is one of ``manager | employee | coworker``.  Deleting a user removes
their profile, absence requests and data items with it.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False, default="")  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="coworker",
        server_default="coworker",
    )  # manager | employee | coworker
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    profile = relationship(
        "EmployeeProfile",
        back_populates="user",
        foreign_keys="EmployeeProfile.user_id",
        uselist=False,
        cascade="all, delete-orphan",
    )
    absence_requests = relationship(
        "AbsenceRequest",
        foreign_keys="AbsenceRequest.user_id",
        cascade="all, delete-orphan",
    )
    data_items = relationship(
        "DataItem",
        foreign_keys="DataItem.owner_id",
        cascade="all, delete-orphan",
    )
