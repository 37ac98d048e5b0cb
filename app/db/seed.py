"""
First-run seeding.

Always ensures the first manager account exists.  With ``SEED_DEMO_USERS``
the demo employee and coworker accounts are added too, so every role can
log in on a fresh database.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import get_password_hash
from app.models.employee import EmployeeProfile
from app.models.user import User

logger = logging.getLogger(__name__)

_TODAY = datetime.now(timezone.utc).date()

DEMO_ACCOUNTS: list[dict[str, Any]] = [
    {
        "email": "employee@newwork.com",
        "name": "Jane Employee",
        "role": "employee",
        "profile": {
            "position": "Software Engineer",
            "department": "Engineering",
            "salary": 95000.0,
            "phone": "+1-555-0102",
            "address": "456 Dev Ave, San Francisco, CA",
            "hire_date": _TODAY - timedelta(days=180),
        },
    },
    {
        "email": "coworker@newwork.com",
        "name": "Chris Coworker",
        "role": "coworker",
        "profile": None,
    },
]


async def _ensure_account(
    session: AsyncSession,
    email: str,
    name: str,
    role: str,
    password: str,
    profile: dict[str, Any] | None,
    manager_id: int | None = None,
) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is not None:
        return user

    user = User(email=email, name=name, role=role, hashed_password=get_password_hash(password))
    session.add(user)
    await session.flush()
    if profile is not None:
        session.add(EmployeeProfile(user_id=user.id, manager_id=manager_id, **profile))
    logger.info("Seeded %s account: %s (password: <redacted>)", role, email)
    return user


async def seed_accounts(session: AsyncSession) -> None:
    manager = await _ensure_account(
        session,
        settings.FIRST_MANAGER_EMAIL,
        "John Manager",
        "manager",
        settings.FIRST_MANAGER_PASSWORD,
        {
            "position": "Engineering Manager",
            "department": "Engineering",
            "salary": 120000.0,
            "phone": "+1-555-0101",
            "address": "123 Tech St, San Francisco, CA",
            "hire_date": _TODAY - timedelta(days=365),
        },
    )
    if settings.SEED_DEMO_USERS:
        for account in DEMO_ACCOUNTS:
            await _ensure_account(
                session,
                account["email"],
                account["name"],
                account["role"],
                settings.FIRST_MANAGER_PASSWORD,
                account["profile"],
                manager_id=manager.id,
            )
    await session.commit()
