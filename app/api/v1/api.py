"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (absences, auth, data_items, employees,
                                  feedback, system, users)

api_router = APIRouter()

# Auth (login, refresh, logout, me)
api_router.include_router(auth.router)

# Accounts and employee profiles
api_router.include_router(users.router)
api_router.include_router(employees.router)

# Absence workflow
api_router.include_router(absences.router)

# Data items and feedback
api_router.include_router(data_items.router)
api_router.include_router(feedback.router)

# Authorization check, health
api_router.include_router(system.router)
