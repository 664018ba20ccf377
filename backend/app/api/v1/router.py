"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import admin, parcels, payments, riders, users

router = APIRouter()

router.include_router(users.router)
router.include_router(riders.router)
router.include_router(parcels.router)
router.include_router(payments.router)
router.include_router(admin.router)
