"""API router aggregation."""

from fastapi import APIRouter

from commission_ledger.api.admin import admin_router
from commission_ledger.api.auth import router as auth_router
from commission_ledger.api.commissions import router as commissions_router
from commission_ledger.api.health import router as health_router
from commission_ledger.api.wallet import router as wallet_router

# Main API router (for /api/* endpoints)
api_router = APIRouter(prefix="/api")

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(commissions_router)
api_router.include_router(wallet_router)
api_router.include_router(admin_router)

__all__ = ["api_router"]
