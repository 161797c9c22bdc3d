"""Admin API router aggregation."""

from fastapi import APIRouter

from commission_ledger.api.admin.audit import router as audit_router
from commission_ledger.api.admin.configs import router as configs_router
from commission_ledger.api.admin.ledger import router as ledger_router

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(configs_router)
admin_router.include_router(ledger_router)
admin_router.include_router(audit_router)

__all__ = ["admin_router"]
