"""Admin ledger endpoints: pending entries, settlement, redistribution."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.auth.dependencies import require_admin
from commission_ledger.db import get_db
from commission_ledger.models import Actor, ActorRole
from commission_ledger.schemas.commission import (
    DistributionResponse,
    LedgerEntryResponse,
    MarkPaidRequest,
    MarkPaidResponse,
    RedistributeRequest,
)
from commission_ledger.services.distributor import CommissionDistributor
from commission_ledger.utils.audit import get_client_ip

router = APIRouter(prefix="/ledger")


@router.get("/pending", response_model=List[LedgerEntryResponse])
async def list_pending(
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(require_admin),
    role: Optional[ActorRole] = Query(None),
    service_type: Optional[str] = Query(None),
):
    return await CommissionDistributor(db).list_pending_ledger_entries(
        role=role, service_type=service_type
    )


@router.post("/mark-paid", response_model=MarkPaidResponse)
async def mark_paid(
    request: Request,
    data: MarkPaidRequest,
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(require_admin),
):
    """Settle pending entries; ids that are already paid are skipped."""
    paid = await CommissionDistributor(db).mark_paid(
        data.entry_ids,
        performed_by=current_actor,
        ip_address=get_client_ip(request),
    )
    return MarkPaidResponse(requested=len(set(data.entry_ids)), paid=paid)


@router.post("/redistribute", response_model=DistributionResponse)
async def redistribute(
    request: Request,
    data: RedistributeRequest,
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(require_admin),
):
    """
    Distribute an already distributed transaction again.

    Every payee is credited a second time under the next sequence number.
    """
    result = await CommissionDistributor(db).manually_redistribute(
        data.service_type,
        data.transaction_id,
        requested_by=current_actor,
        reason=data.reason,
        ip_address=get_client_ip(request),
    )
    return DistributionResponse.from_result(result)
