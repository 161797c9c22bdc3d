"""
Commission distribution endpoints.

Called by the service verticals once a customer transaction has completed;
only they (through the service key) and admins may distribute.
The request session is handed to the distributor, which commits or rolls
back on its own; the distribution is not part of any caller transaction.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.auth.dependencies import get_current_actor, require_service_caller
from commission_ledger.db import get_db
from commission_ledger.models import Actor, ActorRole
from commission_ledger.schemas.commission import DistributeRequest, DistributionResponse
from commission_ledger.services.distributor import CommissionDistributor, TransactionEvent

router = APIRouter(prefix="/commissions", tags=["Commissions"])


@router.post("/distribute", response_model=DistributionResponse)
async def distribute(
    data: DistributeRequest,
    db: AsyncSession = Depends(get_db),
    caller: Optional[Actor] = Depends(require_service_caller),
):
    """
    Distribute commission for a completed transaction.

    Repeating the call for the same (service_type, transaction_id) returns
    the stored result with replayed=true and credits nothing.
    """
    event = TransactionEvent(
        service_type=data.service_type,
        transaction_id=data.transaction_id,
        amount=data.amount,
        provider=data.provider,
        service_agent_id=data.service_agent_id,
        pincode=data.pincode,
        registered_user_id=data.registered_user_id,
    )
    result = await CommissionDistributor(db).distribute(event)
    return DistributionResponse.from_result(result)


@router.get("/{service_type}/{transaction_id}", response_model=List[DistributionResponse])
async def get_distribution(
    service_type: str,
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    """
    Every distribution of a transaction, redistributions included.

    Admins see any transaction; other actors only those paying them.
    """
    results = await CommissionDistributor(db).get_distribution(service_type, transaction_id)
    if current_actor.role != ActorRole.ADMIN and not any(
        p.actor_id == current_actor.id for r in results for p in r.payees
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a payee of this transaction",
        )
    return [DistributionResponse.from_result(r) for r in results]
