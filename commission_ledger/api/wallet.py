"""Wallet endpoints for the current actor."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.auth.dependencies import get_current_actor
from commission_ledger.db import get_db
from commission_ledger.models import Actor
from commission_ledger.repositories import LedgerRepository
from commission_ledger.schemas.commission import LedgerEntryResponse
from commission_ledger.schemas.wallet import (
    CommissionSummaryResponse,
    WalletHistoryResponse,
    WalletResponse,
    WalletTransactionResponse,
)
from commission_ledger.services.distributor import CommissionDistributor
from commission_ledger.services.wallet import WalletAccessor

router = APIRouter(prefix="/wallet", tags=["Wallet"])


@router.get("", response_model=WalletResponse)
async def get_wallet(
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    balance = await WalletAccessor(db).get_balance(current_actor.id)
    return WalletResponse(actor_id=current_actor.id, balance=balance)


@router.get("/history", response_model=WalletHistoryResponse)
async def get_wallet_history(
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
):
    items = await WalletAccessor(db).history(
        current_actor.id, limit=per_page, offset=(page - 1) * per_page
    )
    return WalletHistoryResponse(
        actor_id=current_actor.id,
        items=[WalletTransactionResponse.model_validate(item) for item in items],
    )


@router.get("/commissions", response_model=CommissionSummaryResponse)
async def get_commission_summary(
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    """Pending and paid commission totals of the current actor."""
    summary = await CommissionDistributor(db).commission_summary(current_actor.id)
    return CommissionSummaryResponse(actor_id=current_actor.id, **summary)


@router.get("/commissions/entries", response_model=List[LedgerEntryResponse])
async def list_commission_entries(
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
):
    return await LedgerRepository(db).entries_for_payee(
        current_actor.id, limit=per_page, offset=(page - 1) * per_page
    )
