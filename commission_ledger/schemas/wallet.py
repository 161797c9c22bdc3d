"""Wallet schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from commission_ledger.models import WalletTransactionType


class WalletResponse(BaseModel):
    actor_id: int
    balance: Decimal


class WalletTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: WalletTransactionType
    amount: Decimal
    balance_after: Decimal
    description: str
    service_type: Optional[str]
    ledger_entry_id: Optional[int]
    created_at: datetime


class WalletHistoryResponse(BaseModel):
    actor_id: int
    items: List[WalletTransactionResponse]


class CommissionSummaryResponse(BaseModel):
    """Commission totals of the current actor by settlement status."""

    actor_id: int
    pending: Decimal
    paid: Decimal
    total: Decimal
