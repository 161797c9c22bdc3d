"""Pydantic schemas for request/response validation."""

from commission_ledger.schemas.audit import AuditLogListResponse, AuditLogResponse
from commission_ledger.schemas.auth import ActorResponse, LoginRequest, LoginResponse
from commission_ledger.schemas.commission import (
    ConfigCreate,
    ConfigResponse,
    ConfigUpdate,
    DistributeRequest,
    DistributionResponse,
    LedgerEntryResponse,
    MarkPaidRequest,
    MarkPaidResponse,
    PayeeCommissionResponse,
    RedistributeRequest,
)
from commission_ledger.schemas.wallet import (
    CommissionSummaryResponse,
    WalletHistoryResponse,
    WalletResponse,
    WalletTransactionResponse,
)

__all__ = [
    "ActorResponse",
    "AuditLogListResponse",
    "AuditLogResponse",
    "CommissionSummaryResponse",
    "ConfigCreate",
    "ConfigResponse",
    "ConfigUpdate",
    "DistributeRequest",
    "DistributionResponse",
    "LedgerEntryResponse",
    "LoginRequest",
    "LoginResponse",
    "MarkPaidRequest",
    "MarkPaidResponse",
    "PayeeCommissionResponse",
    "RedistributeRequest",
    "WalletHistoryResponse",
    "WalletResponse",
    "WalletTransactionResponse",
]
