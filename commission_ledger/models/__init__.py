"""
Database models.

All models are exported here for convenient imports:
    from commission_ledger.models import Actor, CommissionConfig, etc.
"""

from commission_ledger.models.actor import HIERARCHY_ROLES, Actor, ActorRole
from commission_ledger.models.audit import AuditAction, AuditLog
from commission_ledger.models.base import Base, TimestampMixin
from commission_ledger.models.commission_config import CommissionConfig
from commission_ledger.models.ledger import (
    CommissionDistribution,
    CommissionTransaction,
    LedgerStatus,
)
from commission_ledger.models.wallet import WalletTransaction, WalletTransactionType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Actor
    "Actor",
    "ActorRole",
    "HIERARCHY_ROLES",
    # Config
    "CommissionConfig",
    # Ledger
    "CommissionDistribution",
    "CommissionTransaction",
    "LedgerStatus",
    # Wallet
    "WalletTransaction",
    "WalletTransactionType",
    # Audit
    "AuditLog",
    "AuditAction",
]
