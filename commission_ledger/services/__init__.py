"""Business logic services."""

from commission_ledger.services.commission import calculate_commissions, total_commission
from commission_ledger.services.config_store import CommissionConfigStore
from commission_ledger.services.distributor import (
    CommissionDistributor,
    DistributionResult,
    TransactionEvent,
)
from commission_ledger.services.hierarchy import HierarchyResolver, PayeeChain
from commission_ledger.services.wallet import WalletAccessor

__all__ = [
    "calculate_commissions",
    "total_commission",
    "CommissionConfigStore",
    "CommissionDistributor",
    "DistributionResult",
    "TransactionEvent",
    "HierarchyResolver",
    "PayeeChain",
    "WalletAccessor",
]
