"""Per-entity repositories composed into the services."""

from commission_ledger.repositories.actors import ActorRepository
from commission_ledger.repositories.configs import ConfigRepository
from commission_ledger.repositories.ledger import LedgerRepository

__all__ = [
    "ActorRepository",
    "ConfigRepository",
    "LedgerRepository",
]
