"""
Exceptions raised by the commission services.

The API layer maps each of these to an HTTP status in one place
(see commission_ledger.api.errors), so services never raise HTTPException.
"""

from decimal import Decimal
from typing import Optional


class CommissionError(Exception):
    """Base class for every commission/ledger failure."""


class InvalidCommissionInput(CommissionError, ValueError):
    """Negative amount, percentage out of range, non-positive wallet delta."""


class InvalidCommissionConfig(CommissionError, ValueError):
    """Config percentages violate the per-role or total bounds."""


class ConfigNotFound(CommissionError):
    """No active commission config for a (service_type, provider) key."""

    def __init__(self, service_type: str, provider: Optional[str] = None):
        self.service_type = service_type
        self.provider = provider
        key = f"{service_type}/{provider}" if provider else service_type
        super().__init__(f"No active commission config for {key}")


class ConfigNotFoundById(CommissionError):
    def __init__(self, config_id: int):
        self.config_id = config_id
        super().__init__(f"Commission config {config_id} not found")


class ActorNotFound(CommissionError):
    def __init__(self, actor_id: Optional[int] = None, detail: Optional[str] = None):
        self.actor_id = actor_id
        super().__init__(detail or f"Actor {actor_id} not found")


class HierarchyIncomplete(CommissionError):
    """A required role is missing between the service agent and the admin."""

    def __init__(self, missing_role: str, actor_id: Optional[int] = None, detail: Optional[str] = None):
        self.missing_role = missing_role
        self.actor_id = actor_id
        super().__init__(detail or f"No {missing_role} above actor {actor_id}")


class HierarchyIntegrityError(CommissionError):
    """The actor tree itself is corrupt."""


class HierarchyCycle(HierarchyIntegrityError):
    def __init__(self, actor_id: int, path: list):
        self.actor_id = actor_id
        self.path = path
        super().__init__(f"Actor {actor_id} appears twice in parent chain {path}")


class HierarchyTooDeep(HierarchyIntegrityError):
    def __init__(self, start_id: int, max_depth: int):
        self.start_id = start_id
        self.max_depth = max_depth
        super().__init__(f"Parent chain of actor {start_id} exceeds {max_depth} hops")


class AlreadyDistributed(CommissionError):
    """The idempotency key of a distribution is already taken."""

    def __init__(self, service_type: str, transaction_id: int, sequence: int = 0):
        self.service_type = service_type
        self.transaction_id = transaction_id
        self.sequence = sequence
        super().__init__(
            f"Commission for {service_type}#{transaction_id} (sequence {sequence}) already distributed"
        )


class DistributionNotFound(CommissionError):
    def __init__(self, service_type: str, transaction_id: int):
        self.service_type = service_type
        self.transaction_id = transaction_id
        super().__init__(f"No commission distribution for {service_type}#{transaction_id}")


class InsufficientBalance(CommissionError):
    def __init__(self, actor_id: int, requested: Decimal, available: Decimal):
        self.actor_id = actor_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Actor {actor_id} has {available}, cannot debit {requested}"
        )


class PrivilegeRequired(CommissionError):
    """Operation reserved for admins."""
