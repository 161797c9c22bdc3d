"""Authentication module."""

from commission_ledger.auth.dependencies import (
    SERVICE_KEY_HEADER,
    get_current_actor,
    require_admin,
    require_service_caller,
)
from commission_ledger.auth.jwt import create_access_token, verify_token

__all__ = [
    "create_access_token",
    "verify_token",
    "get_current_actor",
    "require_admin",
    "require_service_caller",
    "SERVICE_KEY_HEADER",
]
