"""Utility functions."""

from commission_ledger.utils.audit import get_client_ip, jsonable, log_action
from commission_ledger.utils.password import hash_password, verify_password

__all__ = [
    "get_client_ip",
    "hash_password",
    "jsonable",
    "log_action",
    "verify_password",
]
