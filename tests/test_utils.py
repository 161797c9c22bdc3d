"""
Tests for password hashing, audit helpers and JWT handling.
"""

from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from commission_ledger.auth.jwt import create_access_token, verify_token
from commission_ledger.models import ActorRole
from commission_ledger.utils.audit import get_client_ip, jsonable
from commission_ledger.utils.password import hash_password, verify_password


def test_password_hashing():
    password = "test_password_123"
    hashed = hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed)
    assert not verify_password("wrong_password", hashed)


# ── audit helpers ────────────────────────────────────────


class TestJsonable:
    def test_decimal_and_date(self):
        assert jsonable({"total": Decimal("6.00"), "on": date(2026, 1, 15)}) == {
            "total": "6.00",
            "on": "2026-01-15",
        }

    def test_nested_and_enums(self):
        value = {"roles": [ActorRole.ADMIN], "ids": (1, 2), "inner": {"pct": Decimal("0.5")}}
        assert jsonable(value) == {"roles": ["admin"], "ids": [1, 2], "inner": {"pct": "0.5"}}

    def test_plain_values_untouched(self):
        assert jsonable({"reason": None, "count": 3}) == {"reason": None, "count": 3}


class TestClientIp:
    def test_forwarded_for(self):
        request = SimpleNamespace(
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
            client=SimpleNamespace(host="10.0.0.1"),
        )
        assert get_client_ip(request) == "203.0.113.7"

    def test_direct_client(self):
        request = SimpleNamespace(headers={}, client=SimpleNamespace(host="192.0.2.4"))
        assert get_client_ip(request) == "192.0.2.4"

    def test_no_client(self):
        assert get_client_ip(SimpleNamespace(headers={}, client=None)) is None


# ── jwt ──────────────────────────────────────────────────


class TestTokens:
    def test_round_trip(self):
        token = create_access_token(7, "admin")
        assert verify_token(token) == {"actor_id": 7, "role": "admin"}

    def test_expired(self):
        token = create_access_token(7, "admin", expires_delta=timedelta(seconds=-1))
        assert verify_token(token) is None

    def test_garbage(self):
        assert verify_token("not-a-token") is None
