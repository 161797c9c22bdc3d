"""
Tests for the wallet accessor.

Covers:
- Credit / debit with history rows
- Concurrent credits to one actor (no lost updates)
- Debit guard against negative balances
"""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import select

from commission_ledger.errors import ActorNotFound, InsufficientBalance, InvalidCommissionInput
from commission_ledger.models import WalletTransaction, WalletTransactionType
from commission_ledger.services.wallet import WalletAccessor


class TestCredit:
    async def test_credit_returns_new_balance(self, session_factory, hierarchy):
        async with session_factory() as session:
            wallet = WalletAccessor(session)
            assert await wallet.credit(hierarchy.service_agent, Decimal("3.00")) == Decimal("3.00")
            assert await wallet.credit(hierarchy.service_agent, "1.50") == Decimal("4.50")
            await session.commit()

        async with session_factory() as session:
            assert await WalletAccessor(session).get_balance(hierarchy.service_agent) == Decimal("4.50")

    async def test_credit_writes_history(self, session_factory, hierarchy):
        async with session_factory() as session:
            await WalletAccessor(session).credit(
                hierarchy.admin, Decimal("0.50"), description="recharge commission", service_type="recharge"
            )
            await session.commit()

        async with session_factory() as session:
            history = await WalletAccessor(session).history(hierarchy.admin)
            assert len(history) == 1
            assert history[0].type == WalletTransactionType.CREDIT
            assert history[0].amount == Decimal("0.50")
            assert history[0].balance_after == Decimal("0.50")
            assert history[0].service_type == "recharge"

    async def test_non_positive_amount_rejected(self, session_factory, hierarchy):
        async with session_factory() as session:
            wallet = WalletAccessor(session)
            with pytest.raises(InvalidCommissionInput):
                await wallet.credit(hierarchy.admin, Decimal("0"))
            with pytest.raises(InvalidCommissionInput):
                await wallet.credit(hierarchy.admin, Decimal("-1"))

    async def test_unknown_actor(self, session_factory, hierarchy):
        async with session_factory() as session:
            with pytest.raises(ActorNotFound):
                await WalletAccessor(session).credit(9999, Decimal("1"))

    async def test_concurrent_credits_are_not_lost(self, session_factory, hierarchy):
        async def credit_once():
            async with session_factory() as session:
                await WalletAccessor(session).credit(hierarchy.taluk_manager, Decimal("1.00"))
                await session.commit()

        await asyncio.gather(*(credit_once() for _ in range(20)))

        async with session_factory() as session:
            wallet = WalletAccessor(session)
            assert await wallet.get_balance(hierarchy.taluk_manager) == Decimal("20.00")
            balances = sorted(t.balance_after for t in await wallet.history(hierarchy.taluk_manager))
            assert balances == [Decimal(i) for i in range(1, 21)]


class TestDebit:
    async def test_debit(self, session_factory, hierarchy):
        async with session_factory() as session:
            wallet = WalletAccessor(session)
            await wallet.credit(hierarchy.registered_user, Decimal("10"))
            assert await wallet.debit(hierarchy.registered_user, Decimal("4")) == Decimal("6.00")
            await session.commit()

        async with session_factory() as session:
            kinds = (
                await session.execute(
                    select(WalletTransaction.type)
                    .where(WalletTransaction.actor_id == hierarchy.registered_user)
                    .order_by(WalletTransaction.id)
                )
            ).scalars().all()
            assert kinds == [WalletTransactionType.CREDIT, WalletTransactionType.DEBIT]

    async def test_insufficient_balance_leaves_balance(self, session_factory, hierarchy):
        async with session_factory() as session:
            wallet = WalletAccessor(session)
            await wallet.credit(hierarchy.registered_user, Decimal("2"))
            with pytest.raises(InsufficientBalance) as exc_info:
                await wallet.debit(hierarchy.registered_user, Decimal("2.01"))
            assert exc_info.value.available == Decimal("2.00")
            assert await wallet.get_balance(hierarchy.registered_user) == Decimal("2.00")

    async def test_debit_unknown_actor(self, session_factory, hierarchy):
        async with session_factory() as session:
            with pytest.raises(ActorNotFound):
                await WalletAccessor(session).debit(9999, Decimal("1"))
