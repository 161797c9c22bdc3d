"""
Tests for commission config selection and admin writes.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from commission_ledger.errors import ConfigNotFound, ConfigNotFoundById, InvalidCommissionConfig
from commission_ledger.models import Actor, ActorRole, AuditAction, AuditLog, CommissionConfig
from commission_ledger.services.config_store import CommissionConfigStore, today

STANDARD = {
    ActorRole.SERVICE_AGENT: Decimal("3"),
    ActorRole.TALUK_MANAGER: Decimal("1"),
    ActorRole.BRANCH_MANAGER: Decimal("0.5"),
    ActorRole.ADMIN: Decimal("0.5"),
    ActorRole.REGISTERED_USER: Decimal("1"),
}

PEAK = {
    ActorRole.SERVICE_AGENT: Decimal("4"),
    ActorRole.TALUK_MANAGER: Decimal("1.5"),
    ActorRole.BRANCH_MANAGER: Decimal("0.5"),
    ActorRole.ADMIN: Decimal("0.5"),
    ActorRole.REGISTERED_USER: Decimal("1"),
}


# ── selection ────────────────────────────────────────────


class TestActiveConfig:
    async def test_returns_active_config(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            created = await store.create_config("recharge", STANDARD)
            active = await store.get_active_config("recharge")
            assert active.id == created.id
            assert active.total_pct == Decimal("6.00")
            assert active.rates()[ActorRole.SERVICE_AGENT] == Decimal("3.00")

    async def test_none_active_raises(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(ConfigNotFound) as exc_info:
                await CommissionConfigStore(session).get_active_config("taxi")
            assert exc_info.value.service_type == "taxi"

    async def test_inactive_config_not_selected(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            await store.create_config("recharge", STANDARD, is_active=False)
            with pytest.raises(ConfigNotFound):
                await store.get_active_config("recharge")

    async def test_provider_must_match_exactly(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            airtel = await store.create_config("recharge", STANDARD, provider="Airtel")

            assert (await store.get_active_config("recharge", "Airtel")).id == airtel.id
            with pytest.raises(ConfigNotFound):
                await store.get_active_config("recharge", "Jio")

    async def test_future_window_not_selected(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            await store.create_config("booking", STANDARD, start_date=today() + timedelta(days=1))
            with pytest.raises(ConfigNotFound):
                await store.get_active_config("booking")

    async def test_expired_window_not_selected(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            await store.create_config(
                "booking",
                STANDARD,
                start_date=today() - timedelta(days=30),
                end_date=today() - timedelta(days=1),
            )
            with pytest.raises(ConfigNotFound):
                await store.get_active_config("booking")

    async def test_peak_overrides_base_inside_window(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            await store.create_config("taxi", STANDARD)
            peak = await store.create_config(
                "taxi",
                PEAK,
                start_date=today() - timedelta(days=1),
                end_date=today() + timedelta(days=1),
                is_peak_rate=True,
                season_name="Diwali",
            )
            active = await store.get_active_config("taxi")
            assert active.id == peak.id
            assert active.service_agent_pct == Decimal("4.00")

    async def test_base_used_outside_peak_window(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            base = await store.create_config("taxi", STANDARD)
            await store.create_config(
                "taxi",
                PEAK,
                start_date=today() + timedelta(days=10),
                end_date=today() + timedelta(days=20),
                is_peak_rate=True,
            )
            assert (await store.get_active_config("taxi")).id == base.id

    async def test_explicit_day(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            future = today() + timedelta(days=15)
            base = await store.create_config("taxi", STANDARD)
            peak = await store.create_config(
                "taxi",
                PEAK,
                start_date=today() + timedelta(days=10),
                end_date=today() + timedelta(days=20),
                is_peak_rate=True,
            )
            assert (await store.get_active_config("taxi", on=future)).id == peak.id
            assert (await store.get_active_config("taxi", on=today())).id == base.id


# ── writes ───────────────────────────────────────────────


class TestConfigWrites:
    async def test_new_config_supersedes_previous(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            first = await store.create_config("recharge", STANDARD)
            second = await store.create_config("recharge", PEAK)

            assert first.is_active is False
            assert second.is_active is True
            assert (await store.get_active_config("recharge")).id == second.id

        async with session_factory() as session:
            active = (
                await session.execute(
                    select(CommissionConfig).where(CommissionConfig.is_active.is_(True))
                )
            ).scalars().all()
            assert [c.id for c in active] == [second.id]

    async def test_peak_does_not_supersede_base(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            base = await store.create_config("taxi", STANDARD)
            await store.create_config("taxi", PEAK, is_peak_rate=True)
            assert base.is_active is True

    async def test_other_provider_not_superseded(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            airtel = await store.create_config("recharge", STANDARD, provider="Airtel")
            await store.create_config("recharge", STANDARD, provider="Jio")
            assert airtel.is_active is True

    async def test_total_above_hundred_rejected(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            with pytest.raises(InvalidCommissionConfig):
                await store.create_config(
                    "recharge",
                    {ActorRole.SERVICE_AGENT: Decimal("70"), ActorRole.ADMIN: Decimal("31")},
                )

    async def test_window_order_checked(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            with pytest.raises(InvalidCommissionConfig):
                await store.create_config(
                    "recharge",
                    STANDARD,
                    start_date=today(),
                    end_date=today() - timedelta(days=1),
                )

    async def test_update_recomputes_total(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            config = await store.create_config("recharge", STANDARD)
            updated = await store.update_config(config.id, {"service_agent_pct": Decimal("5")})
            assert updated.service_agent_pct == Decimal("5")
            assert updated.total_pct == Decimal("8.0")

    async def test_update_rejects_unknown_field(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            config = await store.create_config("recharge", STANDARD)
            with pytest.raises(InvalidCommissionConfig):
                await store.update_config(config.id, {"total_pct": Decimal("1")})

    async def test_update_missing_config(self, session_factory):
        async with session_factory() as session:
            with pytest.raises(ConfigNotFoundById):
                await CommissionConfigStore(session).update_config(999, {"admin_pct": Decimal("1")})

    async def test_deactivate(self, session_factory):
        async with session_factory() as session:
            store = CommissionConfigStore(session)
            config = await store.create_config("recharge", STANDARD)
            await store.deactivate_config(config.id)
            with pytest.raises(ConfigNotFound):
                await store.get_active_config("recharge")
            # never deleted
            assert len(await store.list_configs("recharge")) == 1

    async def test_writes_are_audited(self, session_factory, hierarchy):
        async with session_factory() as session:
            admin = await session.get(Actor, hierarchy.admin)
            store = CommissionConfigStore(session)
            config = await store.create_config("recharge", STANDARD, performed_by=admin, ip_address="10.0.0.1")
            await store.update_config(config.id, {"admin_pct": Decimal("1")}, performed_by=admin)
            await store.deactivate_config(config.id, performed_by=admin)

        async with session_factory() as session:
            logs = (await session.execute(select(AuditLog).order_by(AuditLog.id))).scalars().all()
            assert [log.action for log in logs] == [
                AuditAction.CREATE_CONFIG,
                AuditAction.UPDATE_CONFIG,
                AuditAction.DEACTIVATE_CONFIG,
            ]
            assert all(log.target_id == config.id for log in logs)
            assert logs[0].ip_address == "10.0.0.1"
