"""
HTTP API tests.

Runs the FastAPI app through httpx's ASGI transport against the per-test
SQLite database.
"""

from decimal import Decimal

from sqlalchemy import select

from commission_ledger.auth.dependencies import SERVICE_KEY_HEADER
from commission_ledger.auth.jwt import COOKIE_NAME, create_access_token
from commission_ledger.models import Actor, ActorRole, AuditAction, AuditLog

from tests.conftest import TEST_PASSWORD, add_actor


SERVICE_HEADERS = {SERVICE_KEY_HEADER: "test-service-key"}


def auth(actor_id: int, role: ActorRole) -> dict:
    token = create_access_token(actor_id, role.value)
    return {"Cookie": f"{COOKIE_NAME}={token}"}


def distribute_body(hierarchy, transaction_id=1001, **kwargs):
    body = {
        "service_type": "recharge",
        "transaction_id": transaction_id,
        "amount": "100.00",
        "service_agent_id": hierarchy.service_agent,
        "registered_user_id": hierarchy.registered_user,
    }
    body.update(kwargs)
    return body


# ── health / auth ────────────────────────────────────────


class TestHealthAndAuth:
    async def test_health(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready(self, client):
        response = await client.get("/api/health/ready")
        assert response.json()["status"] == "ready"

    async def test_login_sets_cookie(self, client, hierarchy, session_factory):
        response = await client.post(
            "/api/auth/login", json={"username": "admin", "password": TEST_PASSWORD}
        )
        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        assert COOKIE_NAME in response.cookies

        async with session_factory() as session:
            log = (await session.execute(select(AuditLog))).scalar_one()
            assert log.action == AuditAction.LOGIN
            assert log.actor_id == hierarchy.admin

    async def test_login_wrong_password(self, client, hierarchy):
        response = await client.post(
            "/api/auth/login", json={"username": "admin", "password": "nope"}
        )
        assert response.status_code == 401

    async def test_me_requires_cookie(self, client, hierarchy):
        assert (await client.get("/api/auth/me")).status_code == 401

    async def test_me(self, client, hierarchy):
        response = await client.get(
            "/api/auth/me", headers=auth(hierarchy.service_agent, ActorRole.SERVICE_AGENT)
        )
        assert response.status_code == 200
        assert response.json()["username"] == "sa_600001"
        assert response.json()["parent_id"] == hierarchy.taluk_manager

    async def test_invalid_token(self, client, hierarchy):
        response = await client.get("/api/auth/me", headers={"Cookie": f"{COOKIE_NAME}=garbage"})
        assert response.status_code == 401


# ── distribution ─────────────────────────────────────────


class TestDistributeEndpoint:
    async def test_happy_path(self, client, hierarchy, recharge_config):
        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy),
            headers=SERVICE_HEADERS,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["replayed"] is False
        assert Decimal(data["total_distributed"]) == Decimal("6.00")
        assert Decimal(data["breakdown"]["service_agent"]) == Decimal("3.00")
        assert len(data["payees"]) == 5

    async def test_repeat_is_replayed(self, client, hierarchy, recharge_config):
        headers = auth(hierarchy.service_agent, ActorRole.SERVICE_AGENT)
        await client.post("/api/commissions/distribute", json=distribute_body(hierarchy), headers=SERVICE_HEADERS)
        response = await client.post(
            "/api/commissions/distribute", json=distribute_body(hierarchy), headers=SERVICE_HEADERS
        )
        assert response.status_code == 200
        assert response.json()["replayed"] is True

        wallet = await client.get("/api/wallet", headers=headers)
        assert Decimal(wallet.json()["balance"]) == Decimal("3.00")

    async def test_requires_authentication(self, client, hierarchy, recharge_config):
        response = await client.post("/api/commissions/distribute", json=distribute_body(hierarchy))
        assert response.status_code == 401

    async def test_actors_cannot_distribute(self, client, hierarchy, recharge_config):
        callers = [
            (hierarchy.registered_user, ActorRole.REGISTERED_USER),
            (hierarchy.service_agent, ActorRole.SERVICE_AGENT),
            (hierarchy.branch_manager, ActorRole.BRANCH_MANAGER),
        ]
        for actor_id, role in callers:
            response = await client.post(
                "/api/commissions/distribute",
                json=distribute_body(hierarchy, amount="9999999999.00"),
                headers=auth(actor_id, role),
            )
            assert response.status_code == 403

        wallet = await client.get(
            "/api/wallet", headers=auth(hierarchy.registered_user, ActorRole.REGISTERED_USER)
        )
        assert Decimal(wallet.json()["balance"]) == Decimal("0")

    async def test_wrong_service_key_is_401(self, client, hierarchy, recharge_config):
        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy),
            headers={SERVICE_KEY_HEADER: "guessed"},
        )
        assert response.status_code == 401

    async def test_admin_can_distribute(self, client, hierarchy, recharge_config):
        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy),
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 200
        assert response.json()["replayed"] is False

    async def test_registered_user_of_wrong_role_is_422(
        self, client, hierarchy, recharge_config, session_factory
    ):
        async with session_factory() as session:
            other_admin = await add_actor(session, "other_admin", ActorRole.ADMIN)
            await session.commit()

        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy, registered_user_id=other_admin.id),
            headers=SERVICE_HEADERS,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidCommissionInput"

    async def test_no_config_is_404(self, client, hierarchy):
        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy),
            headers=SERVICE_HEADERS,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "ConfigNotFound"

    async def test_unknown_agent_is_404(self, client, hierarchy, recharge_config):
        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy, service_agent_id=9999),
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 404

    async def test_incomplete_hierarchy_is_422(self, client, hierarchy, recharge_config):
        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy, service_agent_id=None, pincode="999999"),
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 422
        assert response.json()["error"] == "HierarchyIncomplete"

    async def test_cycle_is_409(self, client, hierarchy, recharge_config, session_factory):
        async with session_factory() as session:
            taluk = await session.get(Actor, hierarchy.taluk_manager)
            taluk.parent_id = hierarchy.service_agent
            await session.commit()

        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy),
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 409
        assert response.json()["error"] == "HierarchyCycle"

    async def test_missing_originator_is_422(self, client, hierarchy, recharge_config):
        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy, service_agent_id=None),
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 422

    async def test_negative_amount_is_422(self, client, hierarchy, recharge_config):
        response = await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy, amount="-5"),
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 422

    async def test_get_distribution(self, client, hierarchy, recharge_config):
        headers = auth(hierarchy.service_agent, ActorRole.SERVICE_AGENT)
        await client.post("/api/commissions/distribute", json=distribute_body(hierarchy), headers=SERVICE_HEADERS)

        response = await client.get("/api/commissions/recharge/1001", headers=headers)
        assert response.status_code == 200
        assert [d["sequence"] for d in response.json()] == [0]

        missing = await client.get("/api/commissions/recharge/7", headers=headers)
        assert missing.status_code == 404

    async def test_get_distribution_limited_to_payees(self, client, hierarchy, recharge_config):
        await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy, registered_user_id=None),
            headers=SERVICE_HEADERS,
        )

        outsider = await client.get(
            "/api/commissions/recharge/1001",
            headers=auth(hierarchy.registered_user, ActorRole.REGISTERED_USER),
        )
        assert outsider.status_code == 403

        admin = await client.get(
            "/api/commissions/recharge/1001", headers=auth(hierarchy.admin, ActorRole.ADMIN)
        )
        assert admin.status_code == 200


# ── wallet ───────────────────────────────────────────────


class TestWalletEndpoints:
    async def test_wallet_history_and_summary(self, client, hierarchy, recharge_config):
        await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy),
            headers=SERVICE_HEADERS,
        )
        headers = auth(hierarchy.taluk_manager, ActorRole.TALUK_MANAGER)

        history = (await client.get("/api/wallet/history", headers=headers)).json()
        assert len(history["items"]) == 1
        assert Decimal(history["items"][0]["amount"]) == Decimal("1.00")

        summary = (await client.get("/api/wallet/commissions", headers=headers)).json()
        assert Decimal(summary["pending"]) == Decimal("1.00")
        assert Decimal(summary["paid"]) == Decimal("0")

        entries = (await client.get("/api/wallet/commissions/entries", headers=headers)).json()
        assert [e["payee_role"] for e in entries] == ["taluk_manager"]


# ── admin ────────────────────────────────────────────────


class TestAdminEndpoints:
    async def test_non_admin_rejected(self, client, hierarchy):
        headers = auth(hierarchy.branch_manager, ActorRole.BRANCH_MANAGER)
        assert (await client.get("/api/admin/configs", headers=headers)).status_code == 403
        assert (await client.get("/api/admin/ledger/pending", headers=headers)).status_code == 403
        assert (await client.get("/api/admin/audit", headers=headers)).status_code == 403

    async def test_config_lifecycle(self, client, hierarchy):
        headers = auth(hierarchy.admin, ActorRole.ADMIN)
        created = await client.post(
            "/api/admin/configs",
            json={
                "service_type": "taxi",
                "service_agent_pct": "3",
                "taluk_manager_pct": "1",
                "branch_manager_pct": "0.5",
                "admin_pct": "0.5",
                "registered_user_pct": "1",
            },
            headers=headers,
        )
        assert created.status_code == 201
        config_id = created.json()["id"]
        assert Decimal(created.json()["total_pct"]) == Decimal("6")

        updated = await client.patch(
            f"/api/admin/configs/{config_id}", json={"admin_pct": "1.5"}, headers=headers
        )
        assert updated.status_code == 200
        assert Decimal(updated.json()["total_pct"]) == Decimal("7")

        deactivated = await client.post(f"/api/admin/configs/{config_id}/deactivate", headers=headers)
        assert deactivated.json()["is_active"] is False

        listed = (await client.get("/api/admin/configs?service_type=taxi", headers=headers)).json()
        assert [c["id"] for c in listed] == [config_id]

        audit = (await client.get("/api/admin/audit", headers=headers)).json()
        assert [item["action"] for item in audit["items"]] == [
            "deactivate_config",
            "update_config",
            "create_config",
        ]

    async def test_config_over_hundred_is_422(self, client, hierarchy):
        response = await client.post(
            "/api/admin/configs",
            json={"service_type": "taxi", "service_agent_pct": "60", "admin_pct": "41"},
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 422

    async def test_unknown_config_is_404(self, client, hierarchy):
        response = await client.patch(
            "/api/admin/configs/999",
            json={"admin_pct": "1"},
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 404

    async def test_ledger_settlement_and_redistribution(self, client, hierarchy, recharge_config):
        await client.post(
            "/api/commissions/distribute",
            json=distribute_body(hierarchy),
            headers=SERVICE_HEADERS,
        )
        headers = auth(hierarchy.admin, ActorRole.ADMIN)

        pending = (await client.get("/api/admin/ledger/pending", headers=headers)).json()
        assert len(pending) == 5

        agents = (
            await client.get("/api/admin/ledger/pending?role=service_agent", headers=headers)
        ).json()
        assert len(agents) == 1

        paid = await client.post(
            "/api/admin/ledger/mark-paid",
            json={"entry_ids": [e["id"] for e in pending]},
            headers=headers,
        )
        assert paid.json() == {"requested": 5, "paid": 5}

        redistributed = await client.post(
            "/api/admin/ledger/redistribute",
            json={"service_type": "recharge", "transaction_id": 1001, "reason": "reversed refund"},
            headers=headers,
        )
        assert redistributed.status_code == 200
        assert redistributed.json()["sequence"] == 1

        wallet = await client.get(
            "/api/wallet", headers=auth(hierarchy.service_agent, ActorRole.SERVICE_AGENT)
        )
        assert Decimal(wallet.json()["balance"]) == Decimal("6.00")

    async def test_redistribute_unknown_is_404(self, client, hierarchy, recharge_config):
        response = await client.post(
            "/api/admin/ledger/redistribute",
            json={"service_type": "recharge", "transaction_id": 55},
            headers=auth(hierarchy.admin, ActorRole.ADMIN),
        )
        assert response.status_code == 404
