"""
Pytest configuration and fixtures.

Each test gets its own SQLite file so that several sessions (and so
several connections) can work against the same database concurrently.
"""

import os
from decimal import Decimal
from types import SimpleNamespace

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("SERVICE_API_KEY", "test-service-key")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from commission_ledger.db import build_engine, build_session_factory, get_db
from commission_ledger.models import Actor, ActorRole, Base, CommissionConfig
from commission_ledger.utils.password import hash_password

TEST_PASSWORD = "test123"

# Hashing is slow on purpose; every seeded actor shares one hash
_PASSWORD_HASH = None


def password_hash() -> str:
    global _PASSWORD_HASH
    if _PASSWORD_HASH is None:
        _PASSWORD_HASH = hash_password(TEST_PASSWORD)
    return _PASSWORD_HASH


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create test database engine."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


async def add_actor(session, username, role, parent=None, **fields) -> Actor:
    actor = Actor(
        username=username,
        password_hash=password_hash(),
        display_name=username.replace("_", " ").title(),
        role=role,
        parent_id=parent.id if parent is not None else None,
        is_active=True,
        **fields,
    )
    session.add(actor)
    await session.flush()
    return actor


async def add_config(session, service_type="recharge", provider=None, **fields) -> CommissionConfig:
    values = {
        "service_agent_pct": Decimal("3.00"),
        "taluk_manager_pct": Decimal("1.00"),
        "branch_manager_pct": Decimal("0.50"),
        "admin_pct": Decimal("0.50"),
        "registered_user_pct": Decimal("1.00"),
        "is_active": True,
        "is_peak_rate": False,
    }
    values.update(fields)
    values["total_pct"] = sum(
        values[name]
        for name in (
            "service_agent_pct",
            "taluk_manager_pct",
            "branch_manager_pct",
            "admin_pct",
            "registered_user_pct",
        )
    )
    config = CommissionConfig(service_type=service_type, provider=provider, **values)
    session.add(config)
    await session.flush()
    return config


@pytest_asyncio.fixture
async def hierarchy(session_factory):
    """
    admin <- branch manager <- taluk manager <- service agent (pincode 600001),
    plus a registered user outside the tree.
    """
    async with session_factory() as session:
        admin = await add_actor(session, "admin", ActorRole.ADMIN)
        branch = await add_actor(session, "bm_chennai", ActorRole.BRANCH_MANAGER, admin, district="Chennai")
        taluk = await add_actor(
            session, "tm_chennai_north", ActorRole.TALUK_MANAGER, branch,
            district="Chennai", taluk="Chennai North",
        )
        agent = await add_actor(
            session, "sa_600001", ActorRole.SERVICE_AGENT, taluk,
            district="Chennai", taluk="Chennai North", pincode="600001",
        )
        user = await add_actor(session, "customer", ActorRole.REGISTERED_USER)
        await session.commit()

        return SimpleNamespace(
            admin=admin.id,
            branch_manager=branch.id,
            taluk_manager=taluk.id,
            service_agent=agent.id,
            registered_user=user.id,
        )


@pytest_asyncio.fixture
async def recharge_config(session_factory):
    """Active 3 / 1 / 0.5 / 0.5 / 1 percent config for recharge."""
    async with session_factory() as session:
        config = await add_config(session)
        await session.commit()
        return config.id


@pytest.fixture
def app(session_factory):
    from commission_ledger.main import app as fastapi_app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
