"""
Seed a sample hierarchy and commission tables.

Usage:
    python scripts/seed_hierarchy.py

Or with custom DATABASE_URL:
    DATABASE_URL="sqlite+aiosqlite:///./ledger.db" python scripts/seed_hierarchy.py --create-tables

This script creates:
- Root admin (if not exists)
- One branch manager per district, one taluk manager per taluk
- One service agent per pincode
- A registered user
- Default commission configs for each service type
"""

import argparse
import asyncio
import os
import sys
from decimal import Decimal

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.config import settings
from commission_ledger.db import build_engine, build_session_factory
from commission_ledger.models import Actor, ActorRole, Base
from commission_ledger.repositories import ActorRepository
from commission_ledger.services.config_store import CommissionConfigStore
from commission_ledger.utils.password import hash_password


# ===== SAMPLE DATA =====

PINCODES = {
    "Chennai": {
        "Chennai North": ["600001", "600002"],
        "Chennai South": ["600011", "600012"],
    },
    "Coimbatore": {
        "Coimbatore North": ["641001"],
        "Pollachi": ["642001"],
    },
}

SERVICE_TYPES = ["recharge", "booking", "rental", "taxi", "delivery", "grocery", "recycling"]

DEFAULT_PERCENTAGES = {
    ActorRole.SERVICE_AGENT: Decimal("3.00"),
    ActorRole.TALUK_MANAGER: Decimal("1.00"),
    ActorRole.BRANCH_MANAGER: Decimal("0.50"),
    ActorRole.ADMIN: Decimal("0.50"),
    ActorRole.REGISTERED_USER: Decimal("1.00"),
}

DEFAULT_PASSWORD = "test123"


def slug(name: str) -> str:
    return name.lower().replace(" ", "_")


async def get_or_create(
    db: AsyncSession,
    username: str,
    role: ActorRole,
    display_name: str,
    parent: Actor = None,
    **fields,
) -> Actor:
    actors = ActorRepository(db)
    actor = await actors.get_by_username(username)
    if actor:
        print(f"{role.value} already exists: {username} (id={actor.id})")
        return actor

    actor = actors.add(
        Actor(
            username=username,
            password_hash=hash_password(DEFAULT_PASSWORD),
            role=role,
            display_name=display_name,
            parent_id=parent.id if parent else None,
            is_active=True,
            **fields,
        )
    )
    await db.flush()
    print(f"Created {role.value}: {username} (id={actor.id})")
    return actor


async def seed_hierarchy(db: AsyncSession) -> None:
    admin = await ActorRepository(db).get_root_admin()
    if admin is None:
        admin = await get_or_create(
            db,
            settings.admin_username,
            ActorRole.ADMIN,
            "Admin",
        )

    for district, taluks in PINCODES.items():
        branch = await get_or_create(
            db,
            f"bm_{slug(district)}",
            ActorRole.BRANCH_MANAGER,
            f"{district} Branch Manager",
            parent=admin,
            district=district,
        )
        for taluk, pincodes in taluks.items():
            taluk_manager = await get_or_create(
                db,
                f"tm_{slug(taluk)}",
                ActorRole.TALUK_MANAGER,
                f"{taluk} Taluk Manager",
                parent=branch,
                district=district,
                taluk=taluk,
            )
            for pincode in pincodes:
                await get_or_create(
                    db,
                    f"sa_{pincode}",
                    ActorRole.SERVICE_AGENT,
                    f"Service Agent {pincode}",
                    parent=taluk_manager,
                    district=district,
                    taluk=taluk,
                    pincode=pincode,
                )

    await get_or_create(db, "test_user", ActorRole.REGISTERED_USER, "Test User")
    await db.commit()


async def seed_configs(db: AsyncSession) -> None:
    store = CommissionConfigStore(db)
    for service_type in SERVICE_TYPES:
        existing = await store.list_configs(service_type, include_inactive=False)
        if existing:
            print(f"Config for {service_type} already active (id={existing[0].id})")
            continue
        config = await store.create_config(service_type, DEFAULT_PERCENTAGES)
        print(f"Created config for {service_type} (id={config.id}, total {config.total_pct}%)")


async def seed_all(database_url: str, create_tables: bool) -> None:
    engine = build_engine(database_url)
    session_factory = build_session_factory(engine)

    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as db:
        await seed_hierarchy(db)
        await seed_configs(db)

    print("\n" + "=" * 50)
    print("SAMPLE DATA CREATED SUCCESSFULLY!")
    print("=" * 50)
    print(f"All seeded accounts use the password: {DEFAULT_PASSWORD}")

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a sample commission hierarchy")
    parser.add_argument("--database-url", default=settings.database_url, help="Async database URL")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables with metadata.create_all instead of running migrations",
    )

    args = parser.parse_args()

    asyncio.run(seed_all(args.database_url, args.create_tables))
