"""
Commission Ledger

Main FastAPI application with:
- Commission distribution for completed service transactions
- Actor wallets and commission ledger
- Admin commission tables, settlement and audit log
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from commission_ledger.api import api_router
from commission_ledger.api.errors import register_exception_handlers
from commission_ledger.config import settings
from commission_ledger.db import get_db_context
from commission_ledger.models import Actor, ActorRole
from commission_ledger.repositories import ActorRepository
from commission_ledger.scheduler import scheduler, setup_scheduler
from commission_ledger.utils.password import hash_password

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def ensure_root_admin() -> None:
    """Create the root admin account if the tree has no root yet."""
    async with get_db_context() as db:
        actors = ActorRepository(db)
        if await actors.get_root_admin() is not None:
            return

        logger.info("Creating root admin account...")
        actors.add(
            Actor(
                username=settings.admin_username,
                password_hash=hash_password(settings.admin_password),
                role=ActorRole.ADMIN,
                display_name="Admin",
                is_active=True,
            )
        )
        logger.info(f"Root admin account created: {settings.admin_username}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Creates the root admin account if not exists
    - Starts the scheduler when a job is configured

    Shutdown:
    - Stops the scheduler
    """
    logger.info("Starting Commission Ledger...")

    await ensure_root_admin()

    if setup_scheduler():
        scheduler.start()

    logger.info("Commission Ledger started successfully!")

    yield

    logger.info("Shutting down Commission Ledger...")
    if scheduler.running:
        scheduler.shutdown(wait=False)


app = FastAPI(
    title="Commission Ledger",
    description="Commission calculation and distribution ledger",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

register_exception_handlers(app)

app.include_router(api_router)  # /api/* endpoints


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "commission_ledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
