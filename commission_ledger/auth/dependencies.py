"""
FastAPI dependencies for authentication.
"""

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.auth.jwt import get_token_from_cookie, verify_token
from commission_ledger.config import settings
from commission_ledger.db import get_db
from commission_ledger.models import Actor, ActorRole

SERVICE_KEY_HEADER = "X-Service-Key"


async def get_current_actor(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """
    Get current authenticated actor.

    Raises 401 if not authenticated, 403 if the actor is inactive.
    """
    token = get_token_from_cookie(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    payload = verify_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    actor = await db.get(Actor, payload["actor_id"])
    if not actor:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Actor not found",
        )

    if not actor.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    return actor


async def require_admin(
    current_actor: Actor = Depends(get_current_actor),
) -> Actor:
    """
    Require the current actor to be an admin.

    Raises 403 otherwise.
    """
    if current_actor.role != ActorRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_actor


async def require_service_caller(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[Actor]:
    """
    Require a caller allowed to report completed transactions.

    Service verticals authenticate with the shared X-Service-Key header and
    get None back; otherwise an admin session is required. Raises 401 for a
    wrong key, 403 for any other role.
    """
    service_key = request.headers.get(SERVICE_KEY_HEADER)
    if service_key is not None:
        expected = settings.service_api_key
        if not expected or not secrets.compare_digest(service_key, expected):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid service key",
            )
        return None

    current_actor = await get_current_actor(request, db)
    if current_actor.role != ActorRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Service or admin access required",
        )
    return current_actor
