"""
Authentication API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.auth.dependencies import get_current_actor
from commission_ledger.auth.jwt import COOKIE_NAME, create_access_token
from commission_ledger.config import settings
from commission_ledger.db import get_db
from commission_ledger.models import Actor, AuditAction
from commission_ledger.repositories import ActorRepository
from commission_ledger.schemas.auth import ActorResponse, LoginRequest, LoginResponse
from commission_ledger.utils.audit import get_client_ip, log_action
from commission_ledger.utils.password import verify_password

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate an actor and set the JWT cookie."""
    actor = await ActorRepository(db).get_by_username(credentials.username)

    if not actor or not verify_password(credentials.password, actor.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    if not actor.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    token = create_access_token(actor.id, actor.role.value)

    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.jwt_expire_hours * 3600,
    )

    await log_action(
        db=db,
        actor_id=actor.id,
        action=AuditAction.LOGIN,
        ip_address=get_client_ip(request),
    )

    return LoginResponse(
        success=True,
        message="Login successful",
        role=actor.role.value,
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor),
):
    await log_action(
        db=db,
        actor_id=current_actor.id,
        action=AuditAction.LOGOUT,
        ip_address=get_client_ip(request),
    )

    response.delete_cookie(
        key=COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return {"success": True, "message": "Logged out"}


@router.get("/me", response_model=ActorResponse)
async def me(current_actor: Actor = Depends(get_current_actor)):
    return current_actor
