"""Admin commission config endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.auth.dependencies import require_admin
from commission_ledger.db import get_db
from commission_ledger.models import Actor
from commission_ledger.schemas.commission import ConfigCreate, ConfigResponse, ConfigUpdate
from commission_ledger.services.config_store import CommissionConfigStore
from commission_ledger.utils.audit import get_client_ip

router = APIRouter(prefix="/configs")


@router.get("", response_model=List[ConfigResponse])
async def list_configs(
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(require_admin),
    service_type: Optional[str] = Query(None),
    include_inactive: bool = Query(True),
):
    return await CommissionConfigStore(db).list_configs(service_type, include_inactive)


@router.post("", response_model=ConfigResponse, status_code=201)
async def create_config(
    request: Request,
    data: ConfigCreate,
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(require_admin),
):
    """
    Create a commission table.

    An active config retires any active config of the same key whose
    validity window overlaps.
    """
    return await CommissionConfigStore(db).create_config(
        service_type=data.service_type,
        percentages=data.percentages(),
        provider=data.provider,
        start_date=data.start_date,
        end_date=data.end_date,
        is_peak_rate=data.is_peak_rate,
        season_name=data.season_name,
        is_active=data.is_active,
        performed_by=current_actor,
        ip_address=get_client_ip(request),
    )


@router.patch("/{config_id}", response_model=ConfigResponse)
async def update_config(
    request: Request,
    config_id: int,
    data: ConfigUpdate,
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(require_admin),
):
    return await CommissionConfigStore(db).update_config(
        config_id,
        data.model_dump(exclude_unset=True),
        performed_by=current_actor,
        ip_address=get_client_ip(request),
    )


@router.post("/{config_id}/deactivate", response_model=ConfigResponse)
async def deactivate_config(
    request: Request,
    config_id: int,
    db: AsyncSession = Depends(get_db),
    current_actor: Actor = Depends(require_admin),
):
    return await CommissionConfigStore(db).deactivate_config(
        config_id,
        performed_by=current_actor,
        ip_address=get_client_ip(request),
    )
