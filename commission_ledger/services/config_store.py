"""
Commission config store.

Selection:
- service type must match and the config must be active
- the validity window (start/end date, open ends unbounded) must cover the day
- a supplied provider must match exactly
- peak-rate configs override base configs while inside their window

Writes keep at most one active config per (service type, provider, peak flag)
for any overlapping window: activating a config deactivates the others in the
same transaction.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.errors import (
    ConfigNotFound,
    ConfigNotFoundById,
    InvalidCommissionConfig,
)
from commission_ledger.models import Actor, ActorRole, AuditAction, CommissionConfig
from commission_ledger.repositories import ConfigRepository
from commission_ledger.services.commission import HUNDRED, ZERO
from commission_ledger.utils.audit import log_action

logger = logging.getLogger(__name__)

# Column holding each role's percentage
PCT_FIELDS: Dict[ActorRole, str] = {
    ActorRole.SERVICE_AGENT: "service_agent_pct",
    ActorRole.TALUK_MANAGER: "taluk_manager_pct",
    ActorRole.BRANCH_MANAGER: "branch_manager_pct",
    ActorRole.ADMIN: "admin_pct",
    ActorRole.REGISTERED_USER: "registered_user_pct",
}

UPDATABLE_FIELDS = set(PCT_FIELDS.values()) | {
    "service_type",
    "provider",
    "start_date",
    "end_date",
    "is_peak_rate",
    "season_name",
    "is_active",
}


def today() -> date:
    return datetime.now(timezone.utc).date()


def windows_overlap(a: CommissionConfig, b: CommissionConfig) -> bool:
    """Whether two validity windows share at least one day."""
    if a.end_date and b.start_date and a.end_date < b.start_date:
        return False
    if b.end_date and a.start_date and b.end_date < a.start_date:
        return False
    return True


def validate_config(config: CommissionConfig) -> None:
    """Check per-role bounds, the 100% ceiling and the window order."""
    total = ZERO
    for role, field_name in PCT_FIELDS.items():
        pct = getattr(config, field_name)
        if pct is None:
            raise InvalidCommissionConfig(f"{field_name} is required")
        pct = Decimal(pct)
        if pct < ZERO or pct > HUNDRED:
            raise InvalidCommissionConfig(f"{field_name} must be within [0, 100], got {pct}")
        total += pct
    if total > HUNDRED:
        raise InvalidCommissionConfig(f"Percentages add up to {total}%, more than 100%")
    if config.start_date and config.end_date and config.start_date > config.end_date:
        raise InvalidCommissionConfig("start_date is after end_date")
    config.total_pct = total


class CommissionConfigStore:
    """Active-config lookup and admin writes."""

    def __init__(self, session: AsyncSession, configs: Optional[ConfigRepository] = None):
        self.session = session
        self.configs = configs or ConfigRepository(session)

    async def get_active_config(
        self,
        service_type: str,
        provider: Optional[str] = None,
        on: Optional[date] = None,
    ) -> CommissionConfig:
        config = await self.configs.find_active(service_type, provider, on or today())
        if config is None:
            raise ConfigNotFound(service_type, provider)
        return config

    async def get_config(self, config_id: int) -> CommissionConfig:
        config = await self.configs.get(config_id)
        if config is None:
            raise ConfigNotFoundById(config_id)
        return config

    async def list_configs(
        self,
        service_type: Optional[str] = None,
        include_inactive: bool = True,
    ) -> List[CommissionConfig]:
        return await self.configs.list(service_type, include_inactive)

    async def _deactivate_overlapping(self, config: CommissionConfig) -> List[int]:
        others = await self.configs.active_for_key(
            config.service_type, config.provider, config.is_peak_rate
        )
        deactivated = []
        for other in others:
            if other.id != config.id and windows_overlap(config, other):
                other.is_active = False
                deactivated.append(other.id)
        if deactivated:
            logger.info(
                f"Config {config.id} supersedes {deactivated} for "
                f"{config.service_type}/{config.provider or '*'}"
            )
        return deactivated

    async def create_config(
        self,
        service_type: str,
        percentages: Mapping[ActorRole, Decimal],
        provider: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_peak_rate: bool = False,
        season_name: Optional[str] = None,
        is_active: bool = True,
        performed_by: Optional[Actor] = None,
        ip_address: Optional[str] = None,
    ) -> CommissionConfig:
        """
        Create a config and, if active, retire the one it replaces.

        Roles missing from percentages get 0%.
        """
        config = CommissionConfig(
            service_type=service_type,
            provider=provider,
            start_date=start_date,
            end_date=end_date,
            is_peak_rate=is_peak_rate,
            season_name=season_name,
            is_active=is_active,
        )
        for role, field_name in PCT_FIELDS.items():
            setattr(config, field_name, Decimal(percentages.get(role, ZERO)))
        validate_config(config)

        await self.configs.add(config)
        superseded = await self._deactivate_overlapping(config) if config.is_active else []

        if performed_by is not None:
            await log_action(
                self.session,
                actor_id=performed_by.id,
                action=AuditAction.CREATE_CONFIG,
                target_type="config",
                target_id=config.id,
                action_metadata={"superseded": superseded, "total_pct": config.total_pct},
                ip_address=ip_address,
            )

        await self.session.commit()
        logger.info(f"Created commission config {config.id} for {service_type}/{provider or '*'}")
        return config

    async def update_config(
        self,
        config_id: int,
        fields: Mapping[str, Any],
        performed_by: Optional[Actor] = None,
        ip_address: Optional[str] = None,
    ) -> CommissionConfig:
        """Apply a partial update; unknown field names are rejected."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidCommissionConfig(f"Cannot update fields: {sorted(unknown)}")

        config = await self.get_config(config_id)
        for name, value in fields.items():
            setattr(config, name, value)
        validate_config(config)
        await self.session.flush()

        superseded = await self._deactivate_overlapping(config) if config.is_active else []

        if performed_by is not None:
            await log_action(
                self.session,
                actor_id=performed_by.id,
                action=AuditAction.UPDATE_CONFIG,
                target_type="config",
                target_id=config.id,
                action_metadata={
                    "fields": dict(fields),
                    "superseded": superseded,
                },
                ip_address=ip_address,
            )

        await self.session.commit()
        return config

    async def deactivate_config(
        self,
        config_id: int,
        performed_by: Optional[Actor] = None,
        ip_address: Optional[str] = None,
    ) -> CommissionConfig:
        """Soft-delete: configs are never removed."""
        config = await self.get_config(config_id)
        config.is_active = False

        if performed_by is not None:
            await log_action(
                self.session,
                actor_id=performed_by.id,
                action=AuditAction.DEACTIVATE_CONFIG,
                target_type="config",
                target_id=config.id,
                ip_address=ip_address,
            )

        await self.session.commit()
        logger.info(f"Deactivated commission config {config_id}")
        return config
