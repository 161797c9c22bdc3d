"""
Commission config repository.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.models import CommissionConfig


def _provider_clause(provider: Optional[str]):
    if provider is None:
        return CommissionConfig.provider.is_(None)
    return CommissionConfig.provider == provider


class ConfigRepository:
    """Persistence for CommissionConfig rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, config_id: int) -> Optional[CommissionConfig]:
        return await self.session.get(CommissionConfig, config_id)

    async def list(
        self,
        service_type: Optional[str] = None,
        include_inactive: bool = True,
    ) -> List[CommissionConfig]:
        query = select(CommissionConfig)
        if service_type:
            query = query.where(CommissionConfig.service_type == service_type)
        if not include_inactive:
            query = query.where(CommissionConfig.is_active.is_(True))
        query = query.order_by(CommissionConfig.service_type, CommissionConfig.id.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_active(
        self,
        service_type: str,
        provider: Optional[str],
        on: date,
    ) -> Optional[CommissionConfig]:
        """
        Active config covering a day.

        Without a provider every provider of the service type qualifies.
        Ties (a data-entry error) resolve to peak rates first, then the most
        recently updated row, then the highest id.
        """
        query = select(CommissionConfig).where(
            CommissionConfig.service_type == service_type,
            CommissionConfig.is_active.is_(True),
            or_(CommissionConfig.start_date.is_(None), CommissionConfig.start_date <= on),
            or_(CommissionConfig.end_date.is_(None), CommissionConfig.end_date >= on),
        )
        if provider is not None:
            query = query.where(CommissionConfig.provider == provider)

        query = query.order_by(
            CommissionConfig.is_peak_rate.desc(),
            func.coalesce(CommissionConfig.updated_at, CommissionConfig.created_at).desc(),
            CommissionConfig.id.desc(),
        ).limit(1)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def active_for_key(
        self,
        service_type: str,
        provider: Optional[str],
        is_peak_rate: bool,
    ) -> List[CommissionConfig]:
        """Active configs sharing a key and peak flag."""
        result = await self.session.execute(
            select(CommissionConfig).where(
                CommissionConfig.service_type == service_type,
                _provider_clause(provider),
                CommissionConfig.is_peak_rate == is_peak_rate,
                CommissionConfig.is_active.is_(True),
            )
        )
        return list(result.scalars().all())

    async def add(self, config: CommissionConfig) -> CommissionConfig:
        self.session.add(config)
        await self.session.flush()
        return config
