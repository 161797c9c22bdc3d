"""
Ledger repository: distribution headers and commission entries.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from commission_ledger.errors import AlreadyDistributed
from commission_ledger.models import (
    ActorRole,
    CommissionDistribution,
    CommissionTransaction,
    LedgerStatus,
)


class LedgerRepository:
    """Persistence for CommissionDistribution and CommissionTransaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_distribution(
        self,
        service_type: str,
        transaction_id: int,
        sequence: int = 0,
    ) -> Optional[CommissionDistribution]:
        result = await self.session.execute(
            select(CommissionDistribution)
            .options(selectinload(CommissionDistribution.entries))
            .where(
                CommissionDistribution.service_type == service_type,
                CommissionDistribution.transaction_id == transaction_id,
                CommissionDistribution.sequence == sequence,
            )
        )
        return result.scalar_one_or_none()

    async def latest_distribution(
        self,
        service_type: str,
        transaction_id: int,
    ) -> Optional[CommissionDistribution]:
        result = await self.session.execute(
            select(CommissionDistribution)
            .options(selectinload(CommissionDistribution.entries))
            .where(
                CommissionDistribution.service_type == service_type,
                CommissionDistribution.transaction_id == transaction_id,
            )
            .order_by(CommissionDistribution.sequence.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_distributions(
        self,
        service_type: str,
        transaction_id: int,
    ) -> List[CommissionDistribution]:
        result = await self.session.execute(
            select(CommissionDistribution)
            .options(selectinload(CommissionDistribution.entries))
            .where(
                CommissionDistribution.service_type == service_type,
                CommissionDistribution.transaction_id == transaction_id,
            )
            .order_by(CommissionDistribution.sequence)
        )
        return list(result.scalars().all())

    async def add_distribution(self, distribution: CommissionDistribution) -> CommissionDistribution:
        """
        Claim the (service_type, transaction_id, sequence) key.

        Runs inside a savepoint so a lost race leaves the outer
        transaction usable; raises AlreadyDistributed in that case.
        """
        try:
            async with self.session.begin_nested():
                self.session.add(distribution)
                await self.session.flush()
        except IntegrityError as e:
            raise AlreadyDistributed(
                distribution.service_type,
                distribution.transaction_id,
                distribution.sequence,
            ) from e
        return distribution

    async def add_entries(self, entries: Iterable[CommissionTransaction]) -> List[CommissionTransaction]:
        entries = list(entries)
        self.session.add_all(entries)
        await self.session.flush()
        return entries

    async def pending_entries(
        self,
        role: Optional[ActorRole] = None,
        service_type: Optional[str] = None,
    ) -> List[CommissionTransaction]:
        query = select(CommissionTransaction).where(
            CommissionTransaction.status == LedgerStatus.PENDING
        )
        if role is not None:
            query = query.where(CommissionTransaction.payee_role == role)
        if service_type:
            query = query.where(CommissionTransaction.service_type == service_type)
        query = query.order_by(CommissionTransaction.created_at.desc(), CommissionTransaction.id.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def entries_for_payee(
        self,
        payee_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> List[CommissionTransaction]:
        result = await self.session.execute(
            select(CommissionTransaction)
            .where(CommissionTransaction.payee_id == payee_id)
            .order_by(CommissionTransaction.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def totals_for_payee(self, payee_id: int) -> Dict[LedgerStatus, Decimal]:
        result = await self.session.execute(
            select(
                CommissionTransaction.status,
                func.coalesce(func.sum(CommissionTransaction.commission_amount), Decimal("0")),
            )
            .where(CommissionTransaction.payee_id == payee_id)
            .group_by(CommissionTransaction.status)
        )
        totals = {status: Decimal("0") for status in LedgerStatus}
        for status, amount in result.all():
            totals[LedgerStatus(status)] = Decimal(str(amount))
        return totals

    async def mark_paid(self, entry_ids: Iterable[int]) -> int:
        """pending -> paid for the given ids; already paid rows are left alone."""
        ids = sorted(set(entry_ids))
        if not ids:
            return 0
        result = await self.session.execute(
            update(CommissionTransaction)
            .where(
                CommissionTransaction.id.in_(ids),
                CommissionTransaction.status == LedgerStatus.PENDING,
            )
            .values(status=LedgerStatus.PAID, paid_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def pending_ids_created_before(self, cutoff: datetime) -> List[int]:
        result = await self.session.execute(
            select(CommissionTransaction.id).where(
                CommissionTransaction.status == LedgerStatus.PENDING,
                CommissionTransaction.created_at < cutoff,
            )
        )
        return list(result.scalars().all())
