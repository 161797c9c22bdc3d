"""
Wallet accessor: the only code allowed to change Actor.wallet_balance.

Every mutation is a single conditional UPDATE ... RETURNING executed by the
database, never read-modify-write in Python, so concurrent credits to the
same actor cannot lose updates. The accessor never commits; it joins the
caller's transaction.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.errors import ActorNotFound, InsufficientBalance, InvalidCommissionInput
from commission_ledger.models import Actor, WalletTransaction, WalletTransactionType
from commission_ledger.services.commission import ZERO, to_money

logger = logging.getLogger(__name__)


class WalletAccessor:
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _positive(amount) -> Decimal:
        amount = to_money(amount)
        if amount <= ZERO:
            raise InvalidCommissionInput(f"Wallet amount must be positive, got {amount}")
        return amount

    async def get_balance(self, actor_id: int) -> Decimal:
        """Current balance, read straight from the row (no identity map)."""
        result = await self.session.execute(
            select(Actor.wallet_balance).where(Actor.id == actor_id)
        )
        balance = result.scalar_one_or_none()
        if balance is None:
            raise ActorNotFound(actor_id)
        return to_money(balance)

    async def _record(
        self,
        actor_id: int,
        kind: WalletTransactionType,
        amount: Decimal,
        balance_after: Decimal,
        description: str,
        service_type: Optional[str],
        ledger_entry_id: Optional[int],
    ) -> None:
        self.session.add(
            WalletTransaction(
                actor_id=actor_id,
                type=kind,
                amount=amount,
                balance_after=balance_after,
                description=description[:255],
                service_type=service_type,
                ledger_entry_id=ledger_entry_id,
            )
        )

    async def credit(
        self,
        actor_id: int,
        amount,
        description: str = "Wallet credit",
        service_type: Optional[str] = None,
        ledger_entry_id: Optional[int] = None,
    ) -> Decimal:
        """Atomically add to a balance and return the new balance."""
        amount = self._positive(amount)
        result = await self.session.execute(
            update(Actor)
            .where(Actor.id == actor_id)
            .values(wallet_balance=Actor.wallet_balance + amount)
            .returning(Actor.wallet_balance)
            .execution_options(synchronize_session=False)
        )
        new_balance = result.scalar_one_or_none()
        if new_balance is None:
            raise ActorNotFound(actor_id)

        new_balance = to_money(new_balance)
        await self._record(
            actor_id, WalletTransactionType.CREDIT, amount, new_balance,
            description, service_type, ledger_entry_id,
        )
        logger.debug(f"Credited {amount} to actor {actor_id}, balance {new_balance}")
        return new_balance

    async def debit(
        self,
        actor_id: int,
        amount,
        description: str = "Wallet debit",
        service_type: Optional[str] = None,
    ) -> Decimal:
        """
        Atomically subtract from a balance.

        The balance check is part of the UPDATE's WHERE clause, so two
        concurrent debits can never take the balance below zero.
        """
        amount = self._positive(amount)
        result = await self.session.execute(
            update(Actor)
            .where(Actor.id == actor_id, Actor.wallet_balance >= amount)
            .values(wallet_balance=Actor.wallet_balance - amount)
            .returning(Actor.wallet_balance)
            .execution_options(synchronize_session=False)
        )
        new_balance = result.scalar_one_or_none()
        if new_balance is None:
            # Either the actor is missing or the guard rejected the debit
            available = await self.get_balance(actor_id)
            raise InsufficientBalance(actor_id, amount, available)

        new_balance = to_money(new_balance)
        await self._record(
            actor_id, WalletTransactionType.DEBIT, amount, new_balance,
            description, service_type, None,
        )
        return new_balance

    async def history(self, actor_id: int, limit: int = 50, offset: int = 0) -> List[WalletTransaction]:
        result = await self.session.execute(
            select(WalletTransaction)
            .where(WalletTransaction.actor_id == actor_id)
            .order_by(WalletTransaction.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
