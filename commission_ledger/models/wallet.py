"""
Wallet history model.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from commission_ledger.models.base import Base


class WalletTransactionType(str, Enum):
    """Direction of a wallet movement."""
    CREDIT = "credit"
    DEBIT = "debit"


class WalletTransaction(Base):
    """
    Append-only record of every wallet balance change.

    balance_after is the value returned by the atomic update, so the
    history can be replayed to audit the current balance.
    """

    __tablename__ = "wallet_transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    actor_id: Mapped[int] = mapped_column(
        ForeignKey("actors.id"),
        nullable=False,
        index=True,
    )
    type: Mapped[WalletTransactionType] = mapped_column(
        SQLAlchemyEnum(
            WalletTransactionType,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    service_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    ledger_entry_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("commission_transactions.id"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<WalletTransaction(id={self.id}, actor_id={self.actor_id}, {self.type} {self.amount})>"
