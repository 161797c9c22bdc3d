"""
Ledger models for commission distribution.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commission_ledger.models.actor import ActorRole
from commission_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from commission_ledger.models.actor import Actor
    from commission_ledger.models.commission_config import CommissionConfig


class LedgerStatus(str, Enum):
    """Settlement status of a ledger entry."""
    PENDING = "pending"  # Credited to the wallet, not yet settled
    PAID = "paid"        # Settled, terminal


class CommissionDistribution(Base):
    """
    One distribution run for an originating transaction.

    sequence 0 is the normal distribution. Manual redistributions take
    sequence 1, 2, ... The unique key on (service_type, transaction_id,
    sequence) is what makes distribution idempotent under concurrent retries.
    """

    __tablename__ = "commission_distributions"
    __table_args__ = (
        UniqueConstraint("service_type", "transaction_id", "sequence"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    service_type: Mapped[str] = mapped_column(String(50), nullable=False)
    transaction_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="ID of the originating transaction in its vertical",
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    provider: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    service_agent_id: Mapped[int] = mapped_column(ForeignKey("actors.id"), nullable=False)
    registered_user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("actors.id"), nullable=True)
    config_id: Mapped[int] = mapped_column(ForeignKey("commission_configs.id"), nullable=False)
    total_distributed: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    is_redistribution: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    requested_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("actors.id"),
        nullable=True,
        comment="Admin who forced a redistribution",
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    entries: Mapped[List["CommissionTransaction"]] = relationship(
        "CommissionTransaction",
        back_populates="distribution",
        order_by="CommissionTransaction.id",
    )
    config: Mapped["CommissionConfig"] = relationship("CommissionConfig")

    def __repr__(self) -> str:
        return (
            f"<CommissionDistribution(id={self.id}, {self.service_type}#{self.transaction_id}, "
            f"seq={self.sequence}, total={self.total_distributed})>"
        )


class CommissionTransaction(Base, TimestampMixin):
    """
    Ledger entry: one payee's commission for one distribution.

    Rows are never deleted. The only mutation is pending -> paid.
    """

    __tablename__ = "commission_transactions"
    __table_args__ = (
        UniqueConstraint("distribution_id", "payee_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    distribution_id: Mapped[int] = mapped_column(
        ForeignKey("commission_distributions.id"),
        nullable=False,
        index=True,
    )
    payee_id: Mapped[int] = mapped_column(
        ForeignKey("actors.id"),
        nullable=False,
        index=True,
    )
    payee_role: Mapped[ActorRole] = mapped_column(
        SQLAlchemyEnum(
            ActorRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    service_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    transaction_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    transaction_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    commission_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        comment="Percentage applied",
    )
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    provider: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[LedgerStatus] = mapped_column(
        SQLAlchemyEnum(
            LedgerStatus,
            values_callable=lambda x: [e.value for e in x],
        ),
        default=LedgerStatus.PENDING,
        nullable=False,
        index=True,
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    distribution: Mapped["CommissionDistribution"] = relationship(
        "CommissionDistribution",
        back_populates="entries",
    )
    payee: Mapped["Actor"] = relationship("Actor")

    def __repr__(self) -> str:
        return (
            f"<CommissionTransaction(id={self.id}, payee_id={self.payee_id}, "
            f"amount={self.commission_amount}, status={self.status})>"
        )
