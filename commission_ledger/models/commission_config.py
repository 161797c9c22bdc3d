"""
Commission percentage tables per service type and provider.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import Boolean, Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from commission_ledger.models.actor import ActorRole
from commission_ledger.models.base import Base, TimestampMixin

PERCENT = Numeric(5, 2)


class CommissionConfig(Base, TimestampMixin):
    """
    Versioned commission table for a (service_type, provider) key.

    Percentages are absolute cuts of the transaction amount, not shares of a
    pool, so they only need to stay within 100% in total. Rows are never
    deleted, only deactivated.
    """

    __tablename__ = "commission_configs"
    __table_args__ = (
        Index("ix_commission_configs_lookup", "service_type", "provider", "is_active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    service_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="recharge, booking, taxi, delivery, grocery, recycling, ...",
    )
    provider: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Operator or partner, e.g. Airtel, Jio, IRCTC",
    )

    service_agent_pct: Mapped[Decimal] = mapped_column(PERCENT, nullable=False, default=Decimal("3.00"))
    taluk_manager_pct: Mapped[Decimal] = mapped_column(PERCENT, nullable=False, default=Decimal("1.00"))
    branch_manager_pct: Mapped[Decimal] = mapped_column(PERCENT, nullable=False, default=Decimal("0.50"))
    admin_pct: Mapped[Decimal] = mapped_column(PERCENT, nullable=False, default=Decimal("0.50"))
    registered_user_pct: Mapped[Decimal] = mapped_column(PERCENT, nullable=False, default=Decimal("1.00"))
    total_pct: Mapped[Decimal] = mapped_column(
        PERCENT,
        nullable=False,
        default=Decimal("6.00"),
        comment="Sum of the five role percentages",
    )

    # Seasonal / peak pricing
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_peak_rate: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Overrides the base config while inside its window",
    )
    season_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def rates(self) -> Dict[ActorRole, Decimal]:
        """Percentage per payee role."""
        return {
            ActorRole.SERVICE_AGENT: self.service_agent_pct,
            ActorRole.TALUK_MANAGER: self.taluk_manager_pct,
            ActorRole.BRANCH_MANAGER: self.branch_manager_pct,
            ActorRole.ADMIN: self.admin_pct,
            ActorRole.REGISTERED_USER: self.registered_user_pct,
        }

    def covers(self, on: date) -> bool:
        """Whether the validity window contains the given day."""
        if self.start_date and on < self.start_date:
            return False
        if self.end_date and on > self.end_date:
            return False
        return True

    def __repr__(self) -> str:
        return (
            f"<CommissionConfig(id={self.id}, service_type='{self.service_type}', "
            f"provider={self.provider!r}, active={self.is_active})>"
        )
