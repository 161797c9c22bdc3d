"""
Actor model: every participant of the commission hierarchy.
"""

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commission_ledger.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from commission_ledger.models.audit import AuditLog


class ActorRole(str, Enum):
    """Roles that can receive commission."""
    SERVICE_AGENT = "service_agent"
    TALUK_MANAGER = "taluk_manager"
    BRANCH_MANAGER = "branch_manager"
    ADMIN = "admin"
    REGISTERED_USER = "registered_user"


# Payee order from the originating agent up to the root
HIERARCHY_ROLES = (
    ActorRole.SERVICE_AGENT,
    ActorRole.TALUK_MANAGER,
    ActorRole.BRANCH_MANAGER,
    ActorRole.ADMIN,
)


class Actor(Base, TimestampMixin):
    """
    Account that takes part in the marketplace.

    - service_agent: processes customer transactions, parent is a taluk manager
    - taluk_manager: parent is a branch manager
    - branch_manager: parent is the admin
    - admin: root of the tree, no parent
    - registered_user: end customer, outside the tree

    wallet_balance is only ever changed through WalletAccessor.
    """

    __tablename__ = "actors"
    __table_args__ = (
        CheckConstraint("wallet_balance >= 0", name="wallet_balance_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    role: Mapped[ActorRole] = mapped_column(
        SQLAlchemyEnum(
            ActorRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("actors.id"),
        nullable=True,
        index=True,
        comment="Next actor up the hierarchy",
    )

    # Geographic assignment, used for lookups only
    pincode: Mapped[Optional[str]] = mapped_column(
        String(10),
        nullable=True,
        index=True,
    )
    taluk: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    district: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    wallet_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0.00"),
        server_default="0",
        nullable=False,
    )

    # Relationships
    parent: Mapped[Optional["Actor"]] = relationship(
        "Actor",
        remote_side="Actor.id",
        back_populates="children",
    )
    children: Mapped[List["Actor"]] = relationship(
        "Actor",
        back_populates="parent",
    )
    audit_logs: Mapped[List["AuditLog"]] = relationship(
        "AuditLog",
        back_populates="actor",
    )

    def __repr__(self) -> str:
        return f"<Actor(id={self.id}, username='{self.username}', role={self.role})>"
