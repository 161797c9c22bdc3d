"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTOR_ROLES = ("service_agent", "taluk_manager", "branch_manager", "admin", "registered_user")

# Second use of the actorrole type; it already exists on PostgreSQL
existing_actor_role = sa.Enum(*ACTOR_ROLES, name="actorrole").with_variant(
    postgresql.ENUM(*ACTOR_ROLES, name="actorrole", create_type=False), "postgresql"
)


def upgrade() -> None:
    """Create all initial tables."""

    # Actors table
    op.create_table(
        "actors",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("role", sa.Enum(*ACTOR_ROLES, name="actorrole"), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True, comment="Next actor up the hierarchy"),
        sa.Column("pincode", sa.String(10), nullable=True),
        sa.Column("taluk", sa.String(100), nullable=True),
        sa.Column("district", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("wallet_balance", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("wallet_balance >= 0", name="ck_actors_wallet_balance_non_negative"),
        sa.ForeignKeyConstraint(["parent_id"], ["actors.id"], name="fk_actors_parent_id_actors"),
        sa.PrimaryKeyConstraint("id", name="pk_actors"),
    )
    op.create_index("ix_actors_username", "actors", ["username"], unique=True)
    op.create_index("ix_actors_role", "actors", ["role"])
    op.create_index("ix_actors_parent_id", "actors", ["parent_id"])
    op.create_index("ix_actors_pincode", "actors", ["pincode"])

    # Commission configs table
    op.create_table(
        "commission_configs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("service_type", sa.String(50), nullable=False),
        sa.Column("provider", sa.String(100), nullable=True),
        sa.Column("service_agent_pct", sa.Numeric(5, 2), nullable=False),
        sa.Column("taluk_manager_pct", sa.Numeric(5, 2), nullable=False),
        sa.Column("branch_manager_pct", sa.Numeric(5, 2), nullable=False),
        sa.Column("admin_pct", sa.Numeric(5, 2), nullable=False),
        sa.Column("registered_user_pct", sa.Numeric(5, 2), nullable=False),
        sa.Column("total_pct", sa.Numeric(5, 2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_peak_rate", sa.Boolean(), nullable=False),
        sa.Column("season_name", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_commission_configs"),
    )
    op.create_index(
        "ix_commission_configs_lookup",
        "commission_configs",
        ["service_type", "provider", "is_active"],
    )

    # Distribution headers: the idempotency key lives here
    op.create_table(
        "commission_distributions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("service_type", sa.String(50), nullable=False),
        sa.Column("transaction_id", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("provider", sa.String(100), nullable=True),
        sa.Column("service_agent_id", sa.Integer(), nullable=False),
        sa.Column("registered_user_id", sa.Integer(), nullable=True),
        sa.Column("config_id", sa.Integer(), nullable=False),
        sa.Column("total_distributed", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_redistribution", sa.Boolean(), nullable=False),
        sa.Column("requested_by_id", sa.Integer(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["service_agent_id"], ["actors.id"],
            name="fk_commission_distributions_service_agent_id_actors",
        ),
        sa.ForeignKeyConstraint(
            ["registered_user_id"], ["actors.id"],
            name="fk_commission_distributions_registered_user_id_actors",
        ),
        sa.ForeignKeyConstraint(
            ["config_id"], ["commission_configs.id"],
            name="fk_commission_distributions_config_id_commission_configs",
        ),
        sa.ForeignKeyConstraint(
            ["requested_by_id"], ["actors.id"],
            name="fk_commission_distributions_requested_by_id_actors",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_commission_distributions"),
        sa.UniqueConstraint(
            "service_type", "transaction_id", "sequence",
            name="uq_commission_distributions_service_type_transaction_id_sequence",
        ),
    )

    # Ledger entries
    op.create_table(
        "commission_transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("distribution_id", sa.Integer(), nullable=False),
        sa.Column("payee_id", sa.Integer(), nullable=False),
        sa.Column("payee_role", existing_actor_role, nullable=False),
        sa.Column("service_type", sa.String(50), nullable=False),
        sa.Column("transaction_id", sa.Integer(), nullable=False),
        sa.Column("transaction_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("commission_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("commission_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("provider", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.Enum("pending", "paid", name="ledgerstatus"), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["distribution_id"], ["commission_distributions.id"],
            name="fk_commission_transactions_distribution_id_commission_distributions",
        ),
        sa.ForeignKeyConstraint(
            ["payee_id"], ["actors.id"],
            name="fk_commission_transactions_payee_id_actors",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_commission_transactions"),
        sa.UniqueConstraint(
            "distribution_id", "payee_id",
            name="uq_commission_transactions_distribution_id_payee_id",
        ),
    )
    op.create_index("ix_commission_transactions_distribution_id", "commission_transactions", ["distribution_id"])
    op.create_index("ix_commission_transactions_payee_id", "commission_transactions", ["payee_id"])
    op.create_index("ix_commission_transactions_service_type", "commission_transactions", ["service_type"])
    op.create_index("ix_commission_transactions_transaction_id", "commission_transactions", ["transaction_id"])
    op.create_index("ix_commission_transactions_status", "commission_transactions", ["status"])

    # Wallet history
    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.Enum("credit", "debit", name="wallettransactiontype"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("balance_after", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("service_type", sa.String(50), nullable=True),
        sa.Column("ledger_entry_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["actor_id"], ["actors.id"],
            name="fk_wallet_transactions_actor_id_actors",
        ),
        sa.ForeignKeyConstraint(
            ["ledger_entry_id"], ["commission_transactions.id"],
            name="fk_wallet_transactions_ledger_entry_id_commission_transactions",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_wallet_transactions"),
    )
    op.create_index("ix_wallet_transactions_actor_id", "wallet_transactions", ["actor_id"])
    op.create_index("ix_wallet_transactions_created_at", "wallet_transactions", ["created_at"])

    # Audit logs
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column(
            "action",
            sa.Enum(
                "login", "logout", "create_config", "update_config",
                "deactivate_config", "mark_paid", "redistribute",
                name="auditaction",
            ),
            nullable=False,
        ),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("action_metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["actor_id"], ["actors.id"], name="fk_audit_logs_actor_id_actors"),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("audit_logs")
    op.drop_table("wallet_transactions")
    op.drop_table("commission_transactions")
    op.drop_table("commission_distributions")
    op.drop_table("commission_configs")
    op.drop_table("actors")

    # Drop enums (PostgreSQL only)
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TYPE IF EXISTS auditaction")
        op.execute("DROP TYPE IF EXISTS wallettransactiontype")
        op.execute("DROP TYPE IF EXISTS ledgerstatus")
        op.execute("DROP TYPE IF EXISTS actorrole")
