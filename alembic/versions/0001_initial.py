"""initial schema: users, offices, measurements, contracts, history_entries

Revision ID: 0001_initial
Revises:
Create Date: 2025-03-01 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLES = ("SUPER_ADMIN", "ADMIN", "MANAGER", "SURVEYOR", "INSTALLER", "SUPPORT")
MEASUREMENT_STATUSES = (
    "NEW",
    "ASSIGNED",
    "IN_PROGRESS",
    "COMPLETED",
    "CANCELLED",
    "CONVERTED",
)
CONTRACT_STATUSES = (
    "DRAFT",
    "ACTIVE",
    "IN_PRODUCTION",
    "INSTALLATION",
    "COMPLETED",
    "CANCELLED",
)

json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamps():
    return (
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.Enum(*USER_ROLES, name="user_role", native_enum=False),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "offices",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("prefix", sa.String(20), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "measurements",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "manager_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "surveyor_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("direction_id", sa.String(64), nullable=True),
        sa.Column("customer_id", sa.String(64), nullable=True),
        sa.Column("reception_date", sa.Date(), nullable=False),
        sa.Column("execution_date", sa.Date(), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_address", sa.String(500), nullable=True),
        sa.Column("customer_phone", sa.String(50), nullable=False),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*MEASUREMENT_STATUSES, name="measurement_status", native_enum=False),
            nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_measurements_manager_id", "measurements", ["manager_id"])
    op.create_index("ix_measurements_surveyor_id", "measurements", ["surveyor_id"])
    op.create_index("ix_measurements_reception_date", "measurements", ["reception_date"])

    op.create_table(
        "contracts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("contract_number", sa.String(64), nullable=False, unique=True),
        sa.Column("contract_date", sa.Date(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*CONTRACT_STATUSES, name="contract_status", native_enum=False),
            nullable=False,
        ),
        sa.Column("direction_id", sa.String(64), nullable=True),
        sa.Column("customer_id", sa.String(64), nullable=True),
        sa.Column(
            "manager_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "surveyor_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "measurement_id",
            sa.Uuid(),
            sa.ForeignKey("measurements.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "office_id",
            sa.Uuid(),
            sa.ForeignKey("offices.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("validity_start", sa.Date(), nullable=True),
        sa.Column("validity_end", sa.Date(), nullable=True),
        sa.Column("installation_date", sa.Date(), nullable=True),
        sa.Column("delivery_date", sa.Date(), nullable=True),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_address", sa.String(500), nullable=True),
        sa.Column("customer_phone", sa.String(50), nullable=True),
        sa.Column("discount", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("advance_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("source", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_contracts_contract_date", "contracts", ["contract_date"])
    op.create_index("ix_contracts_manager_id", "contracts", ["manager_id"])
    op.create_index("ix_contracts_office_id", "contracts", ["office_id"])

    op.create_table(
        "history_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("entity_type", sa.String(40), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("snapshot", json_type, nullable=False),
        sa.Column("schema_version", sa.Integer(), nullable=False),
        sa.Column("changed_fields", json_type, nullable=False),
        sa.Column(
            "action",
            sa.Enum("UPDATE", "ROLLBACK", name="history_action", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "changed_by",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "entity_type", "entity_id", "version", name="uq_history_entity_version"
        ),
    )
    op.create_index(
        "ix_history_entity",
        "history_entries",
        ["entity_type", "entity_id", "changed_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_history_entity", table_name="history_entries")
    op.drop_table("history_entries")
    op.drop_index("ix_contracts_office_id", table_name="contracts")
    op.drop_index("ix_contracts_manager_id", table_name="contracts")
    op.drop_index("ix_contracts_contract_date", table_name="contracts")
    op.drop_table("contracts")
    op.drop_index("ix_measurements_reception_date", table_name="measurements")
    op.drop_index("ix_measurements_surveyor_id", table_name="measurements")
    op.drop_index("ix_measurements_manager_id", table_name="measurements")
    op.drop_table("measurements")
    op.drop_table("offices")
    op.drop_table("users")
