"""Initial automation schema.

Revision ID: 001
Revises:
Create Date: 2025-07-02

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        nullable=False,
        server_default=sa.text("gen_random_uuid()"),
    )


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    """Create the automation schema."""
    # Farms are registered by the portal; the core reads id and location
    op.create_table(
        "farm_profiles",
        _uuid_pk(),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("farm_name", sa.String(200), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("district", sa.String(255), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_farm_profiles")),
    )

    op.create_table(
        "policy_products",
        _uuid_pk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("insurer_id", sa.String(255), nullable=True),
        sa.Column("crop_type", sa.String(100), nullable=False),
        sa.Column("season", sa.String(50), nullable=False),
        sa.Column("base_premium", sa.Numeric(12, 2), nullable=False),
        sa.Column("coverage_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("duration_months", sa.Integer(), nullable=False),
        sa.Column(
            "automation_config",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_policy_products")),
        sa.CheckConstraint("coverage_amount > 0", name=op.f("ck_policy_products_coverage")),
    )
    op.create_index(
        "ix_policy_products_crop_season",
        "policy_products",
        ["crop_type", "season"],
        unique=False,
    )

    op.create_table(
        "user_policies",
        _uuid_pk(),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("farm_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("policy_product_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("insurer_id", sa.String(255), nullable=True),
        sa.Column("premium_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("coverage_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column(
            "payment_status", sa.String(20), nullable=False, server_default="Pending"
        ),
        sa.Column("claim_status", sa.String(20), nullable=False, server_default="None"),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["farm_id"],
            ["farm_profiles.id"],
            name=op.f("fk_user_policies_farm_id_farm_profiles"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["policy_product_id"],
            ["policy_products.id"],
            name=op.f("fk_user_policies_policy_product_id_policy_products"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_policies")),
        sa.CheckConstraint(
            "payment_status IN ('Pending', 'Paid', 'Failed')",
            name=op.f("ck_user_policies_payment_status"),
        ),
        sa.CheckConstraint(
            "claim_status IN ('None', 'Pending', 'Approved', 'Rejected', 'Paid')",
            name=op.f("ck_user_policies_claim_status"),
        ),
        sa.CheckConstraint("end_date >= start_date", name=op.f("ck_user_policies_dates")),
    )
    op.create_index(
        op.f("ix_user_policies_farm_id"), "user_policies", ["farm_id"], unique=False
    )
    op.create_index(
        "ix_user_policies_dates",
        "user_policies",
        ["start_date", "end_date"],
        unique=False,
    )

    op.create_table(
        "claims",
        _uuid_pk(),
        sa.Column("user_policy_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("triggered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("amount_claimed", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pending"),
        sa.Column("reviewed_by", sa.String(255), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("payout_reference_id", sa.String(100), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(
            ["user_policy_id"],
            ["user_policies.id"],
            name=op.f("fk_claims_user_policy_id_user_policies"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_claims")),
        sa.UniqueConstraint(
            "payout_reference_id", name=op.f("uq_claims_payout_reference_id")
        ),
        sa.CheckConstraint(
            "status IN ('Pending', 'Approved', 'Rejected', 'Paid')",
            name=op.f("ck_claims_status"),
        ),
        sa.CheckConstraint(
            "(status = 'Rejected') = (rejection_reason IS NOT NULL)",
            name=op.f("ck_claims_rejection_reason"),
        ),
        sa.CheckConstraint(
            "(status = 'Paid') = (payout_reference_id IS NOT NULL)",
            name=op.f("ck_claims_payout_reference"),
        ),
    )
    op.create_index(
        "ix_claims_policy_triggered",
        "claims",
        ["user_policy_id", "triggered_at"],
        unique=False,
    )
    op.create_index(op.f("ix_claims_status"), "claims", ["status"], unique=False)
    # At most one claim in flight per policy
    op.create_index(
        "uq_claims_in_flight_per_policy",
        "claims",
        ["user_policy_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('Pending', 'Approved')"),
    )

    op.create_table(
        "weather_observations",
        _uuid_pk(),
        sa.Column("farm_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("rainfall_mm", sa.Float(), nullable=True),
        sa.Column("temperature_c", sa.Float(), nullable=True),
        sa.Column("humidity", sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(
            ["farm_id"],
            ["farm_profiles.id"],
            name=op.f("fk_weather_observations_farm_id_farm_profiles"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_weather_observations")),
    )
    op.create_index(
        "ix_weather_observations_farm_timestamp",
        "weather_observations",
        ["farm_id", sa.text("timestamp DESC")],
        unique=False,
    )


def downgrade() -> None:
    """Drop the automation schema."""
    op.drop_table("weather_observations")
    op.drop_table("claims")
    op.drop_table("user_policies")
    op.drop_table("policy_products")
    op.drop_table("farm_profiles")
