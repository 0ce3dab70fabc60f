"""Add farmer profiles and farm cropping details.

Revision ID: 002
Revises: 001
Create Date: 2025-07-20

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create user_profiles and extend farm_profiles."""
    # Rows are keyed by the identity provider's user id
    op.create_table(
        "user_profiles",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="farmer"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_profiles")),
        sa.UniqueConstraint("email", name=op.f("uq_user_profiles_email")),
        sa.CheckConstraint(
            "role IN ('farmer', 'insurer', 'admin')",
            name=op.f("ck_user_profiles_role"),
        ),
    )
    op.create_index(
        "ix_user_profiles_role_created_at",
        "user_profiles",
        ["role", sa.text("created_at DESC")],
        unique=False,
    )

    op.add_column("farm_profiles", sa.Column("area", sa.Numeric(10, 2), nullable=True))
    op.add_column(
        "farm_profiles", sa.Column("crop_type", sa.String(100), nullable=True)
    )
    op.add_column("farm_profiles", sa.Column("season", sa.String(50), nullable=True))
    op.create_check_constraint(
        op.f("ck_farm_profiles_area"), "farm_profiles", "area IS NULL OR area >= 0"
    )
    op.create_index(
        "ix_farm_profiles_user_id", "farm_profiles", ["user_id"], unique=False
    )


def downgrade() -> None:
    """Drop the farmer directory additions."""
    op.drop_index("ix_farm_profiles_user_id", table_name="farm_profiles")
    op.drop_constraint(op.f("ck_farm_profiles_area"), "farm_profiles", type_="check")
    op.drop_column("farm_profiles", "season")
    op.drop_column("farm_profiles", "crop_type")
    op.drop_column("farm_profiles", "area")
    op.drop_index("ix_user_profiles_role_created_at", table_name="user_profiles")
    op.drop_table("user_profiles")
