"""create pacing_targets table

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:10:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "pacing_targets",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "client_name",
            sa.String(length=255),
            nullable=False,
            comment="Denormalized from reference data at creation time",
        ),
        sa.Column("client_subgroup_id", sa.Integer(), nullable=False),
        sa.Column("tag_name", sa.String(length=255), nullable=False),
        sa.Column("channel", sa.Integer(), nullable=False),
        sa.Column("tag_type", sa.String(length=32), nullable=False, comment="Category, Sub Category, Account"),
        sa.Column("tag_id", sa.Integer(), nullable=False, comment="0 for Account targets"),
        sa.Column("month", sa.String(length=7), nullable=False, comment="YYYY-MM"),
        sa.Column("spends_target", sa.Numeric(), nullable=False),
        sa.Column("status", sa.Boolean(), nullable=False),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("modified_by_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("last_modified", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_pacing_targets"),
        sa.ForeignKeyConstraint(
            ["created_by_id"],
            ["users.id"],
            name="fk_pacing_targets_created_by_id_users",
        ),
        sa.ForeignKeyConstraint(
            ["modified_by_id"],
            ["users.id"],
            name="fk_pacing_targets_modified_by_id_users",
        ),
        sa.UniqueConstraint(
            "client_subgroup_id",
            "channel",
            "tag_type",
            "tag_id",
            "month",
            name="uq_pacing_targets_key",
        ),
        sa.CheckConstraint("spends_target >= 0", name="ck_pacing_targets_spends_target_non_negative"),
        sa.CheckConstraint("month ~ '^[0-9]{4}-[0-9]{2}$'", name="ck_pacing_targets_month_format"),
    )
    op.create_index(
        "ix_pacing_targets_client_month_tag",
        "pacing_targets",
        ["client_subgroup_id", "month", "tag_id"],
        unique=False,
    )
    op.create_index("ix_pacing_targets_month", "pacing_targets", ["month"], unique=False)
    op.create_index("ix_pacing_targets_tag_id", "pacing_targets", ["tag_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_pacing_targets_tag_id", table_name="pacing_targets")
    op.drop_index("ix_pacing_targets_month", table_name="pacing_targets")
    op.drop_index("ix_pacing_targets_client_month_tag", table_name="pacing_targets")
    op.drop_table("pacing_targets")
