"""create tariff version and free units tables

Revision ID: b52e7f0c9d14
Revises: 8e4d2c6a1f93
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b52e7f0c9d14"
down_revision: Union[str, Sequence[str], None] = "8e4d2c6a1f93"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tariff_versions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("provider_id", sa.Integer, sa.ForeignKey("providers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("code", sa.String(64), nullable=False, server_default=""),
        sa.Column("category", sa.String(32), nullable=False),
        sa.Column("effective_from", sa.Date, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index(
        "ix_tariff_versions_lookup", "tariff_versions", ["provider_id", "category", "effective_from"]
    )

    op.create_table(
        "tariff_slabs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "tariff_version_id", sa.Integer, sa.ForeignKey("tariff_versions.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("min_unit", sa.Integer, nullable=False),
        sa.Column("max_unit", sa.Integer, nullable=True),
        sa.Column("rate_paise_per_kwh", sa.Integer, nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "free_units_rules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("provider_id", sa.Integer, sa.ForeignKey("providers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("free_units", sa.Numeric(10, 2), nullable=False),
        sa.Column("effective_from", sa.Date, nullable=False),
        sa.Column("effective_to", sa.Date, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )


def downgrade() -> None:
    op.drop_table("free_units_rules")
    op.drop_table("tariff_slabs")
    op.drop_index("ix_tariff_versions_lookup", table_name="tariff_versions")
    op.drop_table("tariff_versions")
