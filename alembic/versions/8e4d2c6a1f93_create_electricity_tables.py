"""create electricity_* tables

Revision ID: 8e4d2c6a1f93
Revises: 3c1f9a2b7d40
Create Date: 2026-09-21 10:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8e4d2c6a1f93"
down_revision: Union[str, Sequence[str], None] = "3c1f9a2b7d40"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "electricity_providers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(64), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "electricity_slabs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "provider_id", sa.Integer, sa.ForeignKey("electricity_providers.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("min_unit", sa.Integer, nullable=False),
        sa.Column("max_unit", sa.Integer, nullable=True),
        sa.Column("rate_paise_per_kwh", sa.Integer, nullable=False),
    )

    op.create_table(
        "electricity_provider_config",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "provider_id",
            sa.Integer,
            sa.ForeignKey("electricity_providers.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("fixed_charge_per_kva", sa.Numeric(10, 2), nullable=True),
        sa.Column("duty_percentage", sa.Numeric(6, 3), nullable=True),
        sa.Column("meter_rent", sa.Numeric(10, 2), nullable=True),
        sa.Column("timely_payment_rebate", sa.Numeric(6, 3), nullable=True),
    )

    op.create_table(
        "electricity_fppca_rates",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "provider_id", sa.Integer, sa.ForeignKey("electricity_providers.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("month", sa.Integer, nullable=False),
        sa.Column("rate_per_unit", sa.Numeric(10, 4), nullable=False),
    )
    op.create_index(
        "ix_electricity_fppca_rates_period", "electricity_fppca_rates", ["provider_id", "year", "month"], unique=True
    )


def downgrade() -> None:
    op.drop_index("ix_electricity_fppca_rates_period", table_name="electricity_fppca_rates")
    op.drop_table("electricity_fppca_rates")
    op.drop_table("electricity_provider_config")
    op.drop_table("electricity_slabs")
    op.drop_table("electricity_providers")
