"""create tariff tables

Revision ID: 3c1f9a2b7d40
Revises:
Create Date: 2026-09-14
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "3c1f9a2b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "providers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(32), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("fixed_charge_per_kva", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("meter_rent", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("supports_lifeline", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("lifeline_requires_registration", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("lifeline_unit_threshold", sa.Integer, nullable=False, server_default="0"),
        sa.Column("supports_timely_rebate", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column("updated_at", sa.DateTime, nullable=False, server_default=sa.func.current_timestamp()),
    )

    op.create_table(
        "slabs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("provider_id", sa.Integer, sa.ForeignKey("providers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("min_unit", sa.Integer, nullable=False),
        sa.Column("max_unit", sa.Integer, nullable=True),
        sa.Column("rate_paise_per_kwh", sa.Integer, nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )
    op.create_index("ix_slabs_provider_position", "slabs", ["provider_id", "position"])

    op.create_table(
        "fppca_rates",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("provider_id", sa.Integer, sa.ForeignKey("providers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("year", sa.Integer, nullable=False),
        sa.Column("month", sa.Integer, nullable=False),
        sa.Column("rate_per_kwh", sa.Numeric(10, 4), nullable=False),
    )
    op.create_index("ix_fppca_rates_period", "fppca_rates", ["provider_id", "year", "month"], unique=True)

    op.create_table(
        "duty_rates",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("provider_id", sa.Integer, sa.ForeignKey("providers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False, server_default=""),
        sa.Column("percent", sa.Numeric(6, 3), nullable=False),
    )

    op.create_table(
        "rebate_rules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("provider_id", sa.Integer, sa.ForeignKey("providers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("percent", sa.Numeric(6, 3), nullable=False),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_rebate_rules_code", "rebate_rules", ["provider_id", "code"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_rebate_rules_code", table_name="rebate_rules")
    op.drop_table("rebate_rules")
    op.drop_table("duty_rates")
    op.drop_index("ix_fppca_rates_period", table_name="fppca_rates")
    op.drop_table("fppca_rates")
    op.drop_index("ix_slabs_provider_position", table_name="slabs")
    op.drop_table("slabs")
    op.drop_table("providers")
