"""Create swords and potions tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the deployment-time schema: one table per resource, each with
       a serial integer primary key.

Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the swords and potions tables. See armory/models/ for column docs."""
    op.create_table(
        "swords",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "type",
            sa.Text(),
            nullable=True,
            comment="Kind of blade, e.g. katana, claymore",
        ),
        sa.Column("is_magical", sa.Boolean(), nullable=True),
        sa.Column("attack", sa.Integer(), nullable=True),
        sa.Column(
            "sp_attack",
            sa.Integer(),
            nullable=True,
            comment="Special attack rating",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "potions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column(
            "effect",
            sa.Text(),
            nullable=True,
            comment="What drinking it does, e.g. heal, invisibility",
        ),
        sa.Column("potency", sa.Integer(), nullable=True),
        sa.Column("is_poisonous", sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("potions")
    op.drop_table("swords")
