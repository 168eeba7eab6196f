"""Add block_number to events table

Revision ID: ev002_add_block_number
Revises: ev001_events_tickets
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "ev002_add_block_number"
down_revision: Union[str, None] = "ev001_events_tickets"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "events",
        sa.Column("block_number", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_events_block_number", "events", ["block_number"])


def downgrade() -> None:
    op.drop_index("ix_events_block_number", table_name="events")
    op.drop_column("events", "block_number")
