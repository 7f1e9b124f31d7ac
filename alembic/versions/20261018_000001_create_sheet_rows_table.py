"""Create sheet_rows table

Revision ID: 20261018_000001
Revises: None
Create Date: 2026-10-18

One record per physical row of every positional table (payments, users,
seller info, payment logs, payment info).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the sheet_rows table."""
    op.create_table(
        'sheet_rows',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('table_name', sa.String(length=100), nullable=False),
        sa.Column('row_number', sa.Integer(), nullable=False),
        sa.Column('cells', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('table_name', 'row_number', name='uq_sheet_rows_table_row'),
    )
    op.create_index('ix_sheet_rows_table_name', 'sheet_rows', ['table_name'])


def downgrade() -> None:
    """Drop the sheet_rows table."""
    op.drop_index('ix_sheet_rows_table_name', table_name='sheet_rows')
    op.drop_table('sheet_rows')
