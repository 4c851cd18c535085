"""Create sec_filings_cache table

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'sec_filings_cache',
        sa.Column('cik', sa.String(10), primary_key=True),  # zero-padded
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('data', sa.Text, nullable=False),  # JSON-encoded SECData
        sa.Column('filing_type', sa.String(20), nullable=True),  # 10-K, 10-Q, 8-K, default
        sa.Column('cached_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )

    op.create_index('idx_sec_cache_expires_at', 'sec_filings_cache', ['expires_at'])


def downgrade() -> None:
    op.drop_index('idx_sec_cache_expires_at', table_name='sec_filings_cache')
    op.drop_table('sec_filings_cache')
