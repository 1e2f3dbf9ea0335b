"""Create balance_changes, counterparties and monitored_accounts

Revision ID: 0001_create_balance_changes
Revises:
Create Date: 2025-12-23

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_create_balance_changes'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'balance_changes',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('account_id', sa.String(length=128), nullable=False),
        sa.Column('block_height', sa.BigInteger(), nullable=False),
        sa.Column('block_timestamp', sa.BigInteger(), nullable=False),
        sa.Column('block_time', sa.DateTime(), nullable=False),
        sa.Column('transaction_hashes', sa.JSON(), nullable=False),
        sa.Column('receipt_id', sa.JSON(), nullable=False),
        sa.Column('signer_id', sa.String(length=128), nullable=True),
        sa.Column('receiver_id', sa.String(length=128), nullable=True),
        sa.Column('token_id', sa.String(length=128), nullable=False),
        sa.Column('counterparty', sa.String(length=128), nullable=False),
        sa.Column('amount', sa.Numeric(), nullable=False),
        sa.Column('balance_before', sa.Numeric(), nullable=False),
        sa.Column('balance_after', sa.Numeric(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('account_id', 'block_height', 'token_id', name='unique_account_block_token'),
        sa.CheckConstraint('block_height > 0', name='positive_block_height'),
        sa.CheckConstraint('block_timestamp > 0', name='positive_block_timestamp'),
    )
    op.create_index('ix_balance_changes_account_id', 'balance_changes', ['account_id'])
    op.create_index('ix_balance_changes_token_id', 'balance_changes', ['token_id'])
    op.create_index('ix_balance_changes_account_time', 'balance_changes', ['account_id', 'block_time'])
    op.create_index(
        'ix_balance_changes_account_token_time',
        'balance_changes',
        ['account_id', 'token_id', 'block_time'],
    )

    op.create_table(
        'counterparties',
        sa.Column('account_id', sa.String(length=128), primary_key=True),
        sa.Column('account_type', sa.String(length=32), nullable=False),
        sa.Column('token_symbol', sa.String(length=16), nullable=True),
        sa.Column('token_name', sa.Text(), nullable=True),
        sa.Column('token_decimals', sa.SmallInteger(), nullable=True),
        sa.Column('discovered_at', sa.DateTime(), nullable=True),
        sa.Column('last_verified_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_counterparties_token_symbol', 'counterparties', ['token_symbol'])

    op.create_table(
        'monitored_accounts',
        sa.Column('account_id', sa.String(length=128), primary_key=True),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_synced_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_monitored_accounts_enabled', 'monitored_accounts', ['enabled'])


def downgrade() -> None:
    op.drop_index('ix_monitored_accounts_enabled', table_name='monitored_accounts')
    op.drop_table('monitored_accounts')
    op.drop_index('ix_counterparties_token_symbol', table_name='counterparties')
    op.drop_table('counterparties')
    op.drop_index('ix_balance_changes_account_token_time', table_name='balance_changes')
    op.drop_index('ix_balance_changes_account_time', table_name='balance_changes')
    op.drop_index('ix_balance_changes_token_id', table_name='balance_changes')
    op.drop_index('ix_balance_changes_account_id', table_name='balance_changes')
    op.drop_table('balance_changes')
