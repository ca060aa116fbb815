"""initial ledger schema

Revision ID: 0001_initial_ledger
Revises:
Create Date: 2026-10-19 10:12:44.118210

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_ledger'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    ]


def _audit():
    return [
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema - create master data, draft, ledger and transfer tables."""
    op.create_table('karats',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('karat_code', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('standard_purity', sa.Numeric(precision=10, scale=6), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('karat_code')
    )

    op.create_table('parties',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('account_code', sa.String(length=50), nullable=False),
        sa.Column('gold_total_grams', sa.Numeric(precision=18, scale=4), server_default='0', nullable=False),
        sa.Column('gold_draft_balance', sa.Numeric(precision=18, scale=4), server_default='0', nullable=False),
        sa.Column('gold_last_updated', sa.DateTime(), nullable=True),
        *_timestamps(),
        *_audit(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('account_code')
    )
    with op.batch_alter_table('parties', schema=None) as batch_op:
        batch_op.create_index('ix_parties_name', ['name'], unique=False)

    op.create_table('party_cash_balances',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('party_id', sa.Integer(), nullable=False),
        sa.Column('currency_code', sa.String(length=10), nullable=False),
        sa.Column('amount', sa.Numeric(precision=18, scale=2), server_default='0', nullable=False),
        sa.Column('is_default', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('last_updated', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['party_id'], ['parties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('party_id', 'currency_code', name='uq_party_cash_balances_currency')
    )
    with op.batch_alter_table('party_cash_balances', schema=None) as batch_op:
        batch_op.create_index('ix_party_cash_balances_party_id', ['party_id'], unique=False)

    op.create_table('metal_stocks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('karat_id', sa.Integer(), nullable=True),
        sa.Column('standard_purity', sa.Numeric(precision=10, scale=6), nullable=True),
        sa.Column('pcs', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('pcs_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('total_value', sa.Numeric(precision=18, scale=2), server_default='0', nullable=False),
        sa.Column('cost_center', sa.String(length=50), nullable=True),
        *_timestamps(),
        *_audit(),
        sa.ForeignKeyConstraint(['karat_id'], ['karats.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code')
    )
    with op.batch_alter_table('metal_stocks', schema=None) as batch_op:
        batch_op.create_index('ix_metal_stocks_karat_id', ['karat_id'], unique=False)

    op.create_table('drafts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('draft_number', sa.String(length=30), nullable=False),
        sa.Column('status', sa.Enum('draft', 'confirmed', 'rejected', name='draft_status_enum', native_enum=False), server_default='draft', nullable=False),
        sa.Column('party_id', sa.Integer(), nullable=True),
        sa.Column('party_name', sa.String(length=255), nullable=True),
        sa.Column('stock_id', sa.Integer(), nullable=True),
        sa.Column('stock_code', sa.String(length=50), nullable=True),
        sa.Column('gross_weight', sa.Numeric(precision=18, scale=4), server_default='0', nullable=False),
        sa.Column('purity', sa.Numeric(precision=10, scale=6), nullable=True),
        sa.Column('karat', sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column('pure_weight', sa.Numeric(precision=18, scale=4), server_default='0', nullable=False),
        sa.Column('laboratory_name', sa.String(length=255), nullable=True),
        sa.Column('certificate_number', sa.String(length=100), nullable=True),
        sa.Column('item_code', sa.String(length=100), nullable=True),
        sa.Column('gold_au_percent', sa.Numeric(precision=10, scale=6), nullable=True),
        sa.Column('result_karat', sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column('voucher_code', sa.String(length=100), nullable=True),
        sa.Column('voucher_type', sa.String(length=100), nullable=True),
        sa.Column('voucher_date', sa.DateTime(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        *_timestamps(),
        *_audit(),
        sa.ForeignKeyConstraint(['party_id'], ['parties.id']),
        sa.ForeignKeyConstraint(['stock_id'], ['metal_stocks.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('draft_number', name='uq_drafts_draft_number')
    )
    with op.batch_alter_table('drafts', schema=None) as batch_op:
        batch_op.create_index('ix_drafts_status', ['status'], unique=False)
        batch_op.create_index('ix_drafts_party_id', ['party_id'], unique=False)
        batch_op.create_index('ix_drafts_stock_id', ['stock_id'], unique=False)
        batch_op.create_index('ix_drafts_certificate_number', ['certificate_number'], unique=False)

    op.create_table('fund_transfers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('transaction_id', sa.String(length=30), nullable=False),
        sa.Column('type', sa.Enum('FUND-TRANSFER', 'OPENING-BALANCE', name='fund_transfer_type_enum', native_enum=False), nullable=False),
        sa.Column('asset_type', sa.Enum('CASH', 'GOLD', name='asset_type_enum', native_enum=False), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('value', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('is_reversed', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('receiving_party_id', sa.Integer(), nullable=True),
        sa.Column('receiving_credit', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('sending_party_id', sa.Integer(), nullable=True),
        sa.Column('sending_debit', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('voucher_number', sa.String(length=100), nullable=True),
        sa.Column('voucher_type', sa.String(length=100), nullable=True),
        sa.Column('voucher_date', sa.DateTime(), nullable=True),
        sa.Column('transaction_date', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        *_timestamps(),
        *_audit(),
        sa.ForeignKeyConstraint(['receiving_party_id'], ['parties.id']),
        sa.ForeignKeyConstraint(['sending_party_id'], ['parties.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('transaction_id', name='uq_fund_transfers_transaction_id')
    )
    with op.batch_alter_table('fund_transfers', schema=None) as batch_op:
        batch_op.create_index('ix_fund_transfers_receiving_party_id', ['receiving_party_id'], unique=False)
        batch_op.create_index('ix_fund_transfers_sending_party_id', ['sending_party_id'], unique=False)

    op.create_table('registry',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('transaction_id', sa.String(length=30), nullable=False),
        sa.Column('transaction_type', sa.String(length=50), nullable=False),
        sa.Column('type', sa.Enum('OPENING_CASH_BALANCE', 'OPENING_GOLD_BALANCE', 'PARTY_CASH_BALANCE', 'PARTY_GOLD_BALANCE', 'GOLD_STOCK', name='registry_type_enum', native_enum=False), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('party_id', sa.Integer(), nullable=True),
        sa.Column('stock_id', sa.Integer(), nullable=True),
        sa.Column('draft_id', sa.Integer(), nullable=True),
        sa.Column('fund_transfer_id', sa.Integer(), nullable=True),
        sa.Column('asset_type', sa.String(length=10), nullable=False),
        sa.Column('value', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('credit', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('debit', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('previous_balance', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('running_balance', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('gross_weight', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('pure_weight', sa.Numeric(precision=18, scale=4), nullable=True),
        sa.Column('purity', sa.Numeric(precision=10, scale=6), nullable=True),
        sa.Column('cost_center', sa.String(length=50), nullable=True),
        sa.Column('reference', sa.String(length=100), nullable=True),
        sa.Column('transaction_date', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('is_draft', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='completed', nullable=False),
        *_timestamps(),
        *_audit(),
        sa.CheckConstraint('NOT (credit > 0 AND debit > 0)', name='ck_registry_single_side'),
        sa.ForeignKeyConstraint(['draft_id'], ['drafts.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['fund_transfer_id'], ['fund_transfers.id']),
        sa.ForeignKeyConstraint(['party_id'], ['parties.id']),
        sa.ForeignKeyConstraint(['stock_id'], ['metal_stocks.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('transaction_id', name='uq_registry_transaction_id')
    )
    with op.batch_alter_table('registry', schema=None) as batch_op:
        batch_op.create_index('idx_registry_draft', ['draft_id', 'is_draft'], unique=False)
        batch_op.create_index('idx_registry_party_type', ['party_id', 'type'], unique=False)
        batch_op.create_index('ix_registry_fund_transfer_id', ['fund_transfer_id'], unique=False)

    op.create_table('inventory_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column('transaction_type', sa.String(length=50), nullable=False),
        sa.Column('party_id', sa.Integer(), nullable=True),
        sa.Column('stock_id', sa.Integer(), nullable=False),
        sa.Column('draft_id', sa.Integer(), nullable=True),
        sa.Column('pcs', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('voucher_code', sa.String(length=100), nullable=True),
        sa.Column('voucher_type', sa.String(length=100), nullable=True),
        sa.Column('voucher_date', sa.DateTime(), nullable=True),
        sa.Column('gross_weight', sa.Numeric(precision=18, scale=4), nullable=False),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('is_draft', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('timestamp', sa.DateTime(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        *_timestamps(),
        *_audit(),
        sa.ForeignKeyConstraint(['draft_id'], ['drafts.id'], name='fk_inventory_logs_draft_id', ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['party_id'], ['parties.id'], name='fk_inventory_logs_party_id'),
        sa.ForeignKeyConstraint(['stock_id'], ['metal_stocks.id'], name='fk_inventory_logs_stock_id'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('inventory_logs', schema=None) as batch_op:
        batch_op.create_index('idx_inventory_logs_draft', ['draft_id', 'is_draft'], unique=False)
        batch_op.create_index('ix_inventory_logs_stock_id', ['stock_id'], unique=False)

    op.create_table('inventory',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('stock_id', sa.Integer(), nullable=False),
        sa.Column('gross_weight', sa.Numeric(precision=18, scale=4), server_default='0', nullable=False),
        sa.Column('pure_weight', sa.Numeric(precision=18, scale=4), server_default='0', nullable=False),
        sa.Column('purity', sa.Numeric(precision=10, scale=6), nullable=True),
        sa.Column('pcs', sa.Boolean(), server_default='0', nullable=False),
        sa.Column('pcs_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        *_timestamps(),
        *_audit(),
        sa.ForeignKeyConstraint(['stock_id'], ['metal_stocks.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('stock_id')
    )


def downgrade() -> None:
    """Downgrade schema - drop every table in reverse dependency order."""
    op.drop_table('inventory')

    with op.batch_alter_table('inventory_logs', schema=None) as batch_op:
        batch_op.drop_index('ix_inventory_logs_stock_id')
        batch_op.drop_index('idx_inventory_logs_draft')
    op.drop_table('inventory_logs')

    with op.batch_alter_table('registry', schema=None) as batch_op:
        batch_op.drop_index('ix_registry_fund_transfer_id')
        batch_op.drop_index('idx_registry_party_type')
        batch_op.drop_index('idx_registry_draft')
    op.drop_table('registry')

    with op.batch_alter_table('fund_transfers', schema=None) as batch_op:
        batch_op.drop_index('ix_fund_transfers_sending_party_id')
        batch_op.drop_index('ix_fund_transfers_receiving_party_id')
    op.drop_table('fund_transfers')

    with op.batch_alter_table('drafts', schema=None) as batch_op:
        batch_op.drop_index('ix_drafts_certificate_number')
        batch_op.drop_index('ix_drafts_stock_id')
        batch_op.drop_index('ix_drafts_party_id')
        batch_op.drop_index('ix_drafts_status')
    op.drop_table('drafts')

    with op.batch_alter_table('metal_stocks', schema=None) as batch_op:
        batch_op.drop_index('ix_metal_stocks_karat_id')
    op.drop_table('metal_stocks')

    with op.batch_alter_table('party_cash_balances', schema=None) as batch_op:
        batch_op.drop_index('ix_party_cash_balances_party_id')
    op.drop_table('party_cash_balances')

    with op.batch_alter_table('parties', schema=None) as batch_op:
        batch_op.drop_index('ix_parties_name')
    op.drop_table('parties')

    op.drop_table('karats')
