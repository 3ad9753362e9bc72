"""initial_ledger_schema

Revision ID: 5e1c0a7d2b94
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5e1c0a7d2b94'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

member_status = sa.Enum('active', 'inactive', 'closed', name='memberstatus', native_enum=False)
transaction_type = sa.Enum('deposit', 'loan', 'repayment', 'expense', 'loan-waived', name='transactiontype', native_enum=False)
loan_status = sa.Enum('active', 'closed', name='loanstatus', native_enum=False)


def upgrade() -> None:
    op.create_table(
        'member',
        sa.Column('group_id', sa.String(length=64), nullable=False),
        sa.Column('id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('aadhaar', sa.String(length=12), nullable=False),
        sa.Column('join_date', sa.Date(), nullable=False),
        sa.Column('status', member_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('group_id', 'id')
    )

    op.create_table(
        'member_status_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('group_id', sa.String(length=64), nullable=False),
        sa.Column('member_id', sa.String(length=50), nullable=False),
        sa.Column('old_status', member_status, nullable=True),
        sa.Column('new_status', member_status, nullable=False),
        sa.Column('changed_by', sa.String(length=64), nullable=True),
        sa.Column('changed_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('member_status_history', schema=None) as batch_op:
        batch_op.create_index('idx_member_status_history_member', ['group_id', 'member_id'], unique=False)

    op.create_table(
        'transaction',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('group_id', sa.String(length=64), nullable=False),
        sa.Column('member_id', sa.String(length=50), nullable=False),
        sa.Column('type', transaction_type, nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('principal', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('interest', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('loan_id', sa.String(length=36), nullable=True),
        sa.Column('status', loan_status, nullable=True),
        sa.Column('interest_rate', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('transaction', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_transaction_group_id'), ['group_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_transaction_member_id'), ['member_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_transaction_date'), ['date'], unique=False)
        batch_op.create_index(batch_op.f('ix_transaction_loan_id'), ['loan_id'], unique=False)
        batch_op.create_index('idx_transaction_group_member', ['group_id', 'member_id'], unique=False)

    op.create_table(
        'group_settings',
        sa.Column('group_id', sa.String(length=64), nullable=False),
        sa.Column('group_name', sa.String(length=100), nullable=False),
        sa.Column('monthly_contribution', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('interest_rate', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('established_date', sa.Date(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('group_id')
    )


def downgrade() -> None:
    op.drop_table('group_settings')
    with op.batch_alter_table('transaction', schema=None) as batch_op:
        batch_op.drop_index('idx_transaction_group_member')
        batch_op.drop_index(batch_op.f('ix_transaction_loan_id'))
        batch_op.drop_index(batch_op.f('ix_transaction_date'))
        batch_op.drop_index(batch_op.f('ix_transaction_member_id'))
        batch_op.drop_index(batch_op.f('ix_transaction_group_id'))
    op.drop_table('transaction')
    with op.batch_alter_table('member_status_history', schema=None) as batch_op:
        batch_op.drop_index('idx_member_status_history_member')
    op.drop_table('member_status_history')
    op.drop_table('member')
