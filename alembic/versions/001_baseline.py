"""baseline schema - proposals, payment ledgers, partners, service types

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = '001_baseline'
down_revision = None
branch_labels = None
depends_on = None


def _ledger_table(name):
    op.create_table(name,
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('proposal_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['proposal_id'], ['sales_proposals.id'], ondelete='CASCADE'),
        sa.CheckConstraint('amount > 0', name=f'ck_{name}_amount_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(f'ix_{name}_proposal_id', name, ['proposal_id'])
    op.create_index(f'ix_{name}_payment_date', name, ['payment_date'])


def upgrade():
    # Proposals table
    op.create_table('sales_proposals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('client_name', sa.String(255), nullable=True),
        sa.Column('client_type', sa.String(50), nullable=True),
        sa.Column('proposal_date', sa.Date(), nullable=True),
        sa.Column('project_type', sa.String(50), nullable=True),
        sa.Column('contract_type', sa.String(50), nullable=True),
        sa.Column('service_types', sa.JSON(), nullable=True),
        sa.Column('structure_weight', sa.Numeric(12, 2), nullable=True),
        sa.Column('price_per_kg', sa.Numeric(12, 2), nullable=True),
        sa.Column('material_total', sa.Numeric(12, 2), nullable=True),
        sa.Column('negotiation_days', sa.Integer(), nullable=True),
        sa.Column('repeat_client', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('total_value', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('commission_percent', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('amount_paid', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('commission_paid', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sales_proposals_client_name', 'sales_proposals', ['client_name'])
    op.create_index('ix_sales_proposals_proposal_date', 'sales_proposals', ['proposal_date'])

    # Payment ledgers
    _ledger_table('client_payments')
    _ledger_table('commission_payments')

    # Partners table
    op.create_table('partners',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('proposal_ids', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_partners_username', 'partners', ['username'], unique=True)

    # Service-type catalog
    op.create_table('service_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )


def downgrade():
    op.drop_table('service_types')
    op.drop_index('ix_partners_username', table_name='partners')
    op.drop_table('partners')
    for name in ('commission_payments', 'client_payments'):
        op.drop_index(f'ix_{name}_payment_date', table_name=name)
        op.drop_index(f'ix_{name}_proposal_id', table_name=name)
        op.drop_table(name)
    op.drop_index('ix_sales_proposals_proposal_date', table_name='sales_proposals')
    op.drop_index('ix_sales_proposals_client_name', table_name='sales_proposals')
    op.drop_table('sales_proposals')
