"""employees and paystubs

Revision ID: 0001_initial
Revises:
Create Date: 2025-06-02 00:00:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('uid', sa.String(length=128), nullable=True),
        sa.Column('employee_id', sa.String(length=40), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('department', sa.String(length=120), nullable=True),
        sa.Column('position', sa.String(length=120), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_employees_uid', 'employees', ['uid'], unique=True)
    op.create_index('ix_employees_employee_id', 'employees', ['employee_id'], unique=True)

    op.create_table(
        'paystubs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('emp_id', sa.String(length=40), nullable=True),
        sa.Column('period_start', sa.Date(), nullable=True),
        sa.Column('period_end', sa.Date(), nullable=True),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('department', sa.String(length=120), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('base_rate', sa.Numeric(12, 2), nullable=True),
        sa.Column('hours_worked', sa.Numeric(8, 2), nullable=True),
        sa.Column('bonus', sa.Numeric(12, 2), nullable=True),
        sa.Column('overtime', sa.Numeric(12, 2), nullable=True),
        sa.Column('deductions', sa.Numeric(12, 2), nullable=True),
        sa.Column('net_pay', sa.Numeric(12, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_paystubs_emp_id', 'paystubs', ['emp_id'])
    op.create_index('ix_paystubs_period_start', 'paystubs', ['period_start'])
    op.create_index('ix_paystubs_emp_period', 'paystubs', ['emp_id', 'period_start'])


def downgrade() -> None:
    op.drop_index('ix_paystubs_emp_period', table_name='paystubs')
    op.drop_index('ix_paystubs_period_start', table_name='paystubs')
    op.drop_index('ix_paystubs_emp_id', table_name='paystubs')
    op.drop_table('paystubs')
    op.drop_index('ix_employees_employee_id', table_name='employees')
    op.drop_index('ix_employees_uid', table_name='employees')
    op.drop_table('employees')
