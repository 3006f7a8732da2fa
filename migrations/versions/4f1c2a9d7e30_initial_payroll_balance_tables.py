"""initial payroll balance tables

Revision ID: 4f1c2a9d7e30
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('salary_days', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('last_paid_date', sa.Date(), nullable=True),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('paid_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('salary_days > 0', name='ck_employee_salary_days_positive'),
    )

    op.create_table(
        'salary_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_salary_payments_employee_id', 'salary_payments', ['employee_id'])
    op.create_index('ix_salary_payments_emp_date', 'salary_payments', ['employee_id', 'payment_date'])

    op.create_table(
        'salary_withdrawals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('converted_amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('exchange_rate', sa.Numeric(10, 4), nullable=True),
        sa.Column('rate_date', sa.Date(), nullable=True),
        sa.Column('withdrawal_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("currency IN ('USD', 'IQD')", name='ck_salary_withdrawal_currency'),
    )
    op.create_index('ix_salary_withdrawals_employee_id', 'salary_withdrawals', ['employee_id'])
    op.create_index('ix_salary_withdrawals_emp_date', 'salary_withdrawals', ['employee_id', 'withdrawal_date'])

    op.create_table(
        'dollar_rates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False, unique=True),
        sa.Column('rate', sa.Numeric(10, 4), nullable=False),
        sa.Column('entered_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('rate > 0', name='ck_dollar_rate_positive'),
    )


def downgrade() -> None:
    op.drop_table('dollar_rates')
    op.drop_index('ix_salary_withdrawals_emp_date', table_name='salary_withdrawals')
    op.drop_index('ix_salary_withdrawals_employee_id', table_name='salary_withdrawals')
    op.drop_table('salary_withdrawals')
    op.drop_index('ix_salary_payments_emp_date', table_name='salary_payments')
    op.drop_index('ix_salary_payments_employee_id', table_name='salary_payments')
    op.drop_table('salary_payments')
    op.drop_table('employees')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
