"""create users / events / participations / payments tables

Revision ID: 3b9d2e7a51c4
Revises:
Create Date: 2025-08-01 09:12:40

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b9d2e7a51c4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


role_enum = sa.Enum('MEMBER', 'ADMIN', name='role')
event_status_enum = sa.Enum('OPEN', 'CLOSED', name='eventstatus')
payment_status_enum = sa.Enum('PAID', 'UNPAID', name='paymentstatus')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('role', role_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', event_status_enum, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_events'),
    )
    op.create_index('ix_events_end_at', 'events', ['end_at'])

    op.create_table(
        'participations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('opted_in_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name='fk_participations_event_id_events'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_participations_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_participations'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_participations_event_user'),
    )
    op.create_index('ix_participations_user_id', 'participations', ['user_id'])

    # 납부 상태 장부: (user_id, month) 유니크 -> ON CONFLICT upsert 대상
    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('month', sa.String(length=7), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('payment_status', payment_status_enum, nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_payments_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_payments'),
        sa.UniqueConstraint('user_id', 'month', name='uq_payments_user_month'),
    )


def downgrade() -> None:
    op.drop_table('payments')
    op.drop_index('ix_participations_user_id', table_name='participations')
    op.drop_table('participations')
    op.drop_index('ix_events_end_at', table_name='events')
    op.drop_table('events')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    payment_status_enum.drop(op.get_bind(), checkfirst=True)
    event_status_enum.drop(op.get_bind(), checkfirst=True)
    role_enum.drop(op.get_bind(), checkfirst=True)
