"""add shuttlecock count, started_at and payment status to court bookings

Revision ID: 9e2a7c4f8b31
Revises: 7d3f5a6b1c22
Create Date: 2026-01-30 14:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9e2a7c4f8b31'
down_revision = '7d3f5a6b1c22'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('court_bookings', schema=None) as batch_op:
        batch_op.add_column(sa.Column('shuttlecock_count', sa.Integer(), nullable=True))
        batch_op.add_column(sa.Column('started_at', sa.DateTime(), nullable=True))
        batch_op.add_column(sa.Column('payment_status', sa.String(length=20), nullable=True, server_default='reserved'))


def downgrade():
    with op.batch_alter_table('court_bookings', schema=None) as batch_op:
        batch_op.drop_column('payment_status')
        batch_op.drop_column('started_at')
        batch_op.drop_column('shuttlecock_count')
