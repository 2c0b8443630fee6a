"""add queue sessions, entries, matches and match players

Revision ID: 7d3f5a6b1c22
Revises: 4b8e1d2c9a10
Create Date: 2026-01-25 15:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7d3f5a6b1c22'
down_revision = '4b8e1d2c9a10'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'queue_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='upcoming'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('queue_sessions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_queue_sessions_owner_id'), ['owner_id'], unique=False)

    op.create_table(
        'queue_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('queue_session_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('guest_name', sa.String(length=255), nullable=True),
        sa.Column('level', sa.Float(), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='waiting'),
        sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('joined_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['queue_session_id'], ['queue_sessions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('queue_entries', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_queue_entries_queue_session_id'), ['queue_session_id'], unique=False)

    op.create_table(
        'queue_matches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('queue_session_id', sa.Integer(), nullable=False),
        sa.Column('court_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('start_time', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('shuttlecocks_used', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['queue_session_id'], ['queue_sessions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['court_id'], ['courts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('queue_matches', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_queue_matches_queue_session_id'), ['queue_session_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_queue_matches_court_id'), ['court_id'], unique=False)

    op.create_table(
        'queue_match_players',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('queue_match_id', sa.Integer(), nullable=False),
        sa.Column('queue_entry_id', sa.Integer(), nullable=False),
        sa.Column('team', sa.String(length=1), nullable=False, server_default='A'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['queue_match_id'], ['queue_matches.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['queue_entry_id'], ['queue_entries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('queue_match_players', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_queue_match_players_queue_match_id'), ['queue_match_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_queue_match_players_queue_entry_id'), ['queue_entry_id'], unique=False)


def downgrade():
    with op.batch_alter_table('queue_match_players', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_queue_match_players_queue_entry_id'))
        batch_op.drop_index(batch_op.f('ix_queue_match_players_queue_match_id'))
    op.drop_table('queue_match_players')

    with op.batch_alter_table('queue_matches', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_queue_matches_court_id'))
        batch_op.drop_index(batch_op.f('ix_queue_matches_queue_session_id'))
    op.drop_table('queue_matches')

    with op.batch_alter_table('queue_entries', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_queue_entries_queue_session_id'))
    op.drop_table('queue_entries')

    with op.batch_alter_table('queue_sessions', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_queue_sessions_owner_id'))
    op.drop_table('queue_sessions')
