"""create user, score and quiz_game tables

Revision ID: 1a7c3e9f5b21
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a7c3e9f5b21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('display_name', sa.String(length=128), nullable=False),
            sa.Column('provider_uid', sa.String(length=128), nullable=False),
            sa.Column('photo_url', sa.String(length=512), nullable=True),
            sa.Column('provider_display_name', sa.String(length=128), nullable=True),
            sa.Column('password_hash', sa.String(length=256), nullable=True),
            sa.Column('version', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_user_email', 'user', ['email'], unique=True)

    if 'score' not in existing_tables:
        op.create_table(
            'score',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.String(length=36), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_score_user_id', 'score', ['user_id'])

    if 'quiz_game' not in existing_tables:
        op.create_table(
            'quiz_game',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_code', sa.String(length=4), nullable=True),
            sa.Column('user_id', sa.String(length=36), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('status', sa.String(length=32), nullable=True),
            sa.Column('current_question', sa.Integer(), nullable=False),
            sa.Column('total_questions', sa.Integer(), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('consecutive_correct', sa.Integer(), nullable=False),
            sa.Column('consecutive_wrong', sa.Integer(), nullable=False),
            sa.Column('options', sa.Text(), nullable=True),
            sa.Column('correct_answer', sa.Integer(), nullable=True),
            sa.Column('answer_history', sa.Text(), nullable=True),
            sa.Column('score_recorded', sa.Boolean(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('version', sa.Integer(), nullable=False),
        )
        op.create_index('ix_quiz_game_game_code', 'quiz_game', ['game_code'], unique=True)
        op.create_index('ix_quiz_game_user_id', 'quiz_game', ['user_id'])


def downgrade():
    op.drop_index('ix_quiz_game_user_id', table_name='quiz_game')
    op.drop_index('ix_quiz_game_game_code', table_name='quiz_game')
    op.drop_table('quiz_game')
    op.drop_index('ix_score_user_id', table_name='score')
    op.drop_table('score')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
