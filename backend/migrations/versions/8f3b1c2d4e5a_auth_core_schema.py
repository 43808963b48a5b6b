"""auth core schema: users, refresh sessions and invitations

Revision ID: 8f3b1c2d4e5a
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '8f3b1c2d4e5a'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=True),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('teacher_ref', sa.String(length=64), nullable=True),
        sa.Column('invitation_id', sa.String(length=36), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('username', name='uq_users_username'),
    )
    op.create_index('ix_users_role', 'users', ['role'])
    # At most one admin row; concurrent bootstraps race on this index
    op.create_index(
        'uq_users_single_admin',
        'users',
        ['role'],
        unique=True,
        sqlite_where=sa.text("role = 'admin'"),
        postgresql_where=sa.text("role = 'admin'"),
    )

    op.create_table(
        'refresh_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('identity_id', sa.String(length=36), nullable=False),
        sa.Column('fingerprint', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['identity_id'],
            ['users.id'],
            name=op.f('fk_refresh_sessions_identity_id_users'),
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_refresh_sessions')),
        sa.UniqueConstraint('fingerprint', name='uq_refresh_sessions_fingerprint'),
    )
    op.create_index('ix_refresh_sessions_identity_id', 'refresh_sessions', ['identity_id'])
    op.create_index('ix_refresh_sessions_expires_at', 'refresh_sessions', ['expires_at'])

    op.create_table(
        'invitations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('fingerprint', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('teacher_ref', sa.String(length=64), nullable=True),
        sa.Column('created_by', sa.String(length=36), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "role IN ('teacher', 'student')", name=op.f('ck_invitations_role_invitable')
        ),
        sa.CheckConstraint(
            "role <> 'student' OR teacher_ref IS NOT NULL",
            name=op.f('ck_invitations_student_has_teacher'),
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_invitations')),
        sa.UniqueConstraint('fingerprint', name='uq_invitations_fingerprint'),
    )
    op.create_index('ix_invitations_expires_at', 'invitations', ['expires_at'])


def downgrade():
    op.drop_index('ix_invitations_expires_at', table_name='invitations')
    op.drop_table('invitations')
    op.drop_index('ix_refresh_sessions_expires_at', table_name='refresh_sessions')
    op.drop_index('ix_refresh_sessions_identity_id', table_name='refresh_sessions')
    op.drop_table('refresh_sessions')
    op.drop_index('uq_users_single_admin', table_name='users')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_table('users')
