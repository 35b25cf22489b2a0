"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

Adds:
- app_users and sessions (identity resolution)
- profiles, one per app user
- allergies, flavors, constraint_types, dishes reference tables
- per-profile join tables, special_preferences and dish_history
"""
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'app_users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_app_users_email', 'app_users', ['email'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('user_agent', sa.String(512), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['app_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sessions_token', 'sessions', ['token'], unique=True)

    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['app_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', name='uq_profiles_user_id'),
    )

    # Reference tables
    for table in ('allergies', 'flavors', 'dishes'):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(255), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('name'),
        )

    op.create_table(
        'constraint_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    # Per-profile associations
    op.create_table(
        'profile_allergies',
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('allergy_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['allergy_id'], ['allergies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('profile_id', 'allergy_id'),
    )

    op.create_table(
        'profile_flavor_preferences',
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('flavor_id', sa.Integer(), nullable=False),
        sa.Column('preference_level', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['flavor_id'], ['flavors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('profile_id', 'flavor_id'),
        sa.CheckConstraint(
            'preference_level >= 1 AND preference_level <= 10',
            name='ck_profile_flavor_preferences_level',
        ),
    )

    op.create_table(
        'profile_constraints',
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('constraint_type_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['constraint_type_id'], ['constraint_types.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('profile_id', 'constraint_type_id'),
    )

    op.create_table(
        'special_preferences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_special_preferences_profile_id', 'special_preferences', ['profile_id'])

    op.create_table(
        'dish_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('profile_id', sa.Integer(), nullable=False),
        sa.Column('dish_id', sa.Integer(), nullable=False),
        sa.Column('user_rating', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['dish_id'], ['dishes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('profile_id', 'dish_id', name='uq_dish_history_profile_dish'),
        sa.CheckConstraint('user_rating >= 1 AND user_rating <= 5', name='ck_dish_history_rating'),
    )


def downgrade() -> None:
    op.drop_table('dish_history')
    op.drop_index('idx_special_preferences_profile_id', table_name='special_preferences')
    op.drop_table('special_preferences')
    op.drop_table('profile_constraints')
    op.drop_table('profile_flavor_preferences')
    op.drop_table('profile_allergies')
    op.drop_table('constraint_types')
    for table in ('dishes', 'flavors', 'allergies'):
        op.drop_table(table)
    op.drop_table('profiles')
    op.drop_index('ix_sessions_token', table_name='sessions')
    op.drop_table('sessions')
    op.drop_index('ix_app_users_email', table_name='app_users')
    op.drop_table('app_users')
