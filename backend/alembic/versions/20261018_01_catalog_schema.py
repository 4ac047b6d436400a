"""catalog schema: users, entries, vocabularies, links, profiles, contributions

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from typing import Sequence, Union

revision: str = '20261018_01'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

VOCABULARIES = ('abilities', 'platforms', 'modalities', 'population_types')
LINKS = (
    ('test_abilities', 'ability_id', 'abilities'),
    ('test_platforms', 'platform_id', 'platforms'),
    ('test_modalities', 'modality_id', 'modalities'),
    ('test_population_types', 'population_type_id', 'population_types'),
)
CONTRIBUTIONS = ('test_versions', 'test_related_works')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'magic_link_tokens',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('token', sa.String(), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'profiles',
        sa.Column('user_id', sa.UUID(), sa.ForeignKey('users.id'), primary_key=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('affiliation', sa.String(), nullable=True),
        sa.Column('orcid', sa.String(), nullable=True),
        sa.Column('contact_email', sa.String(), nullable=True),
        sa.Column('contact_via_orcid', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('contact_via_email', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_table(
        'tests',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('authors', sa.String(), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('age_min', sa.Float(), nullable=True),
        sa.Column('age_max', sa.Float(), nullable=True),
        sa.Column('source_url', sa.String(), nullable=True),
        sa.Column('doi', sa.String(), nullable=True),
        sa.Column('original_citation', sa.Text(), nullable=True),
        sa.Column('access_notes', sa.Text(), nullable=True),
        sa.Column('use_cases', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('owner_id', sa.UUID(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("status in ('draft', 'wip', 'published')", name='ck_tests_status'),
    )
    op.create_index('ix_tests_owner_id', 'tests', ['owner_id'])
    op.create_index('ix_tests_status', 'tests', ['status'])

    for table in VOCABULARIES:
        op.create_table(
            table,
            sa.Column('id', sa.UUID(), primary_key=True),
            sa.Column('label', sa.String(), nullable=False),
            sa.Column('slug', sa.String(), nullable=False, unique=True),
            sa.Column('description', sa.Text(), nullable=True),
        )

    for table, column, target in LINKS:
        op.create_table(
            table,
            sa.Column(
                'test_id', sa.UUID(),
                sa.ForeignKey('tests.id', ondelete='CASCADE'), primary_key=True,
            ),
            sa.Column(
                column, sa.UUID(),
                sa.ForeignKey(f'{target}.id', ondelete='CASCADE'), primary_key=True,
            ),
        )

    for table in CONTRIBUTIONS:
        op.create_table(
            table,
            sa.Column('id', sa.UUID(), primary_key=True),
            sa.Column(
                'test_id', sa.UUID(),
                sa.ForeignKey('tests.id', ondelete='CASCADE'), nullable=False,
            ),
            sa.Column('created_by', sa.UUID(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('about', sa.Text(), nullable=False),
            sa.Column('authors', sa.String(), nullable=True),
            sa.Column('publication_url', sa.String(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )
        op.create_index(f'ix_{table}_test_id', table, ['test_id'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.UUID(), primary_key=True),
        sa.Column('user_id', sa.UUID(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('target_type', sa.String(), nullable=True),
        sa.Column('target_id', sa.UUID(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('audit_logs')
    for table in CONTRIBUTIONS:
        op.drop_index(f'ix_{table}_test_id', table_name=table)
        op.drop_table(table)
    for table, _column, _target in LINKS:
        op.drop_table(table)
    for table in VOCABULARIES:
        op.drop_table(table)
    op.drop_index('ix_tests_status', table_name='tests')
    op.drop_index('ix_tests_owner_id', table_name='tests')
    op.drop_table('tests')
    op.drop_table('profiles')
    op.drop_table('magic_link_tokens')
    op.drop_table('users')
