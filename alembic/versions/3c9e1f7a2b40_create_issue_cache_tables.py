"""create issue cache tables

Revision ID: 3c9e1f7a2b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9e1f7a2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create repositories, issues and issue_comments tables."""
    op.create_table('repositories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=False),
        sa.Column('owner', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.String(length=500), nullable=True),
        sa.Column('issue_count', sa.Integer(), nullable=False),
        sa.Column('open_issue_count', sa.Integer(), nullable=False),
        sa.Column('synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'domain', 'owner', 'name', name='uq_user_domain_repo')
    )
    op.create_index('ix_repositories_user_id', 'repositories', ['user_id'])

    op.create_table('issues',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('repository_id', sa.Integer(), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=1000), nullable=False),
        sa.Column('state', sa.Enum('OPEN', 'CLOSED', name='issuestate'), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('author_login', sa.String(length=100), nullable=True),
        sa.Column('author_avatar_url', sa.String(length=500), nullable=True),
        sa.Column('comments_count', sa.Integer(), nullable=False),
        sa.Column('remote_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remote_updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('labels', sa.JSON(), nullable=False),
        sa.Column('assignees', sa.JSON(), nullable=False),
        sa.Column('synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['repository_id'], ['repositories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('repository_id', 'number', name='uq_repo_issue_number')
    )
    # Local search filters by state within a repository
    op.create_index('ix_issues_repository_state', 'issues', ['repository_id', 'state'])

    op.create_table('issue_comments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('issue_id', sa.Integer(), nullable=False),
        sa.Column('remote_id', sa.BigInteger(), nullable=False),
        sa.Column('author_login', sa.String(length=100), nullable=True),
        sa.Column('author_avatar_url', sa.String(length=500), nullable=True),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('remote_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remote_updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['issue_id'], ['issues.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('issue_id', 'remote_id', name='uq_issue_comment_remote_id')
    )


def downgrade() -> None:
    """Drop issue cache tables."""
    op.drop_table('issue_comments')
    op.drop_index('ix_issues_repository_state', table_name='issues')
    op.drop_table('issues')
    op.drop_index('ix_repositories_user_id', table_name='repositories')
    op.drop_table('repositories')
    sa.Enum(name='issuestate').drop(op.get_bind(), checkfirst=True)
