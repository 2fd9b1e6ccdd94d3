"""Database module for GitHub Issue Cache."""

from github_issue_cache.db.engine import (
    build_engine,
    build_session_factory,
    create_tables,
    dispose_engine,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
)
from github_issue_cache.db.models import (
    Base,
    Issue,
    IssueComment,
    IssueState,
    Repository,
)
from github_issue_cache.db.repositories import (
    BaseRepository,
    IssueCommentRepository,
    IssueRepository,
    RepositoryRepository,
)

__all__ = [
    # Models
    "Base",
    "Issue",
    "IssueComment",
    "IssueState",
    "Repository",
    # Engine
    "build_engine",
    "build_session_factory",
    "create_tables",
    "dispose_engine",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    # Repositories
    "BaseRepository",
    "IssueCommentRepository",
    "IssueRepository",
    "RepositoryRepository",
]
