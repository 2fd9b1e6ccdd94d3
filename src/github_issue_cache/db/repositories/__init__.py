"""Repository pattern implementation for database access.

This module provides repository classes that encapsulate all database
access logic, providing a clean abstraction over SQLAlchemy models.
"""

from .base import BaseRepository
from .comment import IssueCommentRepository
from .issue import IssueRepository
from .repository import RepositoryRepository

__all__ = [
    "BaseRepository",
    "IssueCommentRepository",
    "IssueRepository",
    "RepositoryRepository",
]
