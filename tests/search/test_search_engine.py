"""Tests for IssueSearchService (local and remote modes)."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select

from github_issue_cache.db.models import Issue, IssueState
from github_issue_cache.github.exceptions import (
    GitHubAuthenticationError,
    GitHubRateLimitError,
    GitHubServerError,
)
from github_issue_cache.github.sync import ErrorKind, IssueSyncService
from github_issue_cache.schemas.issue import SearchPage
from github_issue_cache.search import (
    IssueSearchService,
    SearchFilters,
    SearchMode,
    build_transient_issue,
    issue_to_dict,
    parse_query,
    serialize_rate_limit,
)
from tests.conftest import JAN_10, JAN_12, JAN_15, JAN_16, JAN_20
from tests.factories import make_issue, make_issue_data, make_mock_client, make_repository


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
async def cached_repo(session_factory) -> int:
    """Commit a tracked repository with five cached issues; return its ID.

    Updated order (newest first): 5, 2, 3, 4, 1
    """
    async with session_factory() as session, session.begin():
        repo = make_repository(session, synced_at=JAN_20)
        await session.flush()
        make_issue(
            session, repo, number=1, title="Crash when saving", labels=["bug"],
            state=IssueState.CLOSED, comments_count=4,
            remote_created_at=JAN_10, remote_updated_at=JAN_10,
        )
        make_issue(
            session, repo, number=2, title="Crash on startup", labels=["bug", "P1"],
            assignees=["carol"], comments_count=9,
            remote_created_at=JAN_10, remote_updated_at=JAN_16,
        )
        make_issue(
            session, repo, number=3, title="Dark mode", labels=["enhancement"],
            author_login="bob", comments_count=0,
            remote_created_at=JAN_12, remote_updated_at=JAN_15,
        )
        make_issue(
            session, repo, number=4, title="Docs typo", comments_count=1,
            remote_created_at=JAN_12, remote_updated_at=JAN_12,
        )
        make_issue(
            session, repo, number=5, title="Crash in settings", labels=["bug"],
            comments_count=2, remote_created_at=JAN_15, remote_updated_at=JAN_20,
        )
        await session.flush()
        return repo.id


@pytest.fixture
def client():
    return make_mock_client(
        search_page=SearchPage(
            total_count=57,
            items=[
                make_issue_data(42, title="Crash when saving a widget", labels=["bug"]),
                make_issue_data(7, title="Crash on exit", state="closed"),
            ],
        )
    )


@pytest.fixture
def service(session_factory, credentials, client):
    return IssueSearchService(session_factory, credentials, client_factory=lambda cred: client)


def numbers(result) -> list[int]:
    return [issue.number for issue in result.issues]


# -----------------------------------------------------------------------------
# Local mode
# -----------------------------------------------------------------------------
class TestLocalSearch:
    async def test_all_issues_by_recent_update(self, service, cached_repo, repo_ref):
        result = await service.search(repo_ref, mode=SearchMode.LOCAL)

        assert result.success is True
        assert result.mode == SearchMode.LOCAL
        assert numbers(result) == [5, 2, 3, 4, 1]
        assert result.total_count == 5

    async def test_text_and_filters(self, service, cached_repo, repo_ref):
        result = await service.search(
            repo_ref, "crash", SearchFilters(state="open", labels=("bug",)), mode=SearchMode.LOCAL
        )
        assert numbers(result) == [5, 2]

    async def test_assignee_and_author(self, service, cached_repo, repo_ref):
        by_assignee = await service.search(
            repo_ref, filters=SearchFilters(assignee="carol"), mode=SearchMode.LOCAL
        )
        by_author = await service.search(
            repo_ref, filters=SearchFilters(author="bob"), mode=SearchMode.LOCAL
        )

        assert numbers(by_assignee) == [2]
        assert numbers(by_author) == [3]

    async def test_state_all_means_no_filter(self, service, cached_repo, repo_ref):
        result = await service.search(
            repo_ref, filters=SearchFilters(state="all"), mode=SearchMode.LOCAL
        )
        assert result.total_count == 5

    async def test_sort(self, service, cached_repo, repo_ref):
        result = await service.search(repo_ref, sort="comments-asc", mode=SearchMode.LOCAL)

        assert numbers(result) == [3, 4, 5, 1, 2]
        assert str(result.sort) == "comments-asc"

    async def test_pagination_reports_total(self, service, cached_repo, repo_ref):
        result = await service.search(repo_ref, mode=SearchMode.LOCAL, per_page=2, page=2)

        assert numbers(result) == [3, 4]
        assert result.total_count == 5

    async def test_page_past_the_end(self, service, cached_repo, repo_ref):
        result = await service.search(repo_ref, mode=SearchMode.LOCAL, per_page=2, page=9)

        assert result.issues == []
        assert result.total_count == 5

    async def test_local_never_builds_a_client(
        self, session_factory, credentials, cached_repo, repo_ref
    ):
        factory = MagicMock()
        service = IssueSearchService(session_factory, credentials, client_factory=factory)

        result = await service.search(repo_ref, "crash", mode=SearchMode.LOCAL)

        assert result.success is True
        factory.assert_not_called()

    async def test_mistyped_state_is_searched_as_text(self, service, cached_repo, repo_ref):
        text, filters = parse_query("crash state:opened")

        result = await service.search(repo_ref, text, filters, mode=SearchMode.LOCAL)

        assert result.success is True
        assert result.issues == []
        assert result.total_count == 0

    async def test_not_tracked(self, service, repo_ref):
        result = await service.search(repo_ref, mode=SearchMode.LOCAL)

        assert result.success is False
        assert result.kind == ErrorKind.NOT_TRACKED
        assert result.mode == SearchMode.LOCAL

    async def test_to_dict(self, service, cached_repo, repo_ref):
        data = (await service.search(repo_ref, "typo", mode=SearchMode.LOCAL)).to_dict()

        assert data["success"] is True
        assert data["mode"] == "local"
        assert data["total_count"] == 1
        assert data["sort"] == "updated-desc"
        assert data["rate_limit"] is None
        assert data["issues"][0]["number"] == 4
        assert data["issues"][0]["cached"] is True


# -----------------------------------------------------------------------------
# Remote mode
# -----------------------------------------------------------------------------
class TestRemoteSearch:
    async def test_success_returns_transient_issues(
        self, session_factory, service, cached_repo, repo_ref
    ):
        result = await service.search(repo_ref, "crash", mode=SearchMode.REMOTE)

        assert result.success is True
        assert result.mode == SearchMode.REMOTE
        assert result.total_count == 57
        assert numbers(result) == [42, 7]
        assert all(issue.synced_at is None for issue in result.issues)
        assert all(issue.repository_id == cached_repo for issue in result.issues)
        assert result.issues[1].state == IssueState.CLOSED

        # Nothing from the remote result is written to the cache
        async with session_factory() as session:
            assert await session.scalar(select(func.count(Issue.id))) == 5

    async def test_query_and_sort_passed_to_github(self, service, client, repo_ref):
        await service.search(
            repo_ref,
            "crash",
            SearchFilters(state="open", labels=("needs review",)),
            sort="created-asc",
            mode=SearchMode.REMOTE,
            per_page=10,
            page=2,
        )

        client.search_issues.assert_awaited_once_with(
            'repo:octo-org/widgets crash state:open label:"needs review"',
            sort="created",
            order="asc",
            per_page=10,
            page=2,
        )

    async def test_untracked_repository_can_be_searched(self, service, repo_ref):
        result = await service.search(repo_ref, mode=SearchMode.REMOTE)

        assert result.success is True
        assert all(issue.repository_id is None for issue in result.issues)

    async def test_to_dict_marks_results_uncached(self, service, repo_ref):
        data = (await service.search(repo_ref, mode=SearchMode.REMOTE)).to_dict()

        assert data["mode"] == "remote"
        assert [issue["cached"] for issue in data["issues"]] == [False, False]

    async def test_rate_limited(self, session_factory, credentials, repo_ref):
        client = make_mock_client()
        client.rate_limit_info = {"search": {"remaining": 0, "limit": 30, "status": "exhausted"}}
        client.search_issues = AsyncMock(
            side_effect=GitHubRateLimitError(
                reset_at=datetime(2024, 1, 16, 15, 0, tzinfo=UTC), pool="search"
            )
        )
        service = IssueSearchService(
            session_factory, credentials, client_factory=lambda cred: client
        )

        result = await service.search(repo_ref, "crash", mode=SearchMode.REMOTE)

        assert result.success is False
        assert result.kind == ErrorKind.RATE_LIMITED
        assert result.error.startswith(
            "Search rate limit exceeded. Showing all cached issues. Resets at "
        )
        assert result.rate_limit == {
            "search": {"remaining": 0, "limit": 30, "status": "exhausted"}
        }

    async def test_rate_limited_without_reset(self, session_factory, credentials, repo_ref):
        client = make_mock_client()
        client.search_issues = AsyncMock(side_effect=GitHubRateLimitError())
        service = IssueSearchService(
            session_factory, credentials, client_factory=lambda cred: client
        )

        result = await service.search(repo_ref, mode=SearchMode.REMOTE)

        assert result.error == "Search rate limit exceeded. Showing all cached issues."

    async def test_unauthorized(self, session_factory, credentials, repo_ref):
        client = make_mock_client()
        client.search_issues = AsyncMock(side_effect=GitHubAuthenticationError())
        service = IssueSearchService(
            session_factory, credentials, client_factory=lambda cred: client
        )

        result = await service.search(repo_ref, mode=SearchMode.REMOTE)

        assert result.kind == ErrorKind.UNAUTHORIZED
        assert result.error == "Unauthorized - check your GitHub token"

    async def test_server_error(self, session_factory, credentials, repo_ref):
        client = make_mock_client()
        client.search_issues = AsyncMock(
            side_effect=GitHubServerError("GitHub server error (502)", status=502)
        )
        service = IssueSearchService(
            session_factory, credentials, client_factory=lambda cred: client
        )

        result = await service.search(repo_ref, mode=SearchMode.REMOTE)

        assert result.kind == ErrorKind.SERVER_ERROR
        assert result.error == "Search failed: GitHub server error (502)"
        assert result.to_dict()["kind"] == "server_error"

    async def test_no_credential(self, session_factory, empty_credentials, repo_ref):
        factory = MagicMock()
        service = IssueSearchService(session_factory, empty_credentials, client_factory=factory)

        result = await service.search(repo_ref, mode=SearchMode.REMOTE)

        assert result.kind == ErrorKind.NO_CREDENTIAL
        assert result.error == "No GitHub token configured for github.com"
        factory.assert_not_called()


# -----------------------------------------------------------------------------
# Sorting and parity across modes
# -----------------------------------------------------------------------------
OPEN_BUGS_BY_COMMENTS = [
    make_issue_data(2, title="Crash on startup", labels=["bug"], comments_count=10),
    make_issue_data(1, title="Crash when saving", labels=["bug"], comments_count=3),
]
CLOSED_BUG = make_issue_data(
    3, title="Crash in settings", state="closed", labels=["bug"], comments_count=20
)
OPEN_BUG_FILTERS = SearchFilters(state="open", labels=("bug",))


@pytest.fixture
async def synced_repo(session_factory, credentials, repo_ref):
    """Track the repository and sync two open bugs and one closed bug."""
    async with session_factory() as session, session.begin():
        make_repository(session)

    client = make_mock_client(
        issues=[OPEN_BUGS_BY_COMMENTS[1], CLOSED_BUG, OPEN_BUGS_BY_COMMENTS[0]],
        search_page=SearchPage(total_count=2, items=OPEN_BUGS_BY_COMMENTS),
    )
    sync = IssueSyncService(session_factory, credentials, client_factory=lambda cred: client)
    result = await sync.sync(repo_ref)
    assert result.success is True
    return client


class TestCommentSort:
    async def test_open_bugs_by_comment_count(
        self, session_factory, credentials, synced_repo, repo_ref
    ):
        service = IssueSearchService(
            session_factory, credentials, client_factory=lambda cred: synced_repo
        )

        result = await service.search(
            repo_ref, filters=OPEN_BUG_FILTERS, sort="comments", mode=SearchMode.LOCAL
        )

        assert numbers(result) == [2, 1]
        assert [issue.comments_count for issue in result.issues] == [10, 3]
        assert str(result.sort) == "comments-desc"


class TestModeParity:
    async def test_local_and_remote_agree(
        self, session_factory, credentials, synced_repo, repo_ref
    ):
        service = IssueSearchService(
            session_factory, credentials, client_factory=lambda cred: synced_repo
        )

        local = await service.search(
            repo_ref, filters=OPEN_BUG_FILTERS, sort="comments", mode=SearchMode.LOCAL
        )
        remote = await service.search(
            repo_ref, filters=OPEN_BUG_FILTERS, sort="comments", mode=SearchMode.REMOTE
        )

        def key(result):
            return [(issue.number, issue.title, issue.state) for issue in result.issues]

        assert key(local) == key(remote)
        assert local.total_count == remote.total_count == 2
        synced_repo.search_issues.assert_awaited_once_with(
            "repo:octo-org/widgets state:open label:bug",
            sort="comments",
            order="desc",
            per_page=30,
            page=1,
        )


# -----------------------------------------------------------------------------
# Serialization helpers
# -----------------------------------------------------------------------------
class TestIssueSerialization:
    async def test_cached_and_transient_issues_render_alike(self, db_session):
        repo = make_repository(db_session)
        await db_session.flush()
        data = make_issue_data(9, title="Crash", labels=["bug"], assignees=["carol"])
        cached = make_issue(
            db_session, repo, number=9, title="Crash", labels=["bug"], assignees=["carol"]
        )
        await db_session.flush()

        transient = issue_to_dict(build_transient_issue(data, repo.id))
        stored = issue_to_dict(cached)

        assert transient.pop("cached") is False
        assert stored.pop("cached") is True
        assert transient == stored

    def test_transient_issue_defaults(self):
        issue = build_transient_issue(make_issue_data(3, state="closed"))

        assert issue.id is None
        assert issue.synced_at is None
        assert issue.is_closed is True

    def test_serialize_rate_limit(self):
        resets_at = datetime(2024, 1, 16, 15, 0, tzinfo=UTC)
        info = {"search": {"remaining": 3, "resets_at": resets_at}}

        assert serialize_rate_limit(info) == {
            "search": {"remaining": 3, "resets_at": "2024-01-16T15:00:00+00:00"}
        }
        assert serialize_rate_limit(None) is None
