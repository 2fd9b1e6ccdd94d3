"""Tests for IssueRepository."""

import pytest

from github_issue_cache.db.models import IssueState
from github_issue_cache.db.repositories import IssueRepository
from tests.conftest import JAN_10, JAN_12, JAN_15, JAN_16, JAN_20
from tests.factories import make_issue, make_issue_data, make_repository


@pytest.fixture
async def populated(db_session):
    """One repository with three cached issues and a neighbour repository.

    #1 closed crash (bug, UI) by alice, 5 comments, updated Jan 12
    #2 open feature (enhancement) by bob, 1 comment, updated Jan 20
    #3 open crash (bug) by alice, 9 comments, updated Jan 16
    """
    repo = make_repository(db_session)
    other = make_repository(db_session, name="gadgets")
    await db_session.flush()

    make_issue(
        db_session,
        repo,
        number=1,
        title="Crash when saving",
        body="Happens with an empty name",
        state=IssueState.CLOSED,
        labels=["bug", "UI"],
        assignees=["carol"],
        comments_count=5,
        remote_created_at=JAN_10,
        remote_updated_at=JAN_12,
    )
    make_issue(
        db_session,
        repo,
        number=2,
        title="Add dark mode",
        body="Feature request from the forum",
        author_login="bob",
        labels=["enhancement"],
        comments_count=1,
        remote_created_at=JAN_12,
        remote_updated_at=JAN_20,
    )
    make_issue(
        db_session,
        repo,
        number=3,
        title="Crash on startup",
        body=None,
        labels=["bug"],
        assignees=["dave", "carol"],
        comments_count=9,
        remote_created_at=JAN_15,
        remote_updated_at=JAN_16,
    )
    make_issue(db_session, other, number=4, title="Crash in the other repo")
    await db_session.flush()
    return repo


def numbers(issues) -> list[int]:
    return [issue.number for issue in issues]


class TestIssueRepositorySearch:
    """Local search over cached issues."""

    async def test_no_filters_sorted_by_updated_desc(self, db_session, populated):
        issues = await IssueRepository(db_session).search(populated.id)
        assert numbers(issues) == [2, 3, 1]

    async def test_text_matches_title(self, db_session, populated):
        issues = await IssueRepository(db_session).search(populated.id, text="CRASH")
        assert numbers(issues) == [3, 1]

    async def test_text_matches_body(self, db_session, populated):
        issues = await IssueRepository(db_session).search(populated.id, text="forum")
        assert numbers(issues) == [2]

    async def test_text_wildcards_are_literal(self, db_session, populated):
        issues = await IssueRepository(db_session).search(populated.id, text="%")
        assert issues == []

    async def test_state_filter(self, db_session, populated):
        repository = IssueRepository(db_session)

        assert numbers(await repository.search(populated.id, state=IssueState.OPEN)) == [2, 3]
        assert numbers(await repository.search(populated.id, state=IssueState.CLOSED)) == [1]

    async def test_label_filter_is_case_insensitive(self, db_session, populated):
        issues = await IssueRepository(db_session).search(populated.id, labels=["BUG"])
        assert numbers(issues) == [3, 1]

    async def test_every_label_must_match(self, db_session, populated):
        issues = await IssueRepository(db_session).search(populated.id, labels=["bug", "ui"])
        assert numbers(issues) == [1]

    async def test_assignee_filter(self, db_session, populated):
        repository = IssueRepository(db_session)

        assert numbers(await repository.search(populated.id, assignee="CAROL")) == [3, 1]
        assert numbers(await repository.search(populated.id, assignee="dave")) == [3]

    async def test_author_filter(self, db_session, populated):
        issues = await IssueRepository(db_session).search(populated.id, author="Alice")
        assert numbers(issues) == [3, 1]

    async def test_combined_filters(self, db_session, populated):
        issues = await IssueRepository(db_session).search(
            populated.id, text="crash", state=IssueState.OPEN, labels=["bug"]
        )
        assert numbers(issues) == [3]

    async def test_sort_by_comments(self, db_session, populated):
        repository = IssueRepository(db_session)

        desc = await repository.search(populated.id, order_by="comments_count")
        asc = await repository.search(populated.id, order_by="comments_count", descending=False)

        assert numbers(desc) == [3, 1, 2]
        assert numbers(asc) == [2, 1, 3]

    async def test_sort_by_created(self, db_session, populated):
        issues = await IssueRepository(db_session).search(
            populated.id, order_by="remote_created_at", descending=False
        )
        assert numbers(issues) == [1, 2, 3]

    async def test_invalid_sort_column(self, db_session, populated):
        with pytest.raises(ValueError, match="Cannot sort issues by 'title'"):
            await IssueRepository(db_session).search(populated.id, order_by="title")

    async def test_other_repository_excluded(self, db_session, populated):
        issues = await IssueRepository(db_session).search(populated.id, text="other repo")
        assert issues == []


class TestIssueRepositoryQuery:
    async def test_get_by_number(self, db_session, populated):
        issue = await IssueRepository(db_session).get_by_number(populated.id, 2)

        assert issue is not None
        assert issue.title == "Add dark mode"

    async def test_get_by_number_not_cached(self, db_session, populated):
        assert await IssueRepository(db_session).get_by_number(populated.id, 99) is None

    async def test_count_for_repository(self, db_session, populated):
        repository = IssueRepository(db_session)

        assert await repository.count_for_repository(populated.id) == 3
        assert await repository.count_for_repository(populated.id, IssueState.OPEN) == 2

    async def test_has_synced_issues(self, db_session):
        repo = make_repository(db_session)
        await db_session.flush()
        repository = IssueRepository(db_session)

        assert await repository.has_synced_issues(repo.id) is False

        make_issue(db_session, repo, number=1, synced_at=None)
        await db_session.flush()
        assert await repository.has_synced_issues(repo.id) is False

        make_issue(db_session, repo, number=2, synced_at=JAN_16)
        await db_session.flush()
        assert await repository.has_synced_issues(repo.id) is True

    async def test_distinct_labels(self, db_session, populated):
        labels = await IssueRepository(db_session).distinct_labels(populated.id)
        assert labels == ["bug", "enhancement", "UI"]

    async def test_distinct_assignees(self, db_session, populated):
        logins = await IssueRepository(db_session).distinct_assignees(populated.id)
        assert logins == ["carol", "dave"]


class TestIssueRepositoryUpsert:
    async def test_upsert_creates(self, db_session):
        repo = make_repository(db_session)
        await db_session.flush()

        issue, created = await IssueRepository(db_session).upsert(
            repo.id, make_issue_data(7, labels=["bug"], assignees=["carol"]), JAN_20
        )

        assert created is True
        assert issue.id is not None
        assert issue.synced_at == JAN_20
        assert issue.label_names == ["bug"]
        assert issue.assignee_logins == ["carol"]
        assert issue.state == IssueState.OPEN

    async def test_upsert_overwrites_remote_fields(self, db_session):
        repo = make_repository(db_session)
        await db_session.flush()
        repository = IssueRepository(db_session)

        first, _ = await repository.upsert(repo.id, make_issue_data(7, title="Old"), JAN_16)
        second, created = await repository.upsert(
            repo.id, make_issue_data(7, title="New", state="closed", labels=[]), JAN_20
        )

        assert created is False
        assert second.id == first.id
        assert second.title == "New"
        assert second.state == IssueState.CLOSED
        assert second.synced_at == JAN_20

    async def test_upsert_is_idempotent(self, db_session):
        repo = make_repository(db_session)
        await db_session.flush()
        repository = IssueRepository(db_session)
        data = make_issue_data(7, labels=["bug"])

        await repository.upsert(repo.id, data, JAN_20)
        await repository.upsert(repo.id, data, JAN_20)

        assert await repository.count_for_repository(repo.id) == 1
