"""Tests for GitHub API response schemas."""

import pytest
from pydantic import ValidationError

from github_issue_cache.db.models import IssueState
from github_issue_cache.schemas import (
    GitHubComment,
    GitHubIssue,
    GitHubLabel,
    GitHubRepository,
    GitHubSearchResponse,
    GitHubUser,
    IssueData,
)
from tests.conftest import JAN_12, JAN_15, JAN_16
from tests.fixtures import (
    GITHUB_COMMENTS_RESPONSE,
    GITHUB_ISSUE_CLOSED_RESPONSE,
    GITHUB_ISSUE_RESPONSE,
    GITHUB_LABEL_RESPONSE,
    GITHUB_REPOSITORY_RESPONSE,
    GITHUB_SEARCH_RESPONSE,
    GITHUB_USER_RESPONSE,
)


class TestGitHubUser:
    """Tests for GitHubUser schema."""

    def test_github_user_parse(self):
        user = GitHubUser(**GITHUB_USER_RESPONSE)

        assert user.login == "alice"
        assert user.id == 12345


class TestGitHubLabel:
    """Tests for GitHubLabel schema."""

    def test_github_label_parse(self):
        label = GitHubLabel(**GITHUB_LABEL_RESPONSE)

        assert label.name == "bug"
        assert label.color == "d73a4a"

    def test_bare_string_label(self):
        """The issues API sometimes returns labels as plain names."""
        label = GitHubLabel.model_validate("wontfix")

        assert label.name == "wontfix"
        assert label.color is None


class TestGitHubIssue:
    """Tests for GitHubIssue schema."""

    def test_github_issue_parse(self):
        issue = GitHubIssue(**GITHUB_ISSUE_RESPONSE)

        assert issue.number == 42
        assert issue.state == "open"
        assert issue.user is not None
        assert issue.user.login == "alice"
        assert issue.created_at == JAN_15

    def test_to_issue_data(self):
        data = GitHubIssue(**GITHUB_ISSUE_RESPONSE).to_issue_data()

        assert isinstance(data, IssueData)
        assert data.number == 42
        assert data.title == "Crash when saving a widget"
        assert data.state == IssueState.OPEN
        assert data.author_login == "alice"
        assert data.comments_count == 2
        assert data.remote_created_at == JAN_15
        assert data.remote_updated_at == JAN_16

    def test_labels_and_assignees_flattened(self):
        data = GitHubIssue(**GITHUB_ISSUE_RESPONSE).to_issue_data()

        assert [label.name for label in data.labels] == ["bug", "needs review"]
        assert data.labels[0].color == "d73a4a"
        assert [assignee.login for assignee in data.assignees] == ["carol"]

    def test_deleted_author_and_null_assignees(self):
        data = GitHubIssue(**GITHUB_ISSUE_CLOSED_RESPONSE).to_issue_data()

        assert data.author_login is None
        assert data.author_avatar_url is None
        assert data.assignees == []
        assert data.body is None
        assert data.state == IssueState.CLOSED
        assert data.remote_updated_at == JAN_12

    @pytest.mark.parametrize("state", ["CLOSED", "Closed", "closed"])
    def test_state_is_case_insensitive(self, state: str):
        data = GitHubIssue(**{**GITHUB_ISSUE_RESPONSE, "state": state}).to_issue_data()
        assert data.state == IssueState.CLOSED

    def test_unknown_state_rejected(self):
        issue = GitHubIssue(**{**GITHUB_ISSUE_RESPONSE, "state": "merged"})

        with pytest.raises(ValidationError):
            issue.to_issue_data()

    def test_missing_number_rejected(self):
        payload = {key: value for key, value in GITHUB_ISSUE_RESPONSE.items() if key != "number"}

        with pytest.raises(ValidationError):
            GitHubIssue(**payload)

    def test_model_fields_are_json_ready(self):
        """Labels and assignees become plain dicts for the JSON columns."""
        fields = GitHubIssue(**GITHUB_ISSUE_RESPONSE).to_issue_data().to_model_fields()

        assert fields["labels"][0] == {"name": "bug", "color": "d73a4a"}
        assert fields["assignees"][0]["login"] == "carol"


class TestGitHubComment:
    def test_to_comment_data(self):
        comment = GitHubComment(**GITHUB_COMMENTS_RESPONSE[0]).to_comment_data()

        assert comment.remote_id == 1001
        assert comment.author_login == "carol"
        assert comment.body == "I can reproduce this on main."
        assert comment.remote_created_at == JAN_15

    def test_comment_without_user(self):
        comment = GitHubComment(**{**GITHUB_COMMENTS_RESPONSE[1], "user": None}).to_comment_data()

        assert comment.author_login is None


class TestGitHubRepository:
    def test_to_repository_data(self):
        data = GitHubRepository(**GITHUB_REPOSITORY_RESPONSE).to_repository_data()

        assert data.owner == "octo-org"
        assert data.name == "widgets"
        assert data.full_name == "octo-org/widgets"
        assert data.url == "https://github.com/octo-org/widgets"
        assert data.open_issue_count == 12


class TestGitHubSearchResponse:
    def test_to_search_page(self):
        page = GitHubSearchResponse(**GITHUB_SEARCH_RESPONSE).to_search_page()

        assert page.total_count == 57
        assert page.incomplete_results is False
        assert [item.number for item in page.items] == [42, 7]

    def test_upper_case_states_normalized(self):
        page = GitHubSearchResponse(**GITHUB_SEARCH_RESPONSE).to_search_page()

        assert page.items[0].state == IssueState.OPEN
        assert page.items[1].state == IssueState.CLOSED

    def test_empty_response(self):
        page = GitHubSearchResponse().to_search_page()

        assert page.total_count == 0
        assert page.items == []
