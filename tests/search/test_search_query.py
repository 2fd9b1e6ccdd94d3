"""Tests for search query building and parsing."""

import pytest

from github_issue_cache.search import (
    SearchFilters,
    SortDirection,
    SortField,
    SortSpec,
    build_search_query,
    parse_query,
    parse_sort,
)


class TestParseSort:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("created-asc", SortSpec(SortField.CREATED, SortDirection.ASC)),
            ("updated-desc", SortSpec(SortField.UPDATED, SortDirection.DESC)),
            ("comments", SortSpec(SortField.COMMENTS, SortDirection.DESC)),
            (" Updated-ASC ", SortSpec(SortField.UPDATED, SortDirection.ASC)),
        ],
    )
    def test_valid(self, value: str, expected: SortSpec):
        assert parse_sort(value) == expected

    @pytest.mark.parametrize("value", [None, "", "title", "created-sideways", "-asc"])
    def test_fallback_to_updated_desc(self, value):
        assert parse_sort(value) == SortSpec(SortField.UPDATED, SortDirection.DESC)

    def test_str(self):
        assert str(SortSpec()) == "updated-desc"
        assert str(parse_sort("comments-asc")) == "comments-asc"

    def test_field_columns(self):
        assert SortField.CREATED.column == "remote_created_at"
        assert SortField.UPDATED.column == "remote_updated_at"
        assert SortField.COMMENTS.column == "comments_count"


class TestSearchFilters:
    @pytest.mark.parametrize(
        ("state", "expected"),
        [(None, None), ("all", None), ("ALL", None), ("open", "open"), ("Closed", "closed")],
    )
    def test_effective_state(self, state, expected):
        assert SearchFilters(state=state).effective_state == expected

    @pytest.mark.parametrize("state", ["opened", "pending", "merged"])
    def test_unknown_state_rejected(self, state):
        with pytest.raises(ValueError, match="Unknown issue state"):
            SearchFilters(state=state)

    def test_merge_overlays_set_fields(self):
        base = SearchFilters(state="open", labels=("bug",), author="alice")
        merged = base.merge(SearchFilters(labels=("ui", "bug"), assignee="carol"))

        assert merged == SearchFilters(
            state="open", labels=("bug", "ui"), assignee="carol", author="alice"
        )

    def test_merge_other_state_wins(self):
        merged = SearchFilters(state="open").merge(SearchFilters(state="closed"))
        assert merged.state == "closed"

    def test_to_dict(self):
        filters = SearchFilters(labels=("bug",))
        assert filters.to_dict() == {
            "state": None,
            "labels": ["bug"],
            "assignee": None,
            "author": None,
        }


class TestBuildSearchQuery:
    def test_repository_only(self):
        assert build_search_query("octo-org/widgets") == "repo:octo-org/widgets"

    def test_all_parts_in_order(self):
        query = build_search_query(
            "octo-org/widgets",
            "crash",
            SearchFilters(
                state="open",
                labels=("bug", "needs review"),
                assignee="carol",
                author="alice",
            ),
        )

        assert query == (
            'repo:octo-org/widgets crash state:open label:bug label:"needs review" '
            "assignee:carol author:alice"
        )

    def test_state_all_is_omitted(self):
        query = build_search_query("octo-org/widgets", None, SearchFilters(state="all"))
        assert query == "repo:octo-org/widgets"

    def test_blank_text_is_omitted(self):
        assert build_search_query("octo-org/widgets", "   ") == "repo:octo-org/widgets"


class TestParseQuery:
    def test_empty(self):
        assert parse_query("") == (None, SearchFilters())
        assert parse_query(None) == (None, SearchFilters())

    def test_text_only(self):
        assert parse_query("crash on save") == ("crash on save", SearchFilters())

    def test_qualifiers_extracted(self):
        text, filters = parse_query("crash label:bug state:open")

        assert text == "crash"
        assert filters == SearchFilters(state="open", labels=("bug",))

    def test_quoted_label_and_is_state(self):
        text, filters = parse_query(
            'label:"needs review" is:closed author:alice assignee:carol editor crash'
        )

        assert text == "editor crash"
        assert filters.labels == ("needs review",)
        assert filters.state == "closed"
        assert filters.author == "alice"
        assert filters.assignee == "carol"

    def test_repeated_labels(self):
        _, filters = parse_query("label:bug LABEL:ui")
        assert filters.labels == ("bug", "ui")

    def test_qualifiers_only(self):
        text, filters = parse_query("label:bug")

        assert text is None
        assert filters.labels == ("bug",)

    def test_unknown_state_kept_as_text(self):
        text, filters = parse_query("state:pending crash")

        assert text == "state:pending crash"
        assert filters.state is None

    def test_other_is_qualifiers_kept_as_text(self):
        text, filters = parse_query("crash is:pr label:bug is:open")

        assert text == "crash is:pr"
        assert filters == SearchFilters(state="open", labels=("bug",))

    def test_kept_qualifier_reaches_remote_query(self):
        text, filters = parse_query("is:issue crash state:closed")

        assert build_search_query("octo-org/widgets", text, filters) == (
            "repo:octo-org/widgets is:issue crash state:closed"
        )

    def test_round_trip_through_builder(self):
        filters = SearchFilters(state="open", labels=("needs review",), author="alice")
        query = build_search_query("octo-org/widgets", "crash", filters)

        text, parsed = parse_query(query.removeprefix("repo:octo-org/widgets "))

        assert text == "crash"
        assert parsed == filters
