"""Issue search over the local cache or the GitHub search API."""

from .engine import (
    IssueSearchService,
    SearchFailure,
    SearchResult,
    SearchSuccess,
    build_transient_issue,
    issue_to_dict,
    serialize_rate_limit,
)
from .query import (
    SearchFilters,
    SearchMode,
    SortDirection,
    SortField,
    SortSpec,
    build_search_query,
    parse_query,
    parse_sort,
)

__all__ = [
    "IssueSearchService",
    "SearchFailure",
    "SearchFilters",
    "SearchMode",
    "SearchResult",
    "SearchSuccess",
    "SortDirection",
    "SortField",
    "SortSpec",
    "build_search_query",
    "build_transient_issue",
    "issue_to_dict",
    "parse_query",
    "parse_sort",
    "serialize_rate_limit",
]
