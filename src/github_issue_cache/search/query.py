"""Search query building and parsing.

Three small pieces shared by local and remote search:

- SearchFilters: conjunctive filters (state, labels, assignee, author)
- parse_sort: "created-asc" style sort strings into a SortSpec
- build_search_query / parse_query: to and from GitHub's qualifier syntax,
  e.g. 'crash label:"needs review" state:open'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum


class SearchMode(str, Enum):
    """Where a search runs."""

    LOCAL = "local"
    """Cached issues only, never touches the network."""

    REMOTE = "remote"
    """GitHub search API (search quota bucket)."""


class SortField(str, Enum):
    """Sortable issue fields, named as GitHub's search API names them."""

    CREATED = "created"
    UPDATED = "updated"
    COMMENTS = "comments"

    @property
    def column(self) -> str:
        """Issue column holding this field."""
        return _SORT_COLUMNS[self]


_SORT_COLUMNS = {
    SortField.CREATED: "remote_created_at",
    SortField.UPDATED: "remote_updated_at",
    SortField.COMMENTS: "comments_count",
}


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    """Parsed sort order."""

    field: SortField = SortField.UPDATED
    direction: SortDirection = SortDirection.DESC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC

    def __str__(self) -> str:
        return f"{self.field.value}-{self.direction.value}"


DEFAULT_SORT = SortSpec()


def parse_sort(value: str | None) -> SortSpec:
    """Parse 'field' or 'field-direction' into a SortSpec.

    A bare field sorts descending. Anything unrecognized, in either part,
    falls back to updated, descending.

        >>> parse_sort("created-asc")
        SortSpec(field=<SortField.CREATED: 'created'>, direction=<SortDirection.ASC: 'asc'>)
    """
    if not value:
        return DEFAULT_SORT

    field_name, _, direction_name = value.strip().lower().partition("-")
    try:
        sort_field = SortField(field_name)
        direction = SortDirection(direction_name) if direction_name else SortDirection.DESC
    except ValueError:
        return DEFAULT_SORT
    return SortSpec(sort_field, direction)


# Accepted filter states; "all" means no state filter
STATE_VALUES = frozenset({"open", "closed", "all"})


@dataclass(frozen=True)
class SearchFilters:
    """Conjunctive search filters; None or empty means "no filter"."""

    state: str | None = None
    """"open", "closed", or "all"/None for both."""

    labels: tuple[str, ...] = field(default_factory=tuple)
    """Every label must be present."""

    assignee: str | None = None
    author: str | None = None

    def __post_init__(self) -> None:
        if self.state and self.state.lower() not in STATE_VALUES:
            raise ValueError(
                f"Unknown issue state {self.state!r} (expected open, closed or all)"
            )

    @property
    def effective_state(self) -> str | None:
        """State to filter on, with "all" treated as no filter."""
        if not self.state or self.state.lower() == "all":
            return None
        return self.state.lower()

    def merge(self, other: SearchFilters) -> SearchFilters:
        """Overlay other's set fields onto these; labels accumulate."""
        return replace(
            self,
            state=other.state or self.state,
            labels=tuple(dict.fromkeys((*self.labels, *other.labels))),
            assignee=other.assignee or self.assignee,
            author=other.author or self.author,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "state": self.state,
            "labels": list(self.labels),
            "assignee": self.assignee,
            "author": self.author,
        }


def _qualifier_value(value: str) -> str:
    if any(ch.isspace() for ch in value):
        return f'"{value}"'
    return value


def build_search_query(
    full_name: str,
    text: str | None = None,
    filters: SearchFilters | None = None,
) -> str:
    """Compose a GitHub issue search query.

    Order: repo, free text, state, labels, assignee, author.

        >>> build_search_query("o/n", "crash", SearchFilters(labels=("needs review",)))
        'repo:o/n crash label:"needs review"'
    """
    filters = filters or SearchFilters()
    parts = [f"repo:{full_name}"]
    if text and text.strip():
        parts.append(text.strip())
    if filters.effective_state:
        parts.append(f"state:{filters.effective_state}")
    parts.extend(f"label:{_qualifier_value(label)}" for label in filters.labels)
    if filters.assignee:
        parts.append(f"assignee:{filters.assignee}")
    if filters.author:
        parts.append(f"author:{filters.author}")
    return " ".join(parts)


# key:value or key:"quoted value"
QUALIFIER_PATTERN = re.compile(r'\b(state|is|label|assignee|author):(?:"([^"]+)"|(\S+))', re.I)


def parse_query(query: str | None) -> tuple[str | None, SearchFilters]:
    """Split a user-typed query into free text and qualifier filters.

    Recognizes state:, is:open/is:closed, label: (repeatable), assignee:
    and author:. Everything else stays in the free text, including
    state: and is: tokens with other values (is:pr, state:pending), so
    remote mode still passes them on to GitHub.

    Args:
        query: e.g. 'crash label:bug state:open'

    Returns:
        (free text or None, SearchFilters)
    """
    if not query:
        return None, SearchFilters()

    state: str | None = None
    labels: list[str] = []
    assignee: str | None = None
    author: str | None = None

    def take(match: re.Match[str]) -> str:
        nonlocal state, assignee, author
        key = match.group(1).lower()
        value = match.group(2) or match.group(3)
        if key in ("state", "is"):
            if value.lower() not in STATE_VALUES:
                return match.group(0)
            state = value.lower()
        elif key == "label":
            labels.append(value)
        elif key == "assignee":
            assignee = value
        elif key == "author":
            author = value
        return " "

    text = " ".join(QUALIFIER_PATTERN.sub(take, query).split())
    return text or None, SearchFilters(
        state=state,
        labels=tuple(labels),
        assignee=assignee,
        author=author,
    )
