"""Credential lookup for per-user, per-domain GitHub tokens.

Credentials are consumed, never stored by this package: the store
interface only reads them, and tokens stay wrapped in SecretStr so they
do not show up in reprs, logs or serialized results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from pydantic import SecretStr

if TYPE_CHECKING:
    from github_issue_cache.config import Settings


@dataclass(frozen=True)
class Credential:
    """A token for one user on one GitHub host."""

    user_id: int
    domain: str
    token: SecretStr = field(repr=False)


class CredentialStore(Protocol):
    """Read-only source of credentials keyed by (user, domain)."""

    def lookup(self, user_id: int, domain: str) -> Credential | None: ...


class StaticCredentialStore:
    """In-memory credential store.

    Usage:
        store = StaticCredentialStore.from_settings(get_settings())
        credential = store.lookup(1, "github.com")
    """

    def __init__(self, tokens: dict[tuple[int, str], str] | None = None) -> None:
        self._tokens = {
            (user_id, domain.lower()): SecretStr(token)
            for (user_id, domain), token in (tokens or {}).items()
            if token
        }

    @classmethod
    def from_settings(cls, settings: Settings, user_id: int | None = None) -> StaticCredentialStore:
        """Build a store holding the configured tokens for one local user."""
        owner = user_id if user_id is not None else settings.user_id
        return cls(
            {(owner, domain): token for domain, token in settings.tokens_by_domain().items()}
        )

    def lookup(self, user_id: int, domain: str) -> Credential | None:
        token = self._tokens.get((user_id, domain.lower()))
        if token is None:
            return None
        return Credential(user_id=user_id, domain=domain, token=token)
