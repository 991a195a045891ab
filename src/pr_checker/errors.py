"""Exception types for pr-checker."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RepositoryFailure


class PrCheckerError(Exception):
    """Base class for errors reported to the user."""


class ConfigError(PrCheckerError):
    """Config file could not be located, read or parsed."""


class AccessDeniedError(PrCheckerError):
    """The token's principal is not a member of the organization."""

    def __init__(self, org: str) -> None:
        super().__init__(f"No access to org: {org}")
        self.org = org


class MalformedPullRequestError(PrCheckerError):
    """A pull request payload lacks a required field."""

    def __init__(self, field: str, repo: str | None = None) -> None:
        self.field = field
        self.repo = repo
        super().__init__(self._message())

    def _message(self) -> str:
        where = f" in {self.repo}" if self.repo else ""
        return f"Malformed pull request{where}: missing or invalid '{self.field}'"

    def with_repo(self, repo: str) -> MalformedPullRequestError:
        return MalformedPullRequestError(self.field, repo=repo)


class FetchError(PrCheckerError):
    """One or more repositories could not be fetched."""

    def __init__(self, failures: list[RepositoryFailure]) -> None:
        self.failures = failures
        names = ", ".join(f.name for f in failures)
        super().__init__(
            f"Failed to fetch pull requests for {len(failures)} repo(s): {names}"
        )
