"""Exception hierarchy for monorelease.

All errors raised by the library derive from MonoreleaseError so callers
can tell expected release failures apart from programming errors.
"""

from __future__ import annotations


class MonoreleaseError(Exception):
    """Base exception for all monorelease errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(MonoreleaseError):
    """Configuration or environment is missing or invalid.

    Fatal for the whole run: raised before any package is processed.
    """


class ConfigNotFoundError(ConfigurationError):
    """A configuration file was requested but does not exist."""


class ConfigValidationError(ConfigurationError):
    """A configuration file exists but its content is invalid."""


# =============================================================================
# Parsing
# =============================================================================


class ParseError(MonoreleaseError):
    """Malformed commit-log or tag-version text."""


class CommitParseError(ParseError):
    """A git log entry did not have the expected field layout."""

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class VersionParseError(ParseError):
    """A version string is not valid semantic versioning."""

    def __init__(self, message: str, value: str) -> None:
        super().__init__(message)
        self.value = value


# =============================================================================
# Project files
# =============================================================================


class ManifestError(MonoreleaseError):
    """A package manifest could not be read or updated."""


# =============================================================================
# External collaborators
# =============================================================================


class ExternalCallError(MonoreleaseError):
    """A call to git, the hosting API or the registry failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}: {self.stderr.strip()}"
        return base


class GitError(ExternalCallError):
    """A git command failed."""


class GitHubError(ExternalCallError):
    """The GitHub API rejected a request."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message, stderr=stderr)
        self.status_code = status_code


class PublishError(ExternalCallError):
    """Publishing a package to the registry failed."""
