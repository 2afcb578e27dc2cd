"""Semantic version parsing, severity resolution and bumping.

Only the MAJOR.MINOR.PATCH core of semantic versioning is supported.
Release tags look like ``<package-name>-v<version>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from monorelease.exceptions import VersionParseError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from monorelease.core.commits import SemanticChange

DEFAULT_INITIAL_VERSION = "1.0.0"

_SEMVER_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


class ReleaseType(str, Enum):
    """Release severity, declared in priority order (highest first)."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class Version:
    """A semantic version (major.minor.patch)."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a ``MAJOR.MINOR.PATCH`` string.

        Raises:
            VersionParseError: If the string is not a valid semver core
        """
        match = _SEMVER_RE.match(value.strip())
        if not match:
            raise VersionParseError(f"Invalid semantic version: {value!r}", value=value)
        return cls(*(int(part) for part in match.groups()))

    def bump(self, release_type: ReleaseType) -> Version:
        """Return the next version for the given release type."""
        if release_type is ReleaseType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if release_type is ReleaseType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        return Version(self.major, self.minor, self.patch + 1)


def parse_tag_version(tag: str, prefix: str) -> Version:
    """Extract the version from a release tag.

    Args:
        tag: Release tag, e.g. ``foo-v1.2.3``
        prefix: Tag prefix to strip, e.g. ``foo-v``

    Raises:
        VersionParseError: If the tag lacks the prefix or the suffix is not semver
    """
    if not tag.startswith(prefix):
        raise VersionParseError(f"Tag {tag!r} does not start with {prefix!r}", value=tag)
    return Version.parse(tag[len(prefix) :])


def is_release_tag(tag: str, prefix: str) -> bool:
    """Whether ``tag`` is ``prefix`` followed by a semantic version.

    Tags of a package named ``ui-vue`` start with ``ui-v`` too, so the prefix
    alone does not identify a release of ``ui``.
    """
    return tag.startswith(prefix) and _SEMVER_RE.match(tag[len(prefix) :]) is not None


def resolve_severity(changes: Iterable[SemanticChange]) -> ReleaseType | None:
    """Reduce a set of semantic changes to a single release type.

    The highest tier with at least one change wins, so a single breaking
    change forces a major release no matter how many fixes accompany it.

    Returns:
        The release type, or None when there is nothing to release
    """
    present = {change.release_type for change in changes}
    for release_type in ReleaseType:
        if release_type in present:
            return release_type
    return None


def resolve_next_version(
    prior_tag: str | None,
    release_type: ReleaseType,
    prefix: str,
    initial_version: str = DEFAULT_INITIAL_VERSION,
) -> str:
    """Compute the next version string for a package.

    A package without a prior release tag always starts at
    ``initial_version``, independent of the release type.

    Raises:
        VersionParseError: If the prior tag's version suffix is invalid
    """
    if prior_tag is None:
        return str(Version.parse(initial_version))
    return str(parse_tag_version(prior_tag, prefix).bump(release_type))
