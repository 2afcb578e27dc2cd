"""Commit log parsing and semantic classification.

Raw ``git log`` output is turned into CommitRecord objects, which are then
matched against an ordered list of SemanticRule objects. Each match
produces a SemanticChange carrying the rule's group and release type.

Rules come in two flavours:
- prefix rules match the subject line, e.g. ``feat(api): add endpoint``
- keyword rules search the body, e.g. ``BREAKING CHANGE: drop node 14``
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING

from monorelease.core.version import ReleaseType
from monorelease.exceptions import CommitParseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

# Separators used in the git log format; control characters never appear
# in commit messages typed by humans.
RECORD_SEPARATOR = "\x1e"
FIELD_SEPARATOR = "\x1f"

GIT_LOG_FORMAT = (
    f"{RECORD_SEPARATOR}%s{FIELD_SEPARATOR}%b{FIELD_SEPARATOR}%h{FIELD_SEPARATOR}%H"
)

_FIELD_COUNT = 4


@dataclass(frozen=True)
class CommitRecord:
    """A single commit as read from the git log."""

    subject: str
    body: str
    short_hash: str
    full_hash: str


@dataclass(frozen=True)
class SemanticRule:
    """Maps commits to a release type.

    Exactly one of ``prefixes`` or ``keywords`` should be non-empty.
    """

    group: str
    release_type: ReleaseType
    prefixes: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    @cached_property
    def subject_pattern(self) -> re.Pattern[str] | None:
        if not self.prefixes:
            return None
        alternatives = "|".join(re.escape(p) for p in self.prefixes)
        return re.compile(rf"^({alternatives})(\(\w+\))?:\s.+$")

    @cached_property
    def body_pattern(self) -> re.Pattern[str] | None:
        if not self.keywords:
            return None
        # Longest first so "BREAKING CHANGES" is not cut short by "BREAKING CHANGE"
        ordered = sorted(self.keywords, key=len, reverse=True)
        alternatives = "|".join(re.escape(k) for k in ordered)
        return re.compile(rf"({alternatives}):\s(.+)")

    def match(self, commit: CommitRecord) -> str | None:
        """Return the matched change text, or None if the rule does not apply."""
        if self.subject_pattern is not None:
            subject_match = self.subject_pattern.match(commit.subject)
            if subject_match:
                return subject_match.group(0)
        if self.body_pattern is not None:
            body_match = self.body_pattern.search(commit.body)
            if body_match:
                return body_match.group(2)
        return None


@dataclass(frozen=True)
class SemanticChange:
    """A release-relevant fact derived from one commit and one rule."""

    group: str
    release_type: ReleaseType
    matched_text: str
    subject: str
    body: str = field(repr=False)
    short_hash: str
    full_hash: str


DEFAULT_RULES: tuple[SemanticRule, ...] = (
    SemanticRule(group="Features", release_type=ReleaseType.MINOR, prefixes=("feat",)),
    SemanticRule(
        group="Fixes & improvements",
        release_type=ReleaseType.PATCH,
        prefixes=("fix", "perf", "refactor", "docs"),
    ),
    SemanticRule(
        group="BREAKING CHANGES",
        release_type=ReleaseType.MAJOR,
        keywords=("BREAKING CHANGE", "BREAKING CHANGES"),
    ),
)


def parse_commit_log(raw: str) -> list[CommitRecord]:
    """Parse git log output produced with GIT_LOG_FORMAT.

    Args:
        raw: Output of ``git log --format=<GIT_LOG_FORMAT>``

    Returns:
        Commits in log order (most recent first); empty for an empty range

    Raises:
        CommitParseError: If an entry does not have exactly four fields
    """
    commits = []
    for entry in raw.split(RECORD_SEPARATOR):
        if not entry.strip():
            continue
        fields = entry.split(FIELD_SEPARATOR)
        if len(fields) != _FIELD_COUNT:
            raise CommitParseError(
                f"Expected {_FIELD_COUNT} fields in git log entry, got {len(fields)}: {entry!r}",
                raw=entry,
            )
        subject, body, short_hash, full_hash = (f.strip() for f in fields)
        commits.append(
            CommitRecord(
                subject=subject,
                body=body,
                short_hash=short_hash,
                full_hash=full_hash,
            )
        )
    return commits


def classify_commits(
    commits: Iterable[CommitRecord],
    rules: Sequence[SemanticRule],
) -> list[SemanticChange]:
    """Apply every rule to every commit.

    A commit may produce several changes (one per matching rule) or none.

    Returns:
        Changes in commit order, then rule order
    """
    changes = []
    for commit in commits:
        for rule in rules:
            matched = rule.match(commit)
            if matched:
                changes.append(
                    SemanticChange(
                        group=rule.group,
                        release_type=rule.release_type,
                        matched_text=matched,
                        subject=commit.subject,
                        body=commit.body,
                        short_hash=commit.short_hash,
                        full_hash=commit.full_hash,
                    )
                )
    return changes


def group_changes(
    changes: Iterable[SemanticChange],
    rules: Sequence[SemanticRule],
) -> dict[str, list[SemanticChange]]:
    """Group changes by rule group, in rule-definition order.

    Groups without changes are omitted. Groups not named by any rule are
    appended after the known ones, in order of first appearance.
    """
    grouped: dict[str, list[SemanticChange]] = {rule.group: [] for rule in rules}
    for change in changes:
        grouped.setdefault(change.group, []).append(change)
    return {group: items for group, items in grouped.items() if items}
