"""Core business logic for monorelease.

This module contains the fundamental building blocks:
- Commit log parsing and semantic classification
- Release severity resolution and semantic version bumping
- Release notes generation
- Per-package release orchestration
"""

from __future__ import annotations

from monorelease.core.commits import (
    DEFAULT_RULES,
    CommitRecord,
    SemanticChange,
    SemanticRule,
    classify_commits,
    group_changes,
    parse_commit_log,
)
from monorelease.core.notes import generate_release_notes
from monorelease.core.version import (
    ReleaseType,
    Version,
    is_release_tag,
    parse_tag_version,
    resolve_next_version,
    resolve_severity,
)

__all__ = [
    # Commits
    "DEFAULT_RULES",
    "CommitRecord",
    "SemanticChange",
    "SemanticRule",
    "classify_commits",
    "group_changes",
    "parse_commit_log",
    # Version
    "ReleaseType",
    "Version",
    "is_release_tag",
    "parse_tag_version",
    "resolve_next_version",
    "resolve_severity",
    # Notes
    "generate_release_notes",
]
