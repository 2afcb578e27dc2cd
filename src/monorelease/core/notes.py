"""Release notes generation.

Notes are rendered as Markdown: a heading linking the compare view between
the previous and the new tag, followed by one section per rule group.
Rendering is a pure function of its inputs so that dry runs can be diffed
against real runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from monorelease.core.commits import DEFAULT_RULES, group_changes

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date

    from monorelease.core.commits import SemanticChange, SemanticRule


def format_change(change: SemanticChange, repo_url: str) -> str:
    """Render one change as a bullet linking its commit."""
    commit_url = f"{repo_url}/commit/{change.full_hash}"
    return f"* {change.matched_text} ([{change.short_hash}]({commit_url}))"


def generate_release_notes(
    next_version: str,
    repo_url: str,
    prior_tag: str | None,
    next_tag: str,
    changes: Iterable[SemanticChange],
    release_date: date,
    rules: Sequence[SemanticRule] = DEFAULT_RULES,
) -> str:
    """Generate the release notes document for one package release.

    Args:
        next_version: Version being released
        repo_url: Public repository URL, e.g. ``https://github.com/owner/repo``
        prior_tag: Previous release tag, or None for a first release
        next_tag: Tag being created
        changes: Semantic changes included in the release
        release_date: Date printed in the heading
        rules: Rules defining the order of groups

    Returns:
        Markdown document ending with a newline
    """
    if prior_tag:
        diff_url = f"{repo_url}/compare/{prior_tag}...{next_tag}"
    else:
        diff_url = f"{repo_url}/releases/tag/{next_tag}"

    lines = [f"## [{next_version}]({diff_url}) ({release_date.isoformat()})"]

    for group, group_items in group_changes(changes, rules).items():
        lines.append("")
        lines.append(f"### {group}")
        lines.extend(format_change(change, repo_url) for change in group_items)

    return "\n".join(lines) + "\n"
