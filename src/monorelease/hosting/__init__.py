"""Release hosting integration."""

from __future__ import annotations

from monorelease.hosting.github import GitHubClient

__all__ = ["GitHubClient"]
