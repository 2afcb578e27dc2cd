"""Version control integration."""

from __future__ import annotations

from monorelease.vcs.git import GitRepository, RepositoryIdentity

__all__ = ["GitRepository", "RepositoryIdentity"]
