"""Configuration management for monorelease."""

from __future__ import annotations

from monorelease.config.loader import ReleaseEnvironment, load_config, load_environment
from monorelease.config.models import (
    CommitAttribution,
    CommitsConfig,
    GitConfig,
    GitHubConfig,
    MonoreleaseConfig,
    PublishConfig,
    SemanticRuleConfig,
    VersionConfig,
)

__all__ = [
    "CommitAttribution",
    "CommitsConfig",
    "GitConfig",
    "GitHubConfig",
    "MonoreleaseConfig",
    "PublishConfig",
    "ReleaseEnvironment",
    "SemanticRuleConfig",
    "VersionConfig",
    "load_config",
    "load_environment",
]
