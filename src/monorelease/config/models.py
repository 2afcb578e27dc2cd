"""Configuration models for monorelease.

Configuration lives in ``monorelease.toml`` at the repository root. Every
field has a default, so a repository without the file releases with the
conventional-commit rules shown below.

Example:
    packages_dir = "packages"

    [commits]
    attribution = "package"

    [[commits.rules]]
    group = "Features"
    release_type = "minor"
    prefixes = ["feat"]

    [publish]
    tool = "pnpm"
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from monorelease.core.commits import SemanticRule
from monorelease.core.version import DEFAULT_INITIAL_VERSION, ReleaseType


class CommitAttribution(str, Enum):
    """Which commits count toward a package's release severity."""

    # Every commit in the range since the package's last tag
    RANGE = "range"
    # Only commits that touched the package's directory
    PACKAGE = "package"


class SemanticRuleConfig(BaseModel):
    """A commit classification rule."""

    model_config = ConfigDict(frozen=True)

    group: str = Field(description="Section title in the release notes")
    release_type: ReleaseType
    prefixes: list[str] = Field(default_factory=list, description="Subject prefixes")
    keywords: list[str] = Field(default_factory=list, description="Body keywords")

    @model_validator(mode="after")
    def _exactly_one_matcher(self) -> SemanticRuleConfig:
        if bool(self.prefixes) == bool(self.keywords):
            raise ValueError(
                f"Rule {self.group!r} must define either 'prefixes' or 'keywords', not both"
            )
        return self

    def to_rule(self) -> SemanticRule:
        return SemanticRule(
            group=self.group,
            release_type=self.release_type,
            prefixes=tuple(self.prefixes),
            keywords=tuple(self.keywords),
        )


def _default_rules() -> list[SemanticRuleConfig]:
    return [
        SemanticRuleConfig(group="Features", release_type=ReleaseType.MINOR, prefixes=["feat"]),
        SemanticRuleConfig(
            group="Fixes & improvements",
            release_type=ReleaseType.PATCH,
            prefixes=["fix", "perf", "refactor", "docs"],
        ),
        SemanticRuleConfig(
            group="BREAKING CHANGES",
            release_type=ReleaseType.MAJOR,
            keywords=["BREAKING CHANGE", "BREAKING CHANGES"],
        ),
    ]


class CommitsConfig(BaseModel):
    """Commit classification configuration."""

    rules: list[SemanticRuleConfig] = Field(default_factory=_default_rules, min_length=1)
    attribution: CommitAttribution = CommitAttribution.RANGE

    @property
    def semantic_rules(self) -> tuple[SemanticRule, ...]:
        """Rules in engine form, in definition order."""
        return tuple(rule.to_rule() for rule in self.rules)


class VersionConfig(BaseModel):
    """Versioning configuration."""

    initial_version: str = DEFAULT_INITIAL_VERSION
    tag_separator: str = "-v"

    def tag_prefix(self, package_name: str) -> str:
        return f"{package_name}{self.tag_separator}"


class GitConfig(BaseModel):
    """Git invocation configuration."""

    timeout: float = Field(default=60.0, gt=0, description="Seconds per git command")


class GitHubConfig(BaseModel):
    """GitHub release configuration."""

    api_url: str = "https://api.github.com"
    timeout: float = Field(default=30.0, gt=0)


class PublishConfig(BaseModel):
    """Registry publishing configuration."""

    enabled: bool = True
    tool: str = "npm"
    args: list[str] = Field(default_factory=lambda: ["--access", "public"])
    timeout: float = Field(default=300.0, gt=0)


class MonoreleaseConfig(BaseModel):
    """Root configuration."""

    packages_dir: Path = Path("packages")
    manifest_name: str = "package.json"
    remote: str = "origin"

    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
