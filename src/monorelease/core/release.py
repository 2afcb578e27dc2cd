"""Release orchestration for all packages in a monorepo.

Each package directory under the packages root goes through the same
pipeline, one package at a time:

    manifest -> prior tag -> commit log -> semantic changes -> severity
    -> change-presence gate -> next version + notes -> manifest bump
    -> tag -> hosted release -> registry publish

A failure in one package is recorded on its ReleaseDecision and never
stops the remaining packages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from monorelease.config.models import CommitAttribution
from monorelease.core.commits import classify_commits, parse_commit_log
from monorelease.core.notes import generate_release_notes
from monorelease.core.version import (
    ReleaseType,
    is_release_tag,
    resolve_next_version,
    resolve_severity,
)
from monorelease.exceptions import ConfigurationError, MonoreleaseError
from monorelease.project.manifest import read_manifest, update_manifest_version

if TYPE_CHECKING:
    from collections.abc import Iterable

    from monorelease.config.models import MonoreleaseConfig
    from monorelease.vcs.git import RepositoryIdentity

logger = logging.getLogger(__name__)


# =============================================================================
# Collaborators
# =============================================================================


class VersionControl(Protocol):
    def list_tags(self) -> list[str]: ...

    def rev_parse(self, ref: str) -> str: ...

    def commits_in_range(self, rev_range: str, path: Path | None = None) -> str: ...

    def has_changed_since(self, path: Path, ref: str | None) -> bool: ...

    def create_tag(self, name: str, message: str | None = None) -> None: ...

    def push_tag(self, name: str) -> None: ...


class ReleaseHost(Protocol):
    def create_release(
        self, tag_name: str, notes: str, identity: RepositoryIdentity
    ) -> object: ...


class Registry(Protocol):
    def publish(self, directory: Path) -> None: ...


# =============================================================================
# Data model
# =============================================================================


class PackageState(str, Enum):
    """Terminal state of one package's release pipeline."""

    SKIPPED_PRIVATE = "skipped-private"
    NO_SEMANTIC_CHANGE = "no-semantic-change"
    NO_FILE_CHANGE = "no-file-change"
    PLANNED = "planned"
    RELEASED = "released"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass
class Package:
    """A publishable package discovered in the packages directory."""

    name: str
    directory: Path
    manifest_path: Path
    is_private: bool = False
    current_version: str | None = None
    last_release_tag: str | None = None
    next_version: str | None = None


@dataclass
class ReleaseDecision:
    """Outcome of one package's pipeline."""

    package: Package
    state: PackageState
    severity: ReleaseType | None = None
    next_version: str | None = None
    tag: str | None = None
    notes: str | None = None
    error: str | None = None

    @property
    def is_release(self) -> bool:
        return self.state in (PackageState.RELEASED, PackageState.PLANNED)


# =============================================================================
# Discovery
# =============================================================================


def discover_manifests(packages_root: Path, manifest_name: str = "package.json") -> list[Path]:
    """Manifests of the top-level package directories, sorted by directory name.

    Raises:
        ConfigurationError: If the packages directory does not exist
    """
    if not packages_root.is_dir():
        raise ConfigurationError(f"Packages directory not found: {packages_root}")
    return [
        child / manifest_name
        for child in sorted(packages_root.iterdir(), key=lambda p: p.name)
        if child.is_dir() and (child / manifest_name).is_file()
    ]


def load_package(manifest_path: Path) -> Package:
    manifest = read_manifest(manifest_path)
    return Package(
        name=manifest.name,
        directory=manifest_path.parent,
        manifest_path=manifest_path,
        is_private=manifest.private,
        current_version=manifest.version,
    )


def find_latest_tag(tags: Iterable[str], prefix: str) -> str | None:
    """First release tag of the package owning ``prefix``.

    ``tags`` must be sorted newest first. Tags whose suffix is not a semantic
    version belong to another package and are skipped.
    """
    return next((tag for tag in tags if is_release_tag(tag, prefix)), None)


# =============================================================================
# Orchestrator
# =============================================================================


class ReleaseOrchestrator:
    """Runs the release pipeline for every package in a repository."""

    def __init__(
        self,
        repo_root: Path,
        config: MonoreleaseConfig,
        git: VersionControl,
        identity: RepositoryIdentity,
        host: ReleaseHost | None = None,
        registry: Registry | None = None,
        *,
        dry_run: bool = False,
        release_date: date | None = None,
    ) -> None:
        if not dry_run and host is None:
            raise ConfigurationError("A release host is required unless running dry")
        self.repo_root = repo_root
        self.config = config
        self.git = git
        self.identity = identity
        self.host = host
        self.registry = registry
        self.dry_run = dry_run
        self.release_date = release_date or datetime.now(UTC).date()
        self.rules = config.commits.semantic_rules

    @property
    def packages_root(self) -> Path:
        return self.repo_root / self.config.packages_dir

    def run(self) -> list[ReleaseDecision]:
        """Process every package in discovery order.

        Raises:
            ConfigurationError: If the packages directory does not exist
        """
        manifests = discover_manifests(self.packages_root, self.config.manifest_name)
        logger.info("Found %d package(s) in %s", len(manifests), self.packages_root)
        return [self.process(manifest_path) for manifest_path in manifests]

    def process(self, manifest_path: Path) -> ReleaseDecision:
        """Run the pipeline for a single package; never raises MonoreleaseError."""
        try:
            package = load_package(manifest_path)
        except MonoreleaseError as e:
            logger.error("Cannot load package in %s: %s", manifest_path.parent, e)
            package = Package(
                name=manifest_path.parent.name,
                directory=manifest_path.parent,
                manifest_path=manifest_path,
            )
            return ReleaseDecision(package=package, state=PackageState.FAILED, error=str(e))

        if package.is_private:
            logger.info("%s: private, skipping", package.name)
            return ReleaseDecision(package=package, state=PackageState.SKIPPED_PRIVATE)

        try:
            return self._release(package)
        except MonoreleaseError as e:
            logger.error("%s: release failed: %s", package.name, e)
            return ReleaseDecision(
                package=package,
                state=PackageState.FAILED,
                next_version=package.next_version,
                error=str(e),
            )

    def _relative(self, path: Path) -> Path:
        try:
            return path.relative_to(self.repo_root)
        except ValueError:
            return path

    def _release(self, package: Package) -> ReleaseDecision:
        prefix = self.config.version.tag_prefix(package.name)
        package_path = self._relative(package.directory)

        prior_tag = find_latest_tag(self.git.list_tags(), prefix)
        package.last_release_tag = prior_tag
        rev_range = f"{self.git.rev_parse(prior_tag)}..HEAD" if prior_tag else "HEAD"
        logger.debug("%s: analysing %s (last tag %s)", package.name, rev_range, prior_tag)

        by_package = self.config.commits.attribution is CommitAttribution.PACKAGE
        log_path = package_path if by_package else None
        commits = parse_commit_log(self.git.commits_in_range(rev_range, log_path))
        changes = classify_commits(commits, self.rules)
        severity = resolve_severity(changes)
        if severity is None:
            logger.info("%s: no semantic changes, no release", package.name)
            return ReleaseDecision(package=package, state=PackageState.NO_SEMANTIC_CHANGE)

        if not self.git.has_changed_since(package_path, prior_tag):
            logger.info("%s: no files changed since %s, no release", package.name, prior_tag)
            return ReleaseDecision(
                package=package,
                state=PackageState.NO_FILE_CHANGE,
                severity=severity,
            )

        next_version = resolve_next_version(
            prior_tag,
            severity,
            prefix,
            initial_version=self.config.version.initial_version,
        )
        package.next_version = next_version
        next_tag = f"{prefix}{next_version}"
        notes = generate_release_notes(
            next_version,
            self.identity.public_url,
            prior_tag,
            next_tag,
            changes,
            release_date=self.release_date,
            rules=self.rules,
        )
        logger.info("%s: %s release %s -> %s", package.name, severity, prior_tag, next_version)

        decision = ReleaseDecision(
            package=package,
            state=PackageState.PLANNED,
            severity=severity,
            next_version=next_version,
            tag=next_tag,
            notes=notes,
        )
        if self.dry_run:
            return decision

        self._publish(package, next_version, next_tag, notes)
        decision.state = PackageState.RELEASED
        return decision

    def _publish(self, package: Package, version: str, tag: str, notes: str) -> None:
        if self.host is None:
            raise ConfigurationError("No release host configured")
        update_manifest_version(package.manifest_path, version)
        self.git.create_tag(tag)
        self.git.push_tag(tag)
        self.host.create_release(tag, notes, self.identity)
        if self.registry is not None:
            self.registry.publish(package.directory)
        else:
            logger.info("%s: publishing disabled", package.name)
