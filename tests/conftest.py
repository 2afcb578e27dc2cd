"""Shared fixtures for monorelease tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest

from monorelease.core.commits import FIELD_SEPARATOR, RECORD_SEPARATOR, CommitRecord
from monorelease.vcs.git import RepositoryIdentity

RELEASE_DATE = date(2024, 5, 17)


def make_log(*entries: tuple[str, str, str, str]) -> str:
    """Build git log output as produced with GIT_LOG_FORMAT."""
    return "".join(
        RECORD_SEPARATOR + FIELD_SEPARATOR.join(fields) + "\n" for fields in entries
    )


def write_manifest(root: Path, directory: str, **fields: object) -> Path:
    package_dir = root / "packages" / directory
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "index.js").write_text("module.exports = {}\n")
    manifest = package_dir / "package.json"
    manifest.write_text(json.dumps(fields, indent=2) + "\n")
    return manifest


@dataclass
class FakeGit:
    """In-memory stand-in for GitRepository."""

    tags: list[str] = field(default_factory=list)
    # Raw log per revision range
    logs: dict[str, str] = field(default_factory=dict)
    # Raw log per (revision range, path) when commits are filtered by path
    path_logs: dict[tuple[str, str], str] = field(default_factory=dict)
    changed_paths: set[str] = field(default_factory=set)
    fail_on: set[str] = field(default_factory=set)
    created_tags: list[str] = field(default_factory=list)
    pushed_tags: list[str] = field(default_factory=list)
    log_calls: list[tuple[str, Path | None]] = field(default_factory=list)

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            from monorelease.exceptions import GitError

            raise GitError(f"git {operation} failed", stderr="fatal: simulated")

    def list_tags(self) -> list[str]:
        return list(self.tags)

    def rev_parse(self, ref: str) -> str:
        return f"sha-{ref}"

    def commits_in_range(self, rev_range: str, path: Path | None = None) -> str:
        self.log_calls.append((rev_range, path))
        if path is not None:
            return self.path_logs.get((rev_range, str(path)), "")
        return self.logs.get(rev_range, "")

    def has_changed_since(self, path: Path, ref: str | None) -> bool:
        if ref is None:
            return True
        return str(path) in self.changed_paths

    def create_tag(self, name: str, message: str | None = None) -> None:
        self._maybe_fail("tag")
        self.created_tags.append(name)

    def push_tag(self, name: str) -> None:
        self._maybe_fail("push")
        self.pushed_tags.append(name)


@dataclass
class FakeHost:
    releases: list[tuple[str, str]] = field(default_factory=list)

    def create_release(self, tag_name: str, notes: str, identity: RepositoryIdentity) -> dict:
        self.releases.append((tag_name, notes))
        return {"tag_name": tag_name}


@dataclass
class FakeRegistry:
    published: list[Path] = field(default_factory=list)

    def publish(self, directory: Path) -> None:
        self.published.append(directory)


@pytest.fixture
def identity() -> RepositoryIdentity:
    return RepositoryIdentity(host="github.com", name="acme/tools")


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """A repository root with an empty packages directory."""
    (tmp_path / "packages").mkdir()
    return tmp_path


@pytest.fixture
def feat_commit() -> CommitRecord:
    return CommitRecord(
        subject="feat: add user authentication",
        body="",
        short_hash="feat123",
        full_hash="feat1234567890feat1234567890feat12345678",
    )


@pytest.fixture
def fix_commit() -> CommitRecord:
    return CommitRecord(
        subject="fix(core): handle empty config",
        body="",
        short_hash="fix4567",
        full_hash="fix45678901234fix45678901234fix456789012",
    )


@pytest.fixture
def breaking_commit() -> CommitRecord:
    return CommitRecord(
        subject="refactor!: drop legacy loader",
        body="BREAKING CHANGE: the legacy loader is gone",
        short_hash="brk7890",
        full_hash="brk78901234567brk78901234567brk789012345",
    )


@pytest.fixture
def chore_commit() -> CommitRecord:
    return CommitRecord(
        subject="chore: bump dev dependencies",
        body="",
        short_hash="cho0001",
        full_hash="cho00012345678cho00012345678cho000123456",
    )


@pytest.fixture
def sample_commits(
    feat_commit: CommitRecord,
    fix_commit: CommitRecord,
    breaking_commit: CommitRecord,
    chore_commit: CommitRecord,
) -> list[CommitRecord]:
    return [feat_commit, fix_commit, breaking_commit, chore_commit]
