"""Git operations via subprocess.

Every git call goes through GitRepository._run with an explicit argument
list and a timeout. Failures surface as GitError.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from monorelease.core.commits import GIT_LOG_FORMAT
from monorelease.exceptions import GitError, ParseError

if TYPE_CHECKING:
    from monorelease.config.loader import ReleaseEnvironment

logger = logging.getLogger(__name__)

_SCP_LIKE_RE = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<name>.+)$")


@dataclass(frozen=True)
class RepositoryIdentity:
    """Hosting location of a repository, e.g. ``github.com`` + ``owner/repo``."""

    host: str
    name: str

    @property
    def public_url(self) -> str:
        return f"https://{self.host}/{self.name}"

    @property
    def owner(self) -> str:
        return self.name.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.name.rsplit("/", 1)[-1]

    @classmethod
    def from_remote_url(cls, url: str) -> RepositoryIdentity:
        """Parse a git remote URL.

        Supports ``git@host:owner/repo.git`` as well as http(s) and ssh URLs,
        with or without embedded credentials.

        Raises:
            ParseError: If the URL has no host or repository path
        """
        url = url.strip()
        if "://" in url:
            parts = urlsplit(url)
            host = parts.hostname or ""
            if parts.port and parts.scheme in ("http", "https"):
                host = f"{host}:{parts.port}"
            name = parts.path
        else:
            match = _SCP_LIKE_RE.match(url)
            if not match:
                raise ParseError(f"Unrecognized git remote URL: {url!r}")
            host, name = match.group("host"), match.group("name")

        name = name.strip("/").removesuffix(".git")
        if not host or "/" not in name:
            raise ParseError(f"Unrecognized git remote URL: {url!r}")
        return cls(host=host, name=name)


class GitRepository:
    """Wrapper around a git working tree."""

    def __init__(
        self,
        path: Path,
        *,
        timeout: float = 60.0,
        environment: ReleaseEnvironment | None = None,
        remote: str = "origin",
    ) -> None:
        """Open a repository.

        Args:
            path: Any directory inside the working tree
            timeout: Seconds allowed per git command
            environment: Committer identity used for tags
            remote: Remote to read the URL from and push tags to

        Raises:
            GitError: If ``path`` is not inside a git repository
        """
        self.timeout = timeout
        self.environment = environment
        self.remote = remote
        toplevel = self._run("rev-parse", "--show-toplevel", cwd=path.resolve()).stdout
        self.path = Path(toplevel.strip())

    def _env(self) -> dict[str, str] | None:
        if self.environment is None:
            return None
        env = dict(os.environ)
        env.update(
            {
                "GIT_COMMITTER_NAME": self.environment.committer_name,
                "GIT_COMMITTER_EMAIL": self.environment.committer_email,
                "GIT_AUTHOR_NAME": self.environment.committer_name,
                "GIT_AUTHOR_EMAIL": self.environment.committer_email,
            }
        )
        return env

    def _run(
        self,
        *args: str,
        check: bool = True,
        cwd: Path | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command in the repository.

        Raises:
            GitError: If git is missing, times out, or exits non-zero with check=True
        """
        cmd = ["git", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                cwd=cwd or self.path,
                capture_output=True,
                text=True,
                check=check,
                timeout=self.timeout,
                env=self._env(),
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.TimeoutExpired as e:
            raise GitError(f"git {args[0]} timed out after {self.timeout:g}s") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {args[0]} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e

    def list_tags(self) -> list[str]:
        """All tags, highest version first."""
        output = self._run("tag", "--list", "--sort=-v:refname").stdout
        return [line.strip() for line in output.splitlines() if line.strip()]

    def rev_parse(self, ref: str) -> str:
        """Commit hash that ``ref`` points at."""
        return self._run("rev-list", "-1", ref).stdout.strip()

    def commits_in_range(self, rev_range: str, path: Path | None = None) -> str:
        """Raw git log output for a revision range.

        Args:
            rev_range: e.g. ``abc123..HEAD`` or ``HEAD``
            path: Restrict to commits touching this path

        Returns:
            Log text in the format understood by parse_commit_log
        """
        args = ["log", f"--format={GIT_LOG_FORMAT}", rev_range]
        if path is not None:
            args.extend(["--", str(path)])
        return self._run(*args).stdout

    def has_changed_since(self, path: Path, ref: str | None) -> bool:
        """Whether any file under ``path`` differs between ``ref`` and the working tree.

        Untracked files that are not ignored count as changes. Without a
        reference every path counts as changed.
        """
        if ref is None:
            return True
        result = self._run("diff", "--quiet", ref, "--", str(path), check=False)
        if result.returncode == 0:
            untracked = self._run("ls-files", "--others", "--exclude-standard", "--", str(path))
            return bool(untracked.stdout.strip())
        if result.returncode == 1:
            return True
        raise GitError(
            f"git diff failed with exit code {result.returncode}",
            stderr=result.stderr,
        )

    def create_tag(self, name: str, message: str | None = None) -> None:
        """Create an annotated tag at HEAD."""
        self._run("tag", "--annotate", name, "--message", message or name)

    def push_tag(self, name: str) -> None:
        """Push a single tag to the configured remote."""
        self._run("push", self.remote, f"refs/tags/{name}")

    def get_remote_url(self) -> str:
        return self._run("remote", "get-url", self.remote).stdout.strip()

    def get_identity(self) -> RepositoryIdentity:
        """Hosting identity parsed from the remote URL."""
        return RepositoryIdentity.from_remote_url(self.get_remote_url())
