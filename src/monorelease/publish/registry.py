"""Publishing packages to a registry with the package manager CLI."""

from __future__ import annotations

import logging
import subprocess
from typing import TYPE_CHECKING

from monorelease.exceptions import PublishError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_TOOLS = frozenset({"npm", "pnpm", "yarn"})


class RegistryPublisher:
    """Runs ``<tool> publish`` inside a package directory."""

    def __init__(
        self,
        tool: str = "npm",
        args: Sequence[str] = (),
        timeout: float = 300.0,
    ) -> None:
        if tool not in SUPPORTED_TOOLS:
            raise PublishError(
                f"Unsupported publish tool {tool!r}; expected one of {sorted(SUPPORTED_TOOLS)}"
            )
        self.tool = tool
        self.args = list(args)
        self.timeout = timeout

    def build_command(self) -> list[str]:
        cmd = [self.tool, "publish", *self.args]
        if self.tool == "pnpm":
            # pnpm refuses to publish from a dirty tree, and the manifest was just bumped
            cmd.append("--no-git-checks")
        return cmd

    def publish(self, directory: Path) -> None:
        """Publish the package in ``directory``.

        Raises:
            PublishError: If the tool is missing, times out or fails
        """
        cmd = self.build_command()
        logger.info("Publishing %s with %s", directory.name, " ".join(cmd))
        try:
            subprocess.run(
                cmd,
                cwd=directory,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise PublishError(f"{self.tool} not found") from e
        except subprocess.TimeoutExpired as e:
            raise PublishError(f"{self.tool} publish timed out after {self.timeout:g}s") from e
        except subprocess.CalledProcessError as e:
            raise PublishError(
                f"{self.tool} publish failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
