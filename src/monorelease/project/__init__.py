"""Package manifest handling."""

from __future__ import annotations

from monorelease.project.manifest import Manifest, read_manifest, update_manifest_version

__all__ = ["Manifest", "read_manifest", "update_manifest_version"]
