"""package.json reading and version manipulation.

Manifests are rewritten with two-space indentation and a trailing newline,
the layout npm itself produces. Key order is preserved.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from monorelease.exceptions import ManifestError

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True)
class Manifest:
    """The fields of a package manifest that releases care about."""

    path: Path
    name: str
    version: str | None
    private: bool


def load_manifest_data(path: Path) -> dict[str, Any]:
    """Read a manifest as a JSON object.

    Raises:
        ManifestError: If the file is missing, not JSON, or not an object
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must contain a JSON object")
    return data


def read_manifest(path: Path) -> Manifest:
    """Read name, version and private flag from a manifest.

    Raises:
        ManifestError: If the manifest is unreadable or has no name
    """
    data = load_manifest_data(path)

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ManifestError(f"Manifest {path} has no 'name'")

    version = data.get("version")
    return Manifest(
        path=path,
        name=name,
        version=version if isinstance(version, str) else None,
        private=data.get("private") is True,
    )


def update_manifest_version(path: Path, new_version: str) -> Path:
    """Overwrite the ``version`` field of a manifest in place.

    Returns:
        Path to the updated manifest

    Raises:
        ManifestError: If the manifest cannot be read or written
    """
    data = load_manifest_data(path)
    data["version"] = new_version

    try:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot write manifest {path}: {e}") from e
    return path
