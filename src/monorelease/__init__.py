"""monorelease: semantic releases for every package in a monorepo."""

from __future__ import annotations

__version__ = "0.1.0"
