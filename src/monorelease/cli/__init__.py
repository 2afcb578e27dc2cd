"""Command line interface for monorelease."""

from __future__ import annotations

from monorelease.cli.main import app

__all__ = ["app"]
