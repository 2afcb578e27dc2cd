"""Package registry integration."""

from __future__ import annotations

from monorelease.publish.registry import RegistryPublisher

__all__ = ["RegistryPublisher"]
