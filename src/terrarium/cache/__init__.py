"""Persistent dependency cache (package.json + node_modules)."""

from __future__ import annotations

from .store import CacheStore

__all__ = [
    "CacheStore",
]
