"""Layering of config dicts: later sources override earlier ones."""

from __future__ import annotations

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated by ``override`` without mutating either.

    Nested dicts merge key by key. Lists replace wholesale, so a user file's
    ``watchers`` list supersedes the system one instead of extending it.
    A ``None`` in ``override`` leaves the base value alone.
    """
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Fold ``configs`` left to right with deep_merge()."""
    merged: dict[str, Any] = {}
    for config in configs:
        if config:
            merged = deep_merge(merged, config)
    return merged
