"""Merge ``--values`` files and ``--set`` overrides into one values mapping."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def deep_merge(base: dict, override: dict) -> dict:
    """Return a new dict with ``override`` merged into ``base`` recursively."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def parse_set(expr: str) -> dict[str, Any]:
    """Turn ``a.b.c=value`` into ``{"a": {"b": {"c": value}}}``.

    The value is read as YAML, so ``2`` becomes an int and ``true`` a bool.
    """
    key, sep, raw = expr.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"key has no value: {expr}")
    value = yaml.safe_load(raw) if raw else ""
    out: dict[str, Any] = {}
    node = out
    parts = key.split(".")
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value
    return out


def load_values(files: list[Path] | None = None, sets: list[str] | None = None) -> dict[str, Any]:
    """Values files first (in order), then ``--set`` expressions on top."""
    merged: dict[str, Any] = {}
    for path in files or []:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"values file {path} is not a mapping")
        merged = deep_merge(merged, data)
    for expr in sets or []:
        merged = deep_merge(merged, parse_set(expr))
    return merged
