"""Count resources in a release's multi-document YAML manifest."""

from __future__ import annotations

import yaml


def resource_counts(manifest: str) -> dict[str, int]:
    """Count resources by kind; empty or non-mapping documents are skipped."""
    counts: dict[str, int] = {}
    if not manifest:
        return counts
    for doc in yaml.safe_load_all(manifest):
        if not isinstance(doc, dict):
            continue
        kind = doc.get("kind") or "Unknown"
        counts[kind] = counts.get(kind, 0) + 1
    return counts
