"""Builders for charts, archives and repository indexes on disk."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from helm_steward.core.chart_loader import save_archive


def write_chart(
    root: Path,
    name: str,
    version: str = "0.1.0",
    *,
    chart_type: str | None = None,
    dependencies: list[dict[str, Any]] | None = None,
    templates: dict[str, str] | None = None,
    values: dict[str, Any] | None = None,
    api_version: str = "v2",
) -> Path:
    """Write a chart directory under ``root/name`` and return it."""
    chart_dir = root / name
    (chart_dir / "templates").mkdir(parents=True, exist_ok=True)
    meta: dict[str, Any] = {"apiVersion": api_version, "name": name, "version": version}
    if chart_type is not None:
        meta["type"] = chart_type
    if dependencies and api_version == "v2":
        meta["dependencies"] = dependencies
    (chart_dir / "Chart.yaml").write_text(yaml.safe_dump(meta), encoding="utf-8")
    if dependencies and api_version == "v1":
        (chart_dir / "requirements.yaml").write_text(
            yaml.safe_dump({"dependencies": dependencies}), encoding="utf-8",
        )
    (chart_dir / "values.yaml").write_text(yaml.safe_dump(values or {"replicaCount": 1}), encoding="utf-8")
    for tpl_name, body in (templates or {"configmap.yaml": f"kind: ConfigMap\nmetadata:\n  name: {name}\n"}).items():
        (chart_dir / "templates" / tpl_name).write_text(body, encoding="utf-8")
    return chart_dir


def chart_archive(root: Path, name: str, version: str = "0.1.0", **kwargs: Any) -> bytes:
    """Package a freshly written chart and return the archive bytes."""
    src = write_chart(root / "src" / f"{name}-{version}", name, version, **kwargs)
    return save_archive(src, root / "pkg").read_bytes()


def index_yaml(entries: dict[str, list[dict[str, Any]]]) -> bytes:
    doc: dict[str, Any] = {"apiVersion": "v1", "entries": {}}
    for chart_name, versions in entries.items():
        doc["entries"][chart_name] = [{"name": chart_name, **v} for v in versions]
    return yaml.safe_dump(doc).encode("utf-8")
