"""Load charts from directories or packaged ``.tgz`` archives."""

from __future__ import annotations

import io
import logging
import posixpath
import tarfile
from abc import ABC, abstractmethod
from pathlib import Path

import yaml

from helm_steward.core.errors import ChartLoadError
from helm_steward.models.chart import Chart, ChartDependency, ChartFile, ChartMetadata

logger = logging.getLogger(__name__)

CHART_FILE = "Chart.yaml"
VALUES_FILE = "values.yaml"
REQUIREMENTS_FILE = "requirements.yaml"
LOCK_FILES = ("Chart.lock", "requirements.lock")


class ChartLoader(ABC):
    @abstractmethod
    def load(self, path: Path) -> Chart:
        """Load the chart at ``path``.

        Raises:
            ChartLoadError: annotated with ``path`` on any failure
        """
        ...


class FileChartLoader(ChartLoader):
    """Loads a chart directory or a gzipped tar archive."""

    def load(self, path: Path) -> Chart:
        path = Path(path)
        try:
            if path.is_dir():
                files = _read_directory(path)
            elif path.is_file():
                files = _read_archive(path.read_bytes())
            else:
                raise ChartLoadError(f"can't load chart `{path}`: no such file or directory", path=path)
            chart = load_files(files)
        except ChartLoadError as err:
            if err.path is None:
                err.path = path
            raise
        except (OSError, tarfile.TarError, yaml.YAMLError, ValueError) as err:
            raise ChartLoadError(f"can't load chart `{path}`: {err}", path=path) from err
        chart.path = path
        logger.debug("Loaded chart %s-%s from %s", chart.name, chart.version, path)
        return chart


def _read_directory(root: Path) -> dict[str, bytes]:
    files: dict[str, bytes] = {}
    for item in sorted(root.rglob("*")):
        if not item.is_file():
            continue
        rel = item.relative_to(root).as_posix()
        if any(part.startswith(".") for part in rel.split("/")):
            continue
        files[rel] = item.read_bytes()
    return files


def _read_archive(data: bytes) -> dict[str, bytes]:
    """Read archive members, dropping the top-level chart directory."""
    files: dict[str, bytes] = {}
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tar:
        for member in tar.getmembers():
            if not member.isfile():
                continue
            name = posixpath.normpath(member.name)
            parts = name.split("/")
            if name.startswith("/") or ".." in parts:
                raise ChartLoadError(f"chart illegally references parent directory: {member.name}")
            if len(parts) < 2:
                continue
            extracted = tar.extractfile(member)
            if extracted is None:
                continue
            files["/".join(parts[1:])] = extracted.read()
    return files


def load_files(files: dict[str, bytes]) -> Chart:
    """Build a chart (and its subcharts) from a relative-path -> content map."""
    if CHART_FILE not in files:
        raise ChartLoadError(f"{CHART_FILE} file is missing")

    raw_meta = yaml.safe_load(files[CHART_FILE]) or {}
    if not isinstance(raw_meta, dict):
        raise ChartLoadError(f"{CHART_FILE} is not a mapping")
    metadata = ChartMetadata.from_dict(raw_meta)
    if not metadata.name:
        raise ChartLoadError("chart metadata (Chart.yaml) is missing the name field")
    if not metadata.api_version:
        metadata.api_version = "v1"

    if metadata.api_version == "v1" and REQUIREMENTS_FILE in files:
        reqs = yaml.safe_load(files[REQUIREMENTS_FILE]) or {}
        if not isinstance(reqs, dict):
            raise ChartLoadError(f"{REQUIREMENTS_FILE} is not a mapping")
        metadata.dependencies = [ChartDependency.from_dict(d) for d in reqs.get("dependencies") or []]

    chart = Chart(metadata=metadata)

    if VALUES_FILE in files:
        values = yaml.safe_load(files[VALUES_FILE]) or {}
        if not isinstance(values, dict):
            raise ChartLoadError(f"{VALUES_FILE} is not a mapping")
        chart.values = values

    for lock_name in LOCK_FILES:
        if lock_name in files:
            chart.lock = yaml.safe_load(files[lock_name]) or {}
            break

    subchart_files: dict[str, dict[str, bytes]] = {}
    for name, data in files.items():
        if name in (CHART_FILE, VALUES_FILE, REQUIREMENTS_FILE) or name in LOCK_FILES:
            continue
        if name.startswith("templates/"):
            chart.templates.append(ChartFile(name, data))
        elif name.startswith("charts/"):
            rest = name[len("charts/"):]
            if "/" in rest:
                sub, sub_path = rest.split("/", 1)
                subchart_files.setdefault(sub, {})[sub_path] = data
            elif rest.endswith((".tgz", ".tar.gz")):
                chart.dependencies.append(load_files(_read_archive(data)))
            # anything else directly under charts/ (e.g. .prov files) is ignored
        else:
            chart.files.append(ChartFile(name, data))

    for sub, sub_files in sorted(subchart_files.items()):
        if CHART_FILE not in sub_files:
            logger.debug("Ignoring charts/%s: no %s", sub, CHART_FILE)
            continue
        chart.dependencies.append(load_files(sub_files))

    return chart


def save_archive(chart_dir: Path, dest_dir: Path) -> Path:
    """Package a chart directory into ``<name>-<version>.tgz`` under dest_dir."""
    meta = ChartMetadata.from_dict(yaml.safe_load((chart_dir / CHART_FILE).read_text(encoding="utf-8")) or {})
    if not meta.name or not meta.version:
        raise ChartLoadError(f"chart at {chart_dir} needs a name and version to be packaged", path=chart_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    target = dest_dir / f"{meta.name}-{meta.version}.tgz"
    with tarfile.open(target, "w:gz") as tar:
        for rel, data in _read_directory(chart_dir).items():
            info = tarfile.TarInfo(name=f"{meta.name}/{rel}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return target
