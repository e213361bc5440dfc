"""Download declared dependencies into a chart's ``charts/`` directory."""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import yaml

from helm_steward.core.chart_loader import ChartLoader, FileChartLoader, save_archive
from helm_steward.core.downloader import resolve_chart_url, write_archive
from helm_steward.core.errors import DependencyError, HelmStewardError
from helm_steward.core.repository import RepositoryIndexStore
from helm_steward.models.chart import Chart, ChartDependency
from helm_steward.models.repo import RepositoryEntry, RepositoryFile
from helm_steward.utils.version_compare import parse_version

logger = logging.getLogger(__name__)


class DependencyManager(ABC):
    @abstractmethod
    def update(self, chart: Chart, chart_dir: Path) -> None:
        """Make every declared dependency of ``chart`` physically present under ``chart_dir``."""
        ...


@dataclass
class _Resolved:
    dep: ChartDependency
    version: str
    repository: str
    entry: RepositoryEntry | None = None
    url: str = ""
    digest: str = ""
    local_path: Path | None = None


def _is_http(repository: str) -> bool:
    return repository.startswith(("http://", "https://"))


def _repo_alias(repository: str) -> str | None:
    if repository.startswith("@"):
        return repository[1:]
    if repository.startswith("alias:"):
        return repository[len("alias:"):]
    return None


def _archive_belongs_to(path: Path, dep_name: str) -> bool:
    """True for ``<dep_name>-<semver>.tgz`` (not ``<dep_name>-other-1.0.0.tgz``)."""
    if path.suffix != ".tgz" or not path.name.startswith(dep_name + "-"):
        return False
    return parse_version(path.name[len(dep_name) + 1:-len(".tgz")]) is not None


def requirements_digest(declared: list[ChartDependency], resolved: list[dict]) -> str:
    payload = json.dumps(
        {"declared": [d.to_dict() for d in declared], "resolved": resolved},
        sort_keys=True,
    )
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


class RepoDependencyManager(DependencyManager):
    """Resolves dependencies against configured repositories and ``file://`` paths.

    Unless ``skip_update`` is set the indexes of every referenced repository
    are refreshed before versions are resolved.
    """

    def __init__(
        self,
        repositories: RepositoryIndexStore,
        loader: ChartLoader | None = None,
        skip_update: bool = False,
    ):
        self.repositories = repositories
        self.loader = loader or FileChartLoader()
        self.skip_update = skip_update

    def update(self, chart: Chart, chart_dir: Path) -> None:
        chart_dir = Path(chart_dir)
        if not chart_dir.is_dir():
            raise DependencyError(
                f"can't update dependencies of packaged chart {chart_dir}; a chart directory is required",
                chart=chart.name,
                path=chart_dir,
            )
        deps = [d for d in chart.metadata.dependencies if d.enabled]
        if not deps:
            return

        try:
            repo_file = self.repositories.load_file()
            remote = [d for d in deps if d.repository and not d.repository.startswith("file://")]
            entries = {d.alias or d.name: self._entry_for(d, repo_file) for d in remote}

            if not self.skip_update and entries:
                names = sorted({e.name for e in entries.values()})
                logger.info("Refreshing repository indexes: %s", ", ".join(names))
                self.repositories.update_repositories(names)

            resolved = [self._resolve(d, chart_dir, entries.get(d.alias or d.name)) for d in deps if d.repository]
            self._download(resolved, chart_dir)
            self._write_lock(chart, chart_dir, deps, resolved)
        except DependencyError:
            raise
        except (HelmStewardError, OSError, ValueError, yaml.YAMLError) as err:
            raise DependencyError(str(err), chart=chart.name, path=chart_dir) from err

    def _entry_for(self, dep: ChartDependency, repo_file: RepositoryFile) -> RepositoryEntry:
        alias = _repo_alias(dep.repository)
        if alias is not None:
            entry = repo_file.get(alias)
        elif _is_http(dep.repository):
            entry = repo_file.find_by_url(dep.repository)
        else:
            raise DependencyError(f"unsupported repository {dep.repository!r} for dependency {dep.name!r}")
        if entry is None:
            raise DependencyError(
                f"no repository definition for {dep.repository}; add it with `hsw repo add`",
            )
        return entry

    def _resolve(self, dep: ChartDependency, chart_dir: Path, entry: RepositoryEntry | None) -> _Resolved:
        if dep.repository.startswith("file://"):
            local = (chart_dir / dep.repository[len("file://"):]).resolve()
            sub = self.loader.load(local)
            if sub.name != dep.name:
                raise DependencyError(f"chart at {local} is named {sub.name!r}, expected {dep.name!r}")
            return _Resolved(dep=dep, version=sub.version, repository=dep.repository, local_path=local)

        if entry is None:
            raise DependencyError(f"no repository resolved for dependency {dep.name!r}")
        index = self.repositories.load_index(entry.name)
        found = index.get(dep.name, dep.version)
        if found is None:
            raise DependencyError(
                f"can't get a valid version for dependency {dep.name} {dep.version!r} from {entry.name}",
            )
        if not found.urls:
            raise DependencyError(f"dependency {dep.name}-{found.version} has no downloadable URLs")
        return _Resolved(
            dep=dep,
            version=found.version,
            repository=dep.repository,
            entry=entry,
            url=resolve_chart_url(entry.url, found.urls[0]),
            digest=found.digest,
        )

    def _download(self, resolved: list[_Resolved], chart_dir: Path) -> None:
        charts_dir = chart_dir / "charts"
        charts_dir.mkdir(exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="tmpcharts-", dir=str(chart_dir)) as staging:
            staged: list[tuple[_Resolved, Path]] = []
            for r in resolved:
                if r.local_path is not None:
                    path = save_archive(r.local_path, Path(staging))
                else:
                    data = self.repositories.getter.get(
                        r.url, self.repositories.options_for(r.entry), origin=r.entry.url,
                    )
                    path, _ = write_archive(data, r.url, Path(staging), r.digest)
                logger.info("Saved dependency %s-%s", r.dep.name, r.version)
                staged.append((r, path))

            # Every download succeeded; swap out stale archives
            names = {r.dep.name for r, _ in staged}
            for old in charts_dir.iterdir():
                if old.is_file() and any(_archive_belongs_to(old, name) for name in names):
                    old.unlink()
            for _, path in staged:
                shutil.move(str(path), str(charts_dir / path.name))

    def _write_lock(self, chart: Chart, chart_dir: Path, declared: list[ChartDependency], resolved: list[_Resolved]) -> None:
        entries = [{"name": r.dep.name, "repository": r.repository, "version": r.version} for r in resolved]
        lock = {
            "dependencies": entries,
            "digest": requirements_digest(declared, entries),
            "generated": datetime.now(timezone.utc).isoformat(),
        }
        lock_name = "requirements.lock" if chart.metadata.api_version == "v1" else "Chart.lock"
        (chart_dir / lock_name).write_text(yaml.safe_dump(lock, sort_keys=False), encoding="utf-8")
