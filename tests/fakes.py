"""In-memory fakes for the boundary interfaces.

Fakes record their calls so tests can assert on what was (or was not) done.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from helm_steward.core.action_config import ExecutionContext
from helm_steward.core.actions import ActionRunner
from helm_steward.core.chart_loader import save_archive
from helm_steward.core.dependency_manager import DependencyManager
from helm_steward.core.downloader import ChartDownloader, Verification
from helm_steward.core.errors import ActionError, ChartNotFoundError, DownloadError
from helm_steward.core.getter import Getter, GetterOptions
from helm_steward.models.chart import Chart
from helm_steward.models.release import HelmRelease, ReleaseInfo, ReleaseStatus


class FakeGetter(Getter):
    """Serves canned bodies by URL; unknown URLs fail like a 404."""

    def __init__(self, responses: dict[str, bytes] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.options: list[GetterOptions | None] = []

    def get(self, url: str, options: GetterOptions | None = None, *, origin: str = "") -> bytes:
        self.calls.append(url)
        self.options.append(options)
        if url not in self.responses:
            raise DownloadError(f"failed to fetch {url}: 404 Not Found")
        return self.responses[url]


class FakeChartDownloader(ChartDownloader):
    """Packages a prepared chart directory instead of downloading."""

    def __init__(self, charts: dict[tuple[str, str], Path] | None = None):
        self.charts = dict(charts or {})
        self.calls: list[tuple[str, str, Path]] = []

    def download_to(self, ref: str, version: str, dest: Path) -> tuple[Path, Verification | None]:
        self.calls.append((ref, version, dest))
        src = self.charts.get((ref, version))
        if src is None:
            raise ChartNotFoundError(f"chart {ref!r} version {version!r} not found", chart=ref, version=version)
        return save_archive(src, dest), None


class FakeDependencyManager(DependencyManager):
    """Packages prepared subchart directories into ``charts/`` on update."""

    def __init__(self, provides: dict[str, Path] | None = None, error: Exception | None = None):
        self.provides = dict(provides or {})
        self.error = error
        self.calls: list[tuple[str, Path]] = []

    def update(self, chart: Chart, chart_dir: Path) -> None:
        self.calls.append((chart.name, chart_dir))
        if self.error is not None:
            raise self.error
        for dep in chart.metadata.dependencies:
            src = self.provides.get(dep.name)
            if src is not None:
                save_archive(src, chart_dir / "charts")


def render_manifest(chart: Chart) -> str:
    """Concatenate templates of the chart and its subcharts, helm-style."""
    docs = []
    for c in [chart, *chart.dependencies]:
        for tpl in c.templates:
            docs.append(f"# Source: {c.name}/{tpl.name}\n{tpl.data.decode('utf-8')}")
    return "---\n".join(docs)


class FakeActionRunner(ActionRunner):
    """Release store kept in memory, keyed by (namespace, name)."""

    def __init__(self) -> None:
        self.releases: dict[tuple[str, str], list[HelmRelease]] = {}
        self.calls: list[tuple[str, str]] = []
        self.created_namespaces: list[str] = []
        self.error: Exception | None = None

    def _release(self, ctx: ExecutionContext, name: str, chart: Chart, values: dict[str, Any], revision: int) -> HelmRelease:
        return HelmRelease(
            name=name,
            namespace=ctx.namespace,
            version=revision,
            info=ReleaseInfo(status=ReleaseStatus.DEPLOYED, last_deployed="2026-10-18T12:00:00Z"),
            chart=chart.metadata,
            config=dict(values),
            manifest=render_manifest(chart),
        )

    def install(
        self,
        ctx: ExecutionContext,
        chart: Chart,
        release_name: str,
        values: dict[str, Any],
        create_namespace: bool = True,
    ) -> HelmRelease:
        self.calls.append(("install", release_name))
        if self.error is not None:
            raise self.error
        key = (ctx.namespace, release_name)
        if key in self.releases:
            raise ActionError("cannot re-use a name that is still in use")
        if create_namespace:
            self.created_namespaces.append(ctx.namespace)
        release = self._release(ctx, release_name, chart, values, 1)
        self.releases[key] = [release]
        return release

    def upgrade(
        self,
        ctx: ExecutionContext,
        release_name: str,
        chart: Chart,
        values: dict[str, Any],
    ) -> HelmRelease:
        self.calls.append(("upgrade", release_name))
        if self.error is not None:
            raise self.error
        history = self.releases.get((ctx.namespace, release_name))
        if not history:
            raise ActionError(f'"{release_name}" has no deployed releases')
        history[-1].info.status = ReleaseStatus.SUPERSEDED
        release = self._release(ctx, release_name, chart, values, history[-1].version + 1)
        history.append(release)
        return release

    def list(self, ctx: ExecutionContext) -> list[HelmRelease]:
        self.calls.append(("list", ctx.namespace))
        if self.error is not None:
            raise self.error
        return sorted(
            (h[-1] for (ns, _), h in self.releases.items() if ns == ctx.namespace),
            key=lambda r: r.name,
        )

    def uninstall(self, ctx: ExecutionContext, release_name: str) -> None:
        self.calls.append(("uninstall", release_name))
        if self.error is not None:
            raise self.error
        if self.releases.pop((ctx.namespace, release_name), None) is None:
            raise ActionError("uninstall: Release not loaded: not found")
