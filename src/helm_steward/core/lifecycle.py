"""Install, upgrade, list and uninstall releases.

Each call is a single pass: build a fresh execution context, locate and load
the chart, gate on its type, make its dependencies present, reload it, then
hand it to the action runner. Nothing is retried and nothing is rolled back.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Callable

from helm_steward.config.settings import Settings, settings as default_settings
from helm_steward.core.action_config import ActionConfigFactory
from helm_steward.core.actions import ActionRunner, HelmActionRunner
from helm_steward.core.chart_loader import ChartLoader, FileChartLoader
from helm_steward.core.dependencies import DependencyResolver
from helm_steward.core.dependency_manager import RepoDependencyManager
from helm_steward.core.downloader import RepoChartDownloader
from helm_steward.core.errors import (
    InstallError,
    ListError,
    NotInstallableError,
    UninstallError,
    UpgradeError,
)
from helm_steward.core.locator import ChartLocator
from helm_steward.core.repository import RepositoryIndexStore
from helm_steward.models.chart import Chart
from helm_steward.models.release import HelmRelease

logger = logging.getLogger(__name__)

MAX_RELEASE_NAME_LENGTH = 53


def generate_release_name(chart_ref: str, now: float | None = None) -> str:
    """``<base>-<unix seconds>`` where base is the reference's last element up to its first dot."""
    base = os.path.basename(chart_ref.strip().rstrip("/"))
    if "." in base:
        base = base[: base.index(".")]
    if not base:
        base = "chart"
    stamp = int(time.time() if now is None else now)
    suffix = f"-{stamp}"
    return base[: MAX_RELEASE_NAME_LENGTH - len(suffix)] + suffix


class ReleaseLifecycleController:
    def __init__(
        self,
        config_factory: ActionConfigFactory,
        locator: ChartLocator,
        loader: ChartLoader,
        resolver: DependencyResolver,
        runner: ActionRunner,
        clock: Callable[[], float] = time.time,
    ):
        self.config_factory = config_factory
        self.locator = locator
        self.loader = loader
        self.resolver = resolver
        self.runner = runner
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ReleaseLifecycleController:
        """Wire the production implementations of every boundary."""
        settings = settings or default_settings
        repositories = RepositoryIndexStore.from_settings(settings)
        loader = FileChartLoader()
        return cls(
            config_factory=ActionConfigFactory(settings),
            locator=ChartLocator(settings.index_cache_dir, RepoChartDownloader(repositories), settings.dir_mode),
            loader=loader,
            resolver=DependencyResolver(RepoDependencyManager(repositories, loader), settings.dependency_policy),
            runner=HelmActionRunner(settings.helm_binary, settings.helm_label_selector, settings.secret_type),
        )

    def _prepare_chart(self, chart_path: Path) -> Chart:
        """Load, gate, resolve dependencies, reload and verify."""
        chart = self.loader.load(chart_path)
        if not chart.is_installable:
            raise NotInstallableError(
                f"chart with type `{chart.chart_type}` is not installable",
                chart=chart.name,
                path=chart_path,
            )

        self.resolver.ensure_dependencies(chart, chart_path)

        # Dependency resolution may have changed what is on disk
        chart = self.loader.load(chart_path)
        self.resolver.verify(chart)
        return chart

    def install(
        self,
        chart_name: str,
        version: str,
        namespace: str,
        values: dict[str, Any] | None = None,
    ) -> HelmRelease:
        ctx = self.config_factory.build(namespace)
        chart_path = self.locator.locate(chart_name, version)
        release_name = generate_release_name(chart_name, self.clock())
        chart = self._prepare_chart(chart_path)

        try:
            release = self.runner.install(ctx, chart, release_name, values or {}, create_namespace=True)
        except Exception as err:
            raise InstallError(
                f"can't install chart `{chart.name}`: {err}",
                chart=chart.name,
                version=version,
                release=release_name,
                namespace=ctx.namespace,
            ) from err
        logger.info("Installed %s as %s in %s (revision %d)", chart.name, release.name, ctx.namespace, release.revision)
        return release

    def upgrade(
        self,
        chart_name: str,
        version: str,
        release_name: str,
        namespace: str,
        values: dict[str, Any] | None = None,
    ) -> HelmRelease:
        ctx = self.config_factory.build(namespace)
        chart_path = self.locator.locate(chart_name, version)
        chart = self._prepare_chart(chart_path)

        try:
            release = self.runner.upgrade(ctx, release_name, chart, values or {})
        except Exception as err:
            raise UpgradeError(
                f"can't upgrade chart `{chart.metadata.name}` for release `{release_name}`: {err}",
                chart=chart.name,
                version=version,
                release=release_name,
                namespace=ctx.namespace,
            ) from err
        logger.info("Upgraded %s to revision %d in %s", release_name, release.revision, ctx.namespace)
        return release

    def list_releases(self, namespace: str) -> list[HelmRelease]:
        ctx = self.config_factory.build(namespace)
        try:
            return self.runner.list(ctx)
        except Exception as err:
            raise ListError(
                f"can't list releases in namespace `{ctx.namespace}`: {err}",
                namespace=ctx.namespace,
            ) from err

    def uninstall(self, release_name: str, namespace: str) -> None:
        ctx = self.config_factory.build(namespace)
        try:
            self.runner.uninstall(ctx, release_name)
        except Exception as err:
            raise UninstallError(
                f"can't uninstall release `{release_name}`: {err}",
                release=release_name,
                namespace=ctx.namespace,
            ) from err
        logger.info("Uninstalled %s from %s", release_name, ctx.namespace)
