"""Exception hierarchy for chart resolution and release operations."""

from __future__ import annotations

from pathlib import Path


class HelmStewardError(Exception):
    """Base error. Keyword context is kept on the instance for callers."""

    def __init__(
        self,
        message: str,
        *,
        chart: str = "",
        version: str = "",
        release: str = "",
        namespace: str = "",
        path: Path | str | None = None,
    ):
        super().__init__(message)
        self.chart = chart
        self.version = version
        self.release = release
        self.namespace = namespace
        self.path = path


class ConfigurationError(HelmStewardError):
    """The execution context could not be built."""


class RepositoryFileError(HelmStewardError):
    """The local repositories file could not be read, parsed or written."""


class RepositoryUnreachableError(HelmStewardError):
    """A repository index could not be downloaded or is not a valid index."""


class RepositoryNotFoundError(HelmStewardError):
    """No repository with the requested name is configured."""


class RepositoryIndexMissingError(HelmStewardError):
    """The cached index for a configured repository does not exist."""


class DownloadError(HelmStewardError):
    """A single HTTP fetch failed."""


class ChartNotFoundError(HelmStewardError):
    """The chart reference resolved to neither a local path nor a download."""


class ChartLoadError(HelmStewardError):
    """A chart directory or archive could not be loaded."""


class DependencyError(HelmStewardError):
    """Declared dependencies could not be resolved or downloaded."""


class NotInstallableError(HelmStewardError):
    """The chart type forbids install/upgrade (e.g. library charts)."""


class ActionError(HelmStewardError):
    """A cluster-facing action failed at the runner boundary."""


class InstallError(HelmStewardError):
    pass


class UpgradeError(HelmStewardError):
    pass


class ListError(HelmStewardError):
    pass


class UninstallError(HelmStewardError):
    pass
