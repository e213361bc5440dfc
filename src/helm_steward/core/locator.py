"""Resolve a chart reference to an absolute path on disk."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from helm_steward.core.downloader import ChartDownloader
from helm_steward.core.errors import ChartNotFoundError, HelmStewardError
from helm_steward.core.repository import ensure_directory

logger = logging.getLogger(__name__)


def _looks_like_path(name: str) -> bool:
    return os.path.isabs(name) or name.startswith(".")


class ChartLocator:
    """Local paths win; anything else is downloaded through the repositories.

    A reference that looks like a path but does not exist is never sent to a
    repository.
    """

    def __init__(self, cache_dir: Path, downloader: ChartDownloader, dir_mode: int = 0o750):
        self.cache_dir = cache_dir
        self.downloader = downloader
        self.dir_mode = dir_mode

    def locate(self, name_or_path: str, version: str = "") -> Path:
        name = name_or_path.strip()
        label = f"{name}-{version}" if version else name

        if name and os.path.exists(name):
            logger.debug("Using local chart %s", name)
            return Path(os.path.abspath(name))
        if not name or _looks_like_path(name):
            raise ChartNotFoundError(f"can't locate chart: path not found: {name}", chart=name, version=version)

        try:
            ensure_directory(self.cache_dir, self.dir_mode)
        except OSError as err:
            raise ChartNotFoundError(f"can't locate chart `{label}`: {err}", chart=name, version=version) from err

        try:
            filename, _ = self.downloader.download_to(name, version, self.cache_dir)
        except (HelmStewardError, OSError) as err:
            at_version = f" at version {version!r}" if version else ""
            raise ChartNotFoundError(
                f"failed to download {name!r}{at_version}: {err} (hint: running `hsw repo update` may help)",
                chart=name,
                version=version,
            ) from err
        return Path(os.path.abspath(filename))
