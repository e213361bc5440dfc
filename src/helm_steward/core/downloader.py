"""Download chart archives by ``repo/chart`` reference or URL."""

from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import urljoin, urlparse

from helm_steward.core.errors import ChartNotFoundError, DownloadError
from helm_steward.core.getter import GetterOptions
from helm_steward.core.repository import RepositoryIndexStore
from helm_steward.models.repo import ChartVersion, RepositoryEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verification:
    """Integrity information about a downloaded archive."""

    digest: str
    expected_digest: str = ""

    @property
    def verified(self) -> bool:
        return bool(self.expected_digest) and self.digest == self.expected_digest


class ChartDownloader(ABC):
    @abstractmethod
    def download_to(self, ref: str, version: str, dest: Path) -> tuple[Path, Verification | None]:
        """Download the chart ``ref`` at ``version`` into ``dest``.

        An empty version means the latest available release.
        Returns the archive path and its verification info.
        """
        ...


def is_url(ref: str) -> bool:
    return urlparse(ref).scheme in ("http", "https")


def resolve_chart_url(repo_url: str, chart_url: str) -> str:
    """Resolve a (possibly relative) index URL against the repository URL."""
    if is_url(chart_url):
        return chart_url
    return urljoin(repo_url.rstrip("/") + "/", chart_url)


def write_archive(data: bytes, url: str, dest: Path, expected_digest: str = "") -> tuple[Path, Verification]:
    """Write downloaded bytes to ``dest`` named after the URL's last segment."""
    digest = hashlib.sha256(data).hexdigest()
    if expected_digest and digest != expected_digest:
        raise DownloadError(f"digest mismatch for {url}: expected {expected_digest}, got {digest}")
    filename = PurePosixPath(urlparse(url).path).name
    if not filename:
        raise DownloadError(f"can't derive a file name from {url}")
    dest.mkdir(parents=True, exist_ok=True)
    target = dest / filename
    target.write_bytes(data)
    return target, Verification(digest=digest, expected_digest=expected_digest)


class RepoChartDownloader(ChartDownloader):
    """Resolves references through the configured repositories and their cached indexes."""

    def __init__(self, repositories: RepositoryIndexStore):
        self.repositories = repositories

    def download_to(self, ref: str, version: str, dest: Path) -> tuple[Path, Verification | None]:
        ref = ref.strip()
        if is_url(ref):
            data = self.repositories.getter.get(ref, GetterOptions(timeout=self.repositories.timeout))
            return write_archive(data, ref, dest)

        entry, chart_version = self.find(ref, version)
        if not chart_version.urls:
            raise ChartNotFoundError(
                f"chart {ref!r} version {chart_version.version!r} has no downloadable URLs",
                chart=ref,
                version=version,
            )
        url = resolve_chart_url(entry.url, chart_version.urls[0])
        data = self.repositories.getter.get(url, self.repositories.options_for(entry), origin=entry.url)
        path, verification = write_archive(data, url, dest, chart_version.digest)
        logger.info("Downloaded %s-%s to %s", chart_version.name, chart_version.version, path)
        return path, verification

    def find(self, ref: str, version: str) -> tuple[RepositoryEntry, ChartVersion]:
        """Look ``repo/chart`` up in the cached index of ``repo``."""
        repo_name, sep, chart_name = ref.partition("/")
        if not sep or not repo_name or not chart_name:
            raise ChartNotFoundError(
                f"non-absolute URLs should be in form of repo_name/path_to_chart, got: {ref}",
                chart=ref,
                version=version,
            )
        entry = self.repositories.get_repository(repo_name)
        index = self.repositories.load_index(repo_name)
        chart_version = index.get(chart_name, version)
        if chart_version is None:
            if version:
                msg = f"chart {chart_name!r} version {version!r} not found in {repo_name} index"
            else:
                msg = f"chart {chart_name!r} not found in {repo_name} index"
            raise ChartNotFoundError(msg, chart=ref, version=version)
        return entry, chart_version
