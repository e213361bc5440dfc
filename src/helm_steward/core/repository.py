"""Known chart repositories and their cached index files."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import yaml

from helm_steward.config.settings import Settings
from helm_steward.core.errors import (
    DownloadError,
    RepositoryFileError,
    RepositoryIndexMissingError,
    RepositoryNotFoundError,
    RepositoryUnreachableError,
)
from helm_steward.core.getter import Getter, GetterOptions, HttpGetter
from helm_steward.models.repo import IndexFile, RepositoryEntry, RepositoryFile

logger = logging.getLogger(__name__)


def index_cache_path(cache_dir: Path, repo_name: str) -> Path:
    return cache_dir / f"{repo_name}-index.yaml"


def charts_cache_path(cache_dir: Path, repo_name: str) -> Path:
    return cache_dir / f"{repo_name}-charts.txt"


def ensure_directory(path: Path, mode: int) -> None:
    """Create ``path`` and parents; an existing directory is fine."""
    path.mkdir(mode=mode, parents=True, exist_ok=True)


class ChartRepository:
    """Client for a single repository: downloads and caches its index."""

    def __init__(
        self,
        entry: RepositoryEntry,
        getter: Getter,
        cache_dir: Path,
        options: GetterOptions | None = None,
    ):
        if not entry.name:
            raise ValueError("repository entry has no name")
        if not entry.url:
            raise ValueError(f"repository {entry.name!r} has no URL")
        self.entry = entry
        self.getter = getter
        self.cache_dir = cache_dir
        self.options = options or GetterOptions.for_entry(entry)

    @property
    def index_url(self) -> str:
        return self.entry.url.rstrip("/") + "/index.yaml"

    def download_index_file(self) -> Path:
        """Fetch, validate and cache the repository index.

        Returns the path of the cached index. Raises DownloadError or
        ValueError when the repository cannot be reached or the document is
        not an index.
        """
        raw = self.getter.get(self.index_url, self.options, origin=self.entry.url)
        index = IndexFile.loads(raw)

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        names = "\n".join(index.chart_names())
        charts_cache_path(self.cache_dir, self.entry.name).write_text(names + "\n" if names else "", encoding="utf-8")
        index_path = index_cache_path(self.cache_dir, self.entry.name)
        index_path.write_bytes(raw)
        logger.debug("Cached index for %s (%d charts) at %s", self.entry.name, len(index.entries), index_path)
        return index_path


class RepositoryIndexStore:
    """Reads and updates the repositories file and the index cache.

    Single-writer: the repositories file is read, modified and rewritten
    without locking.
    """

    def __init__(
        self,
        repository_file: Path,
        cache_dir: Path,
        getter: Getter | None = None,
        *,
        insecure_skip_tls_verify: bool = True,
        dir_mode: int = 0o750,
        file_mode: int = 0o600,
        timeout: int = 0,
    ):
        self.repository_file = repository_file
        self.cache_dir = cache_dir
        self.getter = getter or HttpGetter()
        self.insecure_skip_tls_verify = insecure_skip_tls_verify
        self.dir_mode = dir_mode
        self.file_mode = file_mode
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, getter: Getter | None = None) -> RepositoryIndexStore:
        return cls(
            settings.repositories_file,
            settings.index_cache_dir,
            getter,
            insecure_skip_tls_verify=settings.repo_insecure_skip_tls_verify,
            dir_mode=settings.dir_mode,
            file_mode=settings.file_mode,
            timeout=settings.timeout,
        )

    def load_file(self) -> RepositoryFile:
        try:
            return RepositoryFile.load(self.repository_file)
        except (OSError, ValueError, yaml.YAMLError) as err:
            raise RepositoryFileError(
                f"can't read repositories from {self.repository_file}: {err}",
                path=self.repository_file,
            ) from err

    def options_for(self, entry: RepositoryEntry) -> GetterOptions:
        return GetterOptions.for_entry(entry, self.insecure_skip_tls_verify, self.timeout)

    def repository(self, entry: RepositoryEntry) -> ChartRepository:
        return ChartRepository(entry, self.getter, self.cache_dir, self.options_for(entry))

    def add_repository(self, entry: RepositoryEntry) -> RepositoryEntry:
        """Download the entry's index and upsert it into the repositories file."""
        try:
            ensure_directory(self.repository_file.parent, self.dir_mode)
        except OSError as err:
            raise RepositoryFileError(
                f"can't add repository to {self.repository_file}: {err}",
                path=self.repository_file,
            ) from err

        repo_file = self.load_file()

        if self.insecure_skip_tls_verify and not entry.insecure_skip_tls_verify:
            entry = dataclasses.replace(entry, insecure_skip_tls_verify=True)

        try:
            repo = self.repository(entry)
        except ValueError as err:
            raise RepositoryFileError(
                f"can't add repository to {self.repository_file}: {err}",
                path=self.repository_file,
            ) from err
        self._download_index(repo)

        repo_file.update(entry)
        try:
            repo_file.write(self.repository_file, self.file_mode)
        except OSError as err:
            raise RepositoryFileError(
                f"can't add repository to {self.repository_file}: {err}",
                path=self.repository_file,
            ) from err
        logger.info("Added repository %s (%s)", entry.name, entry.url)
        return entry

    def update_repositories(self, names: list[str] | None = None) -> list[str]:
        """Refresh the cached index of each named (default: every) repository."""
        repo_file = self.load_file()
        if names:
            entries = []
            for name in names:
                entry = repo_file.get(name)
                if entry is None:
                    raise RepositoryNotFoundError(f"no repository named {name!r} is configured", path=self.repository_file)
                entries.append(entry)
        else:
            entries = list(repo_file.repositories)

        updated = []
        for entry in entries:
            self._download_index(self.repository(entry))
            logger.info("Updated index for %s", entry.name)
            updated.append(entry.name)
        return updated

    def _download_index(self, repo: ChartRepository) -> Path:
        try:
            ensure_directory(self.cache_dir, self.dir_mode)
            return repo.download_index_file()
        except (DownloadError, ValueError, yaml.YAMLError, OSError) as err:
            raise RepositoryUnreachableError(
                f"{repo.entry.url!r} is not a valid chart repository or cannot be reached: {err}",
                path=self.repository_file,
            ) from err

    def list_repositories(self) -> list[RepositoryEntry]:
        return list(self.load_file().repositories)

    def get_repository(self, name: str) -> RepositoryEntry:
        entry = self.load_file().get(name)
        if entry is None:
            raise RepositoryNotFoundError(f"repo {name} not found", path=self.repository_file)
        return entry

    def index_path(self, name: str) -> Path:
        return index_cache_path(self.cache_dir, name)

    def load_index(self, name: str) -> IndexFile:
        path = self.index_path(name)
        try:
            return IndexFile.load(path)
        except FileNotFoundError as err:
            raise RepositoryIndexMissingError(
                f"no cached repo found for {name!r} (try 'hsw repo update')",
                path=path,
            ) from err
        except (OSError, ValueError, yaml.YAMLError) as err:
            raise RepositoryIndexMissingError(
                f"cached index for {name!r} is unreadable (try 'hsw repo update'): {err}",
                path=path,
            ) from err
