"""Repository file, repository entry and index models."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from helm_steward.utils.version_compare import highest_satisfying

REPOSITORY_FILE_API_VERSION = ""
INDEX_API_VERSION = "v1"


@dataclass
class RepositoryEntry:
    name: str
    url: str
    username: str = ""
    password: str = ""
    cert_file: str = ""
    key_file: str = ""
    ca_file: str = ""
    insecure_skip_tls_verify: bool = False
    pass_credentials_all: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> RepositoryEntry:
        if not isinstance(d, dict):
            raise ValueError("repository entry must be a mapping")
        return cls(
            name=d.get("name", "") or "",
            url=d.get("url", "") or "",
            username=d.get("username", "") or "",
            password=d.get("password", "") or "",
            cert_file=d.get("certFile", "") or "",
            key_file=d.get("keyFile", "") or "",
            ca_file=d.get("caFile", "") or "",
            insecure_skip_tls_verify=bool(d.get("insecure_skip_tls_verify", False)),
            pass_credentials_all=bool(d.get("pass_credentials_all", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "username": self.username,
            "password": self.password,
            "certFile": self.cert_file,
            "keyFile": self.key_file,
            "caFile": self.ca_file,
            "insecure_skip_tls_verify": self.insecure_skip_tls_verify,
            "pass_credentials_all": self.pass_credentials_all,
        }


@dataclass
class RepositoryFile:
    """In-memory form of helm's repositories.yaml."""

    api_version: str = REPOSITORY_FILE_API_VERSION
    generated: str = ""
    repositories: list[RepositoryEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict | None) -> RepositoryFile:
        if not d:
            return cls()
        if not isinstance(d, dict):
            raise ValueError("repository file must be a mapping")
        return cls(
            api_version=d.get("apiVersion", "") or "",
            generated=str(d.get("generated", "") or ""),
            repositories=[RepositoryEntry.from_dict(r) for r in d.get("repositories") or []],
        )

    @classmethod
    def load(cls, path: Path) -> RepositoryFile:
        """Read a repository file; a missing file is an empty one.

        Other I/O errors and YAML errors propagate.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return cls()
        return cls.from_dict(yaml.safe_load(text))

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "generated": self.generated,
            "repositories": [r.to_dict() for r in self.repositories],
        }

    def get(self, name: str) -> RepositoryEntry | None:
        for entry in self.repositories:
            if entry.name == name:
                return entry
        return None

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def find_by_url(self, url: str) -> RepositoryEntry | None:
        wanted = url.rstrip("/")
        for entry in self.repositories:
            if entry.url.rstrip("/") == wanted:
                return entry
        return None

    def update(self, *entries: RepositoryEntry) -> None:
        """Insert entries, replacing any existing entry with the same name."""
        for new in entries:
            for i, existing in enumerate(self.repositories):
                if existing.name == new.name:
                    self.repositories[i] = new
                    break
            else:
                self.repositories.append(new)

    def write(self, path: Path, mode: int) -> None:
        """Atomically write the file with the given permission bits."""
        self.generated = datetime.now(timezone.utc).isoformat()
        data = yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        fd, tmp = tempfile.mkstemp(prefix=".repositories-", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(data)
            os.chmod(tmp, mode)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


@dataclass
class ChartVersion:
    """One chart version listed in a repository index."""

    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""
    chart_type: str = ""
    urls: list[str] = field(default_factory=list)
    digest: str = ""
    created: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ChartVersion:
        return cls(
            name=d.get("name", "") or "",
            version=str(d.get("version", "") or ""),
            app_version=str(d.get("appVersion", "") or ""),
            description=d.get("description", "") or "",
            chart_type=d.get("type", "") or "",
            urls=list(d.get("urls") or []),
            digest=d.get("digest", "") or "",
            created=str(d.get("created", "") or ""),
        )


@dataclass
class IndexFile:
    api_version: str = INDEX_API_VERSION
    generated: str = ""
    entries: dict[str, list[ChartVersion]] = field(default_factory=dict)

    @classmethod
    def loads(cls, raw: bytes | str) -> IndexFile:
        """Parse and validate index.yaml content.

        Raises ValueError when the document is not a chart repository index.
        """
        data = yaml.safe_load(raw)
        if not isinstance(data, dict):
            raise ValueError("index is not a YAML mapping")
        if not data.get("apiVersion"):
            raise ValueError("no API version specified")
        entries: dict[str, list[ChartVersion]] = {}
        for chart_name, versions in (data.get("entries") or {}).items():
            parsed = []
            for raw_version in versions or []:
                if not isinstance(raw_version, dict):
                    continue
                cv = ChartVersion.from_dict(raw_version)
                cv.name = cv.name or chart_name
                parsed.append(cv)
            entries[chart_name] = parsed
        return cls(
            api_version=data["apiVersion"],
            generated=str(data.get("generated", "") or ""),
            entries=entries,
        )

    @classmethod
    def load(cls, path: Path) -> IndexFile:
        return cls.loads(path.read_bytes())

    def chart_names(self) -> list[str]:
        return sorted(self.entries)

    def get(self, name: str, constraint: str = "") -> ChartVersion | None:
        """Highest version of ``name`` matching ``constraint`` (latest when empty)."""
        versions = self.entries.get(name) or []
        by_version = {cv.version: cv for cv in versions}
        best = highest_satisfying(by_version, constraint)
        if best is None:
            # Exact string match for versions that are not valid semver
            return by_version.get(constraint.strip()) if constraint.strip() else None
        return by_version[best]
