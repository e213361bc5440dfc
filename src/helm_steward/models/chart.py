"""Chart metadata and loaded chart models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Chart types that may be installed; "" predates the field (apiVersion v1).
INSTALLABLE_TYPES = frozenset({"", "application"})


@dataclass
class Maintainer:
    name: str = ""
    email: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Maintainer:
        if not isinstance(d, dict):
            raise ValueError(f"maintainer entry must be a mapping, got {d!r}")
        return cls(
            name=d.get("name", "") or "",
            email=d.get("email", "") or "",
            url=d.get("url", "") or "",
        )


@dataclass
class ChartDependency:
    """A dependency as declared in Chart.yaml (or requirements.yaml)."""

    name: str = ""
    version: str = ""
    repository: str = ""
    condition: str = ""
    tags: list[str] = field(default_factory=list)
    alias: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, d: dict) -> ChartDependency:
        if not isinstance(d, dict):
            raise ValueError(f"dependency entry must be a mapping, got {d!r}")
        return cls(
            name=d.get("name", "") or "",
            version=str(d.get("version", "") or ""),
            repository=d.get("repository", "") or "",
            condition=d.get("condition", "") or "",
            tags=list(d.get("tags") or []),
            alias=d.get("alias", "") or "",
            enabled=bool(d.get("enabled", True)),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "version": self.version, "repository": self.repository}
        if self.condition:
            out["condition"] = self.condition
        if self.tags:
            out["tags"] = list(self.tags)
        if self.alias:
            out["alias"] = self.alias
        return out


@dataclass
class ChartMetadata:
    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""
    api_version: str = ""
    chart_type: str = ""
    home: str = ""
    icon: str = ""
    keywords: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    maintainers: list[Maintainer] = field(default_factory=list)
    dependencies: list[ChartDependency] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict) -> ChartMetadata:
        if not d:
            return cls()
        return cls(
            name=d.get("name", "") or "",
            version=str(d.get("version", "") or ""),
            app_version=str(d.get("appVersion", "") or ""),
            description=d.get("description", "") or "",
            api_version=d.get("apiVersion", "") or "",
            chart_type=d.get("type", "") or "",
            home=d.get("home", "") or "",
            icon=d.get("icon", "") or "",
            keywords=d.get("keywords") or [],
            sources=d.get("sources") or [],
            maintainers=[Maintainer.from_dict(m) for m in d.get("maintainers") or []],
            dependencies=[ChartDependency.from_dict(dep) for dep in d.get("dependencies") or []],
            annotations=d.get("annotations") or {},
        )


@dataclass
class ChartFile:
    """A file inside a chart, keyed by its path relative to the chart root."""

    name: str
    data: bytes


@dataclass
class Chart:
    metadata: ChartMetadata = field(default_factory=ChartMetadata)
    values: dict[str, Any] = field(default_factory=dict)
    templates: list[ChartFile] = field(default_factory=list)
    files: list[ChartFile] = field(default_factory=list)
    dependencies: list[Chart] = field(default_factory=list)
    lock: dict[str, Any] | None = None
    path: Path | None = None

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def version(self) -> str:
        return self.metadata.version

    @property
    def chart_type(self) -> str:
        return self.metadata.chart_type

    @property
    def is_installable(self) -> bool:
        return self.metadata.chart_type in INSTALLABLE_TYPES

    def subchart(self, name: str) -> Chart | None:
        for dep in self.dependencies:
            if dep.name == name:
                return dep
        return None
