"""Helm release models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from helm_steward.models.chart import ChartMetadata


class ReleaseStatus(enum.Enum):
    DEPLOYED = "deployed"
    FAILED = "failed"
    SUPERSEDED = "superseded"
    PENDING_INSTALL = "pending-install"
    PENDING_UPGRADE = "pending-upgrade"
    PENDING_ROLLBACK = "pending-rollback"
    UNINSTALLING = "uninstalling"
    UNINSTALLED = "uninstalled"
    UNKNOWN = "unknown"

    @classmethod
    def from_str(cls, s: str) -> ReleaseStatus:
        try:
            return cls(s)
        except ValueError:
            return cls.UNKNOWN


# Statuses `helm list` shows without --all
LISTED_STATUSES = frozenset({ReleaseStatus.DEPLOYED, ReleaseStatus.FAILED})

_INFO_TEXT_FIELDS = ("first_deployed", "last_deployed", "description", "deleted", "notes")


@dataclass
class ReleaseInfo:
    first_deployed: str = ""
    last_deployed: str = ""
    status: ReleaseStatus = ReleaseStatus.UNKNOWN
    description: str = ""
    deleted: str = ""
    notes: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ReleaseInfo:
        text = {k: str(d.get(k) or "") for k in _INFO_TEXT_FIELDS}
        return cls(status=ReleaseStatus.from_str(d.get("status") or "unknown"), **text)


@dataclass
class HelmRelease:
    """One revision of a release, as stored by helm."""

    name: str = ""
    namespace: str = ""
    version: int = 0
    info: ReleaseInfo = field(default_factory=ReleaseInfo)
    chart: ChartMetadata = field(default_factory=ChartMetadata)
    config: dict[str, Any] = field(default_factory=dict)
    manifest: str = ""

    @property
    def revision(self) -> int:
        return self.version

    @property
    def chart_name(self) -> str:
        return self.chart.name

    @property
    def chart_version(self) -> str:
        return self.chart.version

    @property
    def app_version(self) -> str:
        return self.chart.app_version

    @property
    def status(self) -> ReleaseStatus:
        return self.info.status

    @property
    def updated_short(self) -> str:
        raw = self.info.last_deployed
        if not raw:
            return ""
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            return dt.strftime("%Y-%m-%d %H:%M:%S")
        except (ValueError, AttributeError):
            return raw[:19]

    @classmethod
    def from_dict(cls, d: dict) -> HelmRelease:
        chart_raw = d.get("chart") or {}
        return cls(
            name=d.get("name", "") or "",
            namespace=d.get("namespace", "") or "",
            version=int(d.get("version", 0) or 0),
            info=ReleaseInfo.from_dict(d.get("info") or {}),
            chart=ChartMetadata.from_dict(chart_raw.get("metadata") or {}),
            config=d.get("config") or {},
            manifest=d.get("manifest", "") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "revision": self.version,
            "status": self.status.value,
            "chart": self.chart_name,
            "chart_version": self.chart_version,
            "app_version": self.app_version,
            "updated": self.info.last_deployed,
        }
