"""Read releases back from helm's storage backend."""

from __future__ import annotations

from collections import defaultdict

from helm_steward.core.k8s_client import K8sClient
from helm_steward.core.release_codec import object_labels, object_revision, release_from_object
from helm_steward.models.release import LISTED_STATUSES, HelmRelease


class ReleaseStore:
    """Lists the latest revision of each release in one namespace."""

    def __init__(self, k8s: K8sClient, storage_driver: str = "secrets"):
        self.k8s = k8s
        self.storage_driver = storage_driver

    def _objects(self) -> list:
        if self.storage_driver in ("configmap", "configmaps"):
            return self.k8s.list_helm_configmaps()
        return self.k8s.list_helm_secrets()

    def list_releases(self, include_all: bool = False) -> list[HelmRelease]:
        """Latest revision of each release; only deployed and failed ones unless ``include_all``."""
        grouped: dict[str, list] = defaultdict(list)
        for obj in self._objects():
            grouped[object_labels(obj).get("name", "")].append(obj)

        releases: list[HelmRelease] = []
        for objs in grouped.values():
            latest = max(objs, key=object_revision)
            release = release_from_object(latest)
            if release is None:
                continue
            if not include_all and release.status not in LISTED_STATUSES:
                continue
            releases.append(release)

        releases.sort(key=lambda r: r.name)
        return releases
