"""Encode and decode helm v3 release payloads stored in Secrets or ConfigMaps.

Secret data arrives base64-decoded from the kubernetes client, leaving helm's
own base64(gzip(json)) layer. ConfigMap data is a plain string carrying the
same layer. Some client versions hand back Secret data still encoded, so a
missing gzip magic after one decode triggers a second one.
"""

from __future__ import annotations

import base64
import gzip
import json
import logging
from typing import Any

from helm_steward.models.release import HelmRelease

logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


def encode_release(payload: dict) -> str:
    """base64(gzip(json)) as helm stores it."""
    compressed = gzip.compress(json.dumps(payload).encode("utf-8"))
    return base64.b64encode(compressed).decode("ascii")


def decode_release(raw: bytes | str) -> dict:
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    body = base64.b64decode(raw)
    if body[:2] != _GZIP_MAGIC:
        body = base64.b64decode(body)
    if body[:2] == _GZIP_MAGIC:
        body = gzip.decompress(body)
    return json.loads(body.decode("utf-8"))


def object_labels(obj: Any) -> dict[str, str]:
    meta = getattr(obj, "metadata", None)
    if meta is None or not meta.labels:
        return {}
    return dict(meta.labels)


def object_revision(obj: Any) -> int:
    try:
        return int(object_labels(obj).get("version", "0"))
    except ValueError:
        return 0


def release_from_object(obj: Any) -> HelmRelease | None:
    """Decode a storage Secret/ConfigMap; undecodable objects yield None."""
    data = getattr(obj, "data", None) or {}
    if "release" not in data:
        return None
    meta = getattr(obj, "metadata", None)
    try:
        release = HelmRelease.from_dict(decode_release(data["release"]))
    except (ValueError, OSError, TypeError):
        logger.debug("Skipping undecodable release object %s", getattr(meta, "name", "<unknown>"), exc_info=True)
        return None
    if not release.namespace and meta is not None:
        release.namespace = meta.namespace or ""
    return release
