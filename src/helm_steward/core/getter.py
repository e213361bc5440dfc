"""HTTP transport for repository indexes and chart archives."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import urlparse

import requests

from helm_steward.core.errors import DownloadError
from helm_steward.models.repo import RepositoryEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GetterOptions:
    username: str = ""
    password: str = ""
    cert_file: str = ""
    key_file: str = ""
    ca_file: str = ""
    insecure_skip_tls_verify: bool = False
    pass_credentials_all: bool = False
    # Seconds; 0 means no timeout
    timeout: int = 0

    @classmethod
    def for_entry(
        cls,
        entry: RepositoryEntry,
        insecure_skip_tls_verify: bool | None = None,
        timeout: int = 0,
    ) -> GetterOptions:
        insecure = entry.insecure_skip_tls_verify
        if insecure_skip_tls_verify is not None:
            insecure = insecure or insecure_skip_tls_verify
        return cls(
            username=entry.username,
            password=entry.password,
            cert_file=entry.cert_file,
            key_file=entry.key_file,
            ca_file=entry.ca_file,
            insecure_skip_tls_verify=insecure,
            pass_credentials_all=entry.pass_credentials_all,
            timeout=timeout,
        )


class Getter(ABC):
    """Fetches a URL and returns the response body."""

    @abstractmethod
    def get(self, url: str, options: GetterOptions | None = None, *, origin: str = "") -> bytes:
        """Fetch ``url``.

        ``origin`` is the repository URL the request belongs to; credentials
        are only sent to other hosts when ``pass_credentials_all`` is set.

        Raises:
            DownloadError: on connection errors or non-2xx responses
        """
        ...


class HttpGetter(Getter):
    """requests-based getter for http and https URLs."""

    schemes = ("http", "https")

    def __init__(self, session: requests.Session | None = None):
        self.session = session or requests.Session()

    def get(self, url: str, options: GetterOptions | None = None, *, origin: str = "") -> bytes:
        opts = options or GetterOptions()
        scheme = urlparse(url).scheme
        if scheme not in self.schemes:
            raise DownloadError(f"unsupported protocol scheme {scheme!r} for {url}")

        kwargs: dict = {"timeout": opts.timeout or None}
        if opts.username or opts.password:
            if opts.pass_credentials_all or not origin or _same_host(url, origin):
                kwargs["auth"] = (opts.username, opts.password)
        if opts.cert_file and opts.key_file:
            kwargs["cert"] = (opts.cert_file, opts.key_file)
        if opts.insecure_skip_tls_verify:
            kwargs["verify"] = False
        elif opts.ca_file:
            kwargs["verify"] = opts.ca_file

        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, **kwargs)
            response.raise_for_status()
        except requests.RequestException as err:
            raise DownloadError(f"failed to fetch {url}: {err}") from err
        return response.content


def _same_host(url: str, other: str) -> bool:
    return urlparse(url).netloc == urlparse(other).netloc
