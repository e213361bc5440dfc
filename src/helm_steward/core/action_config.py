"""Per-operation, namespace-scoped execution context."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from kubernetes import client, config

from helm_steward.config.settings import Settings
from helm_steward.core.errors import ConfigurationError

_NAMESPACE_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


@dataclass(frozen=True)
class ExecutionContext:
    namespace: str
    kubeconfig: Path | None
    cache_dir: Path
    repository_file: Path
    kube_context: str | None = None
    insecure_skip_tls_verify: bool = False
    # Seconds; 0 means unbounded
    timeout: int = 0
    impersonate_groups: tuple[str, ...] = ()
    storage_driver: str = "secrets"
    api_configuration: Any = field(default=None, compare=False, repr=False)

    @property
    def request_timeout(self) -> int | None:
        return self.timeout or None


class ActionConfigFactory:
    """Builds an ExecutionContext for one namespace from Settings."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def build(self, namespace: str) -> ExecutionContext:
        namespace = (namespace or self.settings.default_namespace).strip()
        if len(namespace) > 63 or not _NAMESPACE_RE.match(namespace):
            raise ConfigurationError(
                f"can't create action configuration: invalid namespace {namespace!r}",
                namespace=namespace,
            )
        kubeconfig = self.settings.kubeconfig
        try:
            api_configuration = self._load_api_configuration(kubeconfig)
        except (config.ConfigException, OSError, ValueError, TypeError) as err:
            raise ConfigurationError(
                f"can't create action configuration for namespace {namespace!r} "
                f"(kubeconfig {kubeconfig or 'in-cluster'}): {err}",
                namespace=namespace,
                path=kubeconfig,
            ) from err

        return ExecutionContext(
            namespace=namespace,
            kubeconfig=kubeconfig,
            cache_dir=self.settings.index_cache_dir,
            repository_file=self.settings.repositories_file,
            kube_context=self.settings.kube_context,
            insecure_skip_tls_verify=self.settings.kube_insecure_skip_tls_verify,
            timeout=self.settings.timeout,
            impersonate_groups=(),
            storage_driver=self.settings.storage_driver,
            api_configuration=api_configuration,
        )

    def _load_api_configuration(self, kubeconfig: Path | None) -> client.Configuration:
        cfg = client.Configuration()
        if kubeconfig is not None:
            if not kubeconfig.exists():
                raise config.ConfigException(f"kubeconfig {kubeconfig} does not exist")
            config.load_kube_config(
                config_file=str(kubeconfig),
                context=self.settings.kube_context,
                client_configuration=cfg,
            )
        else:
            config.load_incluster_config(client_configuration=cfg)
        cfg.verify_ssl = not self.settings.kube_insecure_skip_tls_verify
        # Client-side debug logging stays off; operational logging belongs to callers
        cfg.debug = False
        return cfg
