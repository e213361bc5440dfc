"""Kubernetes API wrapper for reading helm release storage."""

from __future__ import annotations

from typing import Any

from kubernetes import client

from helm_steward.core.action_config import ExecutionContext


class K8sClient:
    """Thin wrapper around the Kubernetes Python client, bound to one ExecutionContext."""

    def __init__(
        self,
        ctx: ExecutionContext,
        label_selector: str = "owner=helm",
        secret_type: str = "helm.sh/release.v1",
    ):
        self.ctx = ctx
        self.label_selector = label_selector
        self.secret_type = secret_type
        self._api_client: client.ApiClient | None = None
        self._core_v1: client.CoreV1Api | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is None:
            self._api_client = client.ApiClient(configuration=self.ctx.api_configuration)
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    def list_helm_secrets(self) -> list[Any]:
        """List release Secrets in the context namespace."""
        result = self.core_v1.list_namespaced_secret(
            namespace=self.ctx.namespace,
            label_selector=self.label_selector,
            field_selector=f"type={self.secret_type}",
            _request_timeout=self.ctx.request_timeout,
        )
        return result.items

    def list_helm_configmaps(self) -> list[Any]:
        """List release ConfigMaps in the context namespace."""
        result = self.core_v1.list_namespaced_config_map(
            namespace=self.ctx.namespace,
            label_selector=self.label_selector,
            _request_timeout=self.ctx.request_timeout,
        )
        return result.items
