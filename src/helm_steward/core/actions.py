"""Cluster-facing release actions.

``HelmActionRunner`` hands install, upgrade and uninstall to the helm binary
(rendering and manifest apply live there) and reads releases back directly
from helm's storage Secrets/ConfigMaps through the Kubernetes API.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from abc import ABC, abstractmethod
from typing import Any

import yaml
from kubernetes.client import ApiException

from helm_steward.core.action_config import ExecutionContext
from helm_steward.core.errors import ActionError
from helm_steward.core.k8s_client import K8sClient
from helm_steward.core.release_store import ReleaseStore
from helm_steward.models.chart import Chart
from helm_steward.models.release import HelmRelease

logger = logging.getLogger(__name__)


class ActionRunner(ABC):
    """Install / upgrade / list / uninstall against the release store and cluster."""

    @abstractmethod
    def install(
        self,
        ctx: ExecutionContext,
        chart: Chart,
        release_name: str,
        values: dict[str, Any],
        create_namespace: bool = True,
    ) -> HelmRelease:
        ...

    @abstractmethod
    def upgrade(
        self,
        ctx: ExecutionContext,
        release_name: str,
        chart: Chart,
        values: dict[str, Any],
    ) -> HelmRelease:
        ...

    @abstractmethod
    def list(self, ctx: ExecutionContext) -> list[HelmRelease]:
        ...

    @abstractmethod
    def uninstall(self, ctx: ExecutionContext, release_name: str) -> None:
        ...


class HelmActionRunner(ActionRunner):
    def __init__(
        self,
        helm_binary: str = "helm",
        label_selector: str = "owner=helm",
        secret_type: str = "helm.sh/release.v1",
    ):
        self.helm_binary = helm_binary
        self.label_selector = label_selector
        self.secret_type = secret_type

    def _global_flags(self, ctx: ExecutionContext) -> list[str]:
        flags = [
            "--namespace", ctx.namespace,
            "--repository-config", str(ctx.repository_file),
            "--repository-cache", str(ctx.cache_dir),
        ]
        if ctx.kubeconfig is not None:
            flags += ["--kubeconfig", str(ctx.kubeconfig)]
        if ctx.kube_context:
            flags += ["--kube-context", ctx.kube_context]
        if ctx.insecure_skip_tls_verify:
            flags.append("--kube-insecure-skip-tls-verify")
        for group in ctx.impersonate_groups:
            flags += ["--kube-as-group", group]
        return flags

    def _run(self, ctx: ExecutionContext, args: list[str]) -> str:
        cmd = [self.helm_binary, *args, *self._global_flags(ctx)]
        if ctx.timeout:
            cmd += ["--timeout", f"{ctx.timeout}s"]
        logger.debug("Running %s", " ".join(cmd))
        env = dict(os.environ, HELM_DRIVER=ctx.storage_driver)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True, env=env)
        except FileNotFoundError as err:
            raise ActionError(f"helm binary {self.helm_binary!r} not found", namespace=ctx.namespace) from err
        except subprocess.CalledProcessError as err:
            detail = (err.stderr or err.stdout or "").strip() or f"exit status {err.returncode}"
            raise ActionError(detail, namespace=ctx.namespace) from err
        return result.stdout

    def _run_with_values(self, ctx: ExecutionContext, args: list[str], values: dict[str, Any]) -> HelmRelease:
        fd, values_file = tempfile.mkstemp(prefix="hsw-values-", suffix=".yaml")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                yaml.safe_dump(values or {}, fh, default_flow_style=False)
            out = self._run(ctx, [*args, "--values", values_file, "--output", "json"])
        finally:
            os.unlink(values_file)
        try:
            return HelmRelease.from_dict(json.loads(out))
        except ValueError as err:
            raise ActionError(f"unexpected helm output: {err}", namespace=ctx.namespace) from err

    def install(
        self,
        ctx: ExecutionContext,
        chart: Chart,
        release_name: str,
        values: dict[str, Any],
        create_namespace: bool = True,
    ) -> HelmRelease:
        args = ["install", release_name, str(chart.path)]
        if create_namespace:
            args.append("--create-namespace")
        return self._run_with_values(ctx, args, values)

    def upgrade(
        self,
        ctx: ExecutionContext,
        release_name: str,
        chart: Chart,
        values: dict[str, Any],
    ) -> HelmRelease:
        return self._run_with_values(ctx, ["upgrade", release_name, str(chart.path)], values)

    def list(self, ctx: ExecutionContext) -> list[HelmRelease]:
        store = ReleaseStore(K8sClient(ctx, self.label_selector, self.secret_type), ctx.storage_driver)
        try:
            return store.list_releases()
        except ApiException as err:
            raise ActionError(f"{err.status} {err.reason}", namespace=ctx.namespace) from err

    def uninstall(self, ctx: ExecutionContext, release_name: str) -> None:
        self._run(ctx, ["uninstall", release_name])
