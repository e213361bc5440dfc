from __future__ import annotations

from pathlib import Path

import pytest

from helm_steward.config.settings import Settings
from helm_steward.models import DependencyUpdatePolicy

KUBECONFIG = """\
apiVersion: v1
kind: Config
clusters:
- name: test
  cluster:
    server: https://127.0.0.1:6443
    insecure-skip-tls-verify: true
users:
- name: test
  user:
    token: test-token
contexts:
- name: test
  context:
    cluster: test
    user: test
current-context: test
"""


@pytest.fixture
def kubeconfig(tmp_path: Path) -> Path:
    path = tmp_path / "kubeconfig"
    path.write_text(KUBECONFIG, encoding="utf-8")
    return path


@pytest.fixture
def test_settings(tmp_path: Path, kubeconfig: Path) -> Settings:
    return Settings(
        helm_cache_dir=tmp_path / "cache",
        helm_config_dir=tmp_path / "config",
        kubeconfig=kubeconfig,
        kube_context=None,
        default_namespace="default",
        storage_driver="secrets",
        helm_binary="helm",
        timeout=0,
        kube_insecure_skip_tls_verify=False,
        repo_insecure_skip_tls_verify=True,
        dependency_policy=DependencyUpdatePolicy.CHECK,
        repository_config_override=None,
    )
