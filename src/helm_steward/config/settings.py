"""Application configuration and defaults."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path

from helm_steward.models import DependencyUpdatePolicy


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _default_helm_cache_dir() -> Path:
    """Return the repository cache directory for the current platform.

    Checks HELM_REPOSITORY_CACHE and HELM_CACHE_HOME env vars first,
    matching helm's own resolution order.
    """
    repo_cache = os.environ.get("HELM_REPOSITORY_CACHE", "")
    if repo_cache:
        return Path(repo_cache)
    cache_home = os.environ.get("HELM_CACHE_HOME", "")
    if cache_home:
        return Path(cache_home) / "repository"
    if platform.system() == "Windows":
        temp = os.environ.get("TEMP", "")
        if temp:
            return Path(temp) / "helm" / "repository"
        return Path.home() / "AppData" / "Local" / "Temp" / "helm" / "repository"
    xdg = os.environ.get("XDG_CACHE_HOME", "")
    if xdg:
        return Path(xdg) / "helm" / "repository"
    return Path.home() / ".cache" / "helm" / "repository"


def _default_helm_config_dir() -> Path:
    config_home = os.environ.get("HELM_CONFIG_HOME", "")
    if config_home:
        return Path(config_home)
    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "helm"
        return Path.home() / "AppData" / "Roaming" / "helm"
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "helm"
    return Path.home() / ".config" / "helm"


def _default_kubeconfig() -> Path | None:
    """First entry of KUBECONFIG, else ~/.kube/config when it exists."""
    env = os.environ.get("KUBECONFIG", "")
    if env:
        return Path(env.split(os.pathsep)[0])
    candidate = Path.home() / ".kube" / "config"
    if candidate.exists():
        return candidate
    return None


def _default_timeout() -> int:
    try:
        return max(int(os.environ.get("HSW_TIMEOUT", "0")), 0)
    except ValueError:
        return 0


def _default_dependency_policy() -> DependencyUpdatePolicy:
    return DependencyUpdatePolicy.from_str(os.environ.get("HSW_DEPENDENCY_POLICY", ""))


@dataclass
class Settings:
    helm_cache_dir: Path = field(default_factory=_default_helm_cache_dir)
    helm_config_dir: Path = field(default_factory=_default_helm_config_dir)
    kubeconfig: Path | None = field(default_factory=_default_kubeconfig)
    kube_context: str | None = field(default_factory=lambda: os.environ.get("HSW_KUBE_CONTEXT") or None)
    default_namespace: str = field(default_factory=lambda: os.environ.get("HSW_NAMESPACE", "default"))
    storage_driver: str = field(default_factory=lambda: os.environ.get("HELM_DRIVER", "secrets"))
    helm_binary: str = field(default_factory=lambda: os.environ.get("HSW_HELM_BINARY", "helm"))
    # Seconds; 0 leaves cluster and helm calls unbounded
    timeout: int = field(default_factory=_default_timeout)
    kube_insecure_skip_tls_verify: bool = field(
        default_factory=lambda: _env_flag("HSW_KUBE_INSECURE_SKIP_TLS_VERIFY", False),
    )
    repo_insecure_skip_tls_verify: bool = field(
        default_factory=lambda: _env_flag("HSW_REPO_INSECURE_SKIP_TLS_VERIFY", True),
    )
    dependency_policy: DependencyUpdatePolicy = field(default_factory=_default_dependency_policy)
    dir_mode: int = 0o750
    file_mode: int = 0o600
    helm_label_selector: str = "owner=helm"
    secret_type: str = "helm.sh/release.v1"
    repository_config_override: Path | None = field(
        default_factory=lambda: Path(os.environ["HELM_REPOSITORY_CONFIG"])
        if os.environ.get("HELM_REPOSITORY_CONFIG") else None,
    )

    @property
    def repositories_file(self) -> Path:
        if self.repository_config_override is not None:
            return self.repository_config_override
        return self.helm_config_dir / "repositories.yaml"

    @property
    def index_cache_dir(self) -> Path:
        return self.helm_cache_dir


# Global singleton
settings = Settings()
