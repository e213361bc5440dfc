"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

from helm_steward.config.settings import settings
from helm_steward.models import DependencyUpdatePolicy

app = typer.Typer(
    name="hsw",
    help="Helm Steward - resolve charts and drive Helm release lifecycles.",
    no_args_is_help=True,
)


@app.callback()
def root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    kubeconfig: Optional[Path] = typer.Option(None, "--kubeconfig", help="Path to the kubeconfig file"),
    kube_context: Optional[str] = typer.Option(None, "--kube-context", help="Kubeconfig context to use"),
    kube_insecure: Optional[bool] = typer.Option(
        None, "--kube-insecure-skip-tls-verify/--kube-verify-tls",
        help="Skip TLS verification towards the Kubernetes API server",
    ),
    repo_insecure: Optional[bool] = typer.Option(
        None, "--repo-insecure-skip-tls-verify/--repo-verify-tls",
        help="Skip TLS verification towards chart repositories",
    ),
    timeout: Optional[int] = typer.Option(None, "--timeout", min=0, help="Seconds to wait for cluster calls (0 = no limit)"),
    dependency_update: Optional[str] = typer.Option(
        None, "--dependency-update", help="When to update chart dependencies: check, always",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=verbose)],
        force=True,
    )
    if kubeconfig is not None:
        settings.kubeconfig = kubeconfig
    if kube_context is not None:
        settings.kube_context = kube_context
    if kube_insecure is not None:
        settings.kube_insecure_skip_tls_verify = kube_insecure
    if repo_insecure is not None:
        settings.repo_insecure_skip_tls_verify = repo_insecure
    if timeout is not None:
        settings.timeout = timeout
    if dependency_update is not None:
        settings.dependency_policy = DependencyUpdatePolicy.from_str(dependency_update)


def _register_commands() -> None:
    from helm_steward.cli.commands.repo_cmd import app as repo_app
    from helm_steward.cli.commands.install_cmd import app as install_app
    from helm_steward.cli.commands.upgrade_cmd import app as upgrade_app
    from helm_steward.cli.commands.list_cmd import app as list_app
    from helm_steward.cli.commands.uninstall_cmd import app as uninstall_app

    app.add_typer(repo_app, name="repo", help="Add, update and list chart repositories")
    app.add_typer(install_app, name="install", help="Install a chart")
    app.add_typer(upgrade_app, name="upgrade", help="Upgrade a release")
    app.add_typer(list_app, name="list", help="List releases")
    app.add_typer(uninstall_app, name="uninstall", help="Uninstall a release")


_register_commands()


def main() -> None:
    app()
