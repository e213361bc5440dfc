"""hsw repo add|update|list - Manage chart repositories."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from helm_steward.cli import runtime
from helm_steward.cli.options import OutputOption
from helm_steward.models.repo import RepositoryEntry
from helm_steward.output.formatters import output_repositories

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.command("add")
def add(
    name: str = typer.Argument(help="Repository name"),
    url: str = typer.Argument(help="Repository URL"),
    username: str = typer.Option("", "--username", help="Repository username"),
    password: str = typer.Option("", "--password", help="Repository password"),
    cert_file: str = typer.Option("", "--cert-file", help="TLS client certificate"),
    key_file: str = typer.Option("", "--key-file", help="TLS client key"),
    ca_file: str = typer.Option("", "--ca-file", help="CA bundle used to verify the repository"),
    insecure_skip_tls_verify: bool = typer.Option(False, "--insecure-skip-tls-verify", help="Skip TLS verification"),
    pass_credentials: bool = typer.Option(False, "--pass-credentials", help="Send credentials to all hosts"),
) -> None:
    """Add or replace a chart repository and download its index."""
    entry = RepositoryEntry(
        name=name,
        url=url,
        username=username,
        password=password,
        cert_file=cert_file,
        key_file=key_file,
        ca_file=ca_file,
        insecure_skip_tls_verify=insecure_skip_tls_verify,
        pass_credentials_all=pass_credentials,
    )
    with runtime.exit_on_error():
        runtime.build_repository_store().add_repository(entry)
    console.print(f"[green]\"{name}\" has been added to your repositories[/green]")


@app.command("update")
def update(
    names: Optional[List[str]] = typer.Argument(None, help="Repositories to update (default: all)"),
) -> None:
    """Refresh cached repository indexes."""
    with runtime.exit_on_error():
        updated = runtime.build_repository_store().update_repositories(names or None)
    if not updated:
        console.print("[dim]No repositories configured.[/dim]")
        return
    for name in updated:
        console.print(f"Successfully got an update from the [bold]\"{name}\"[/bold] chart repository")


@app.command("list")
def list_repositories(output: str = OutputOption) -> None:
    """List configured chart repositories."""
    with runtime.exit_on_error():
        entries = runtime.build_repository_store().list_repositories()
    output_repositories(entries, output)
