"""Rich table builders for each command."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from helm_steward.models.release import HelmRelease
from helm_steward.models.repo import RepositoryEntry
from helm_steward.output.themes import styled_status


def release_list_table(releases: list[HelmRelease], namespace: str) -> Table:
    table = Table(title=f"Helm Releases ({namespace})", expand=True, show_lines=False)
    table.add_column("Release", style="bold white", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Rev", justify="right", style="dim")
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Chart Ver", style="magenta")
    table.add_column("App Ver", style="cyan")
    table.add_column("Updated", style="dim", no_wrap=True)

    for r in releases:
        table.add_row(
            r.name,
            styled_status(r.status),
            str(r.revision),
            r.chart_name,
            r.chart_version,
            r.app_version,
            r.updated_short,
        )
    return table


def release_panel(release: HelmRelease, title: str, resource_counts: dict[str, int] | None = None) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Release", release.name)
    table.add_row("Namespace", release.namespace)
    table.add_row("Status", styled_status(release.status))
    table.add_row("Revision", str(release.revision))
    table.add_row("Chart", f"{release.chart_name}-{release.chart_version}")
    table.add_row("App Version", release.app_version or "-")
    table.add_row("Last Deployed", release.updated_short or "-")
    if resource_counts:
        table.add_row("Resources", ", ".join(f"{kind}: {n}" for kind, n in sorted(resource_counts.items())))
    if release.info.notes:
        table.add_row("Notes", release.info.notes.strip())

    return Panel(table, title=f"[bold]{title}: {release.name}[/bold]", border_style="blue")


def repository_table(entries: list[RepositoryEntry]) -> Table:
    table = Table(title="Chart Repositories", expand=True)
    table.add_column("Name", style="bold cyan", no_wrap=True)
    table.add_column("URL")
    table.add_column("TLS", no_wrap=True)
    for e in entries:
        tls = "[yellow]skip verify[/yellow]" if e.insecure_skip_tls_verify else "[green]verify[/green]"
        table.add_row(e.name, e.url, tls)
    return table
