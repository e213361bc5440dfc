"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json

import yaml
from rich.console import Console

from helm_steward.models.release import HelmRelease
from helm_steward.models.repo import RepositoryEntry
from helm_steward.utils.manifest_parser import resource_counts

console = Console()


def output_releases(releases: list[HelmRelease], fmt: str, namespace: str) -> None:
    if fmt == "json":
        console.print_json(json.dumps([r.to_dict() for r in releases], indent=2))
    elif fmt == "yaml":
        console.print(yaml.dump([r.to_dict() for r in releases], default_flow_style=False))
    else:
        from helm_steward.output.tables import release_list_table
        console.print(release_list_table(releases, namespace))


def output_release(release: HelmRelease, fmt: str, title: str) -> None:
    counts = resource_counts(release.manifest)
    if fmt == "json":
        data = release.to_dict()
        data["resources"] = counts
        console.print_json(json.dumps(data, indent=2, default=str))
    elif fmt == "yaml":
        data = release.to_dict()
        data["resources"] = counts
        console.print(yaml.dump(data, default_flow_style=False))
    else:
        from helm_steward.output.tables import release_panel
        console.print(release_panel(release, title, resource_counts=counts))


def output_repositories(entries: list[RepositoryEntry], fmt: str) -> None:
    data = [{"name": e.name, "url": e.url} for e in entries]
    if fmt == "json":
        console.print_json(json.dumps(data, indent=2))
    elif fmt == "yaml":
        console.print(yaml.dump(data, default_flow_style=False))
    else:
        from helm_steward.output.tables import repository_table
        console.print(repository_table(entries))
