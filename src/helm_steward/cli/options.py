"""Shared CLI options."""

from __future__ import annotations

import typer

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
NamespaceOption = typer.Option(None, "--namespace", "-n", help="Kubernetes namespace (default: settings)")
VersionOption = typer.Option("", "--version", help="Chart version constraint (default: latest)")
SetOption = typer.Option(None, "--set", help="Set a value, e.g. --set image.tag=1.2 (repeatable)")
ValuesOption = typer.Option(None, "--values", "-f", help="YAML values file (repeatable)")
