"""hsw list - List releases in a namespace."""

from __future__ import annotations

from typing import Optional

import typer

from helm_steward.cli import runtime
from helm_steward.cli.options import NamespaceOption, OutputOption
from helm_steward.config.settings import settings
from helm_steward.output.formatters import output_releases

app = typer.Typer()


@app.callback(invoke_without_command=True)
def list_releases(
    output: str = OutputOption,
    namespace: Optional[str] = NamespaceOption,
) -> None:
    """List deployed and failed releases in a namespace."""
    ns = namespace or settings.default_namespace
    with runtime.exit_on_error():
        releases = runtime.build_controller().list_releases(ns)
    output_releases(releases, output, ns)
