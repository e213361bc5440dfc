"""hsw install <chart> - Install a chart under a generated release name."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from helm_steward.cli import runtime
from helm_steward.cli.options import NamespaceOption, OutputOption, SetOption, ValuesOption, VersionOption
from helm_steward.config.settings import settings
from helm_steward.output.formatters import output_release
from helm_steward.utils.values import load_values

app = typer.Typer(context_settings={"allow_interspersed_args": True})


@app.callback(invoke_without_command=True)
def install(
    chart: str = typer.Argument(help="Chart reference (repo/chart, URL or local path)"),
    version: str = VersionOption,
    namespace: Optional[str] = NamespaceOption,
    set_values: Optional[List[str]] = SetOption,
    values_files: Optional[List[Path]] = ValuesOption,
    output: str = OutputOption,
) -> None:
    """Install a chart; the namespace is created if missing."""
    with runtime.exit_on_error():
        values = load_values(values_files, set_values)
        release = runtime.build_controller().install(chart, version, namespace or settings.default_namespace, values)
    output_release(release, output, "Installed")
