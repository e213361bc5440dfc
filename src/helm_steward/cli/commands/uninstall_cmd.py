"""hsw uninstall <release> - Uninstall a release."""

from __future__ import annotations

from typing import Optional

import typer

from helm_steward.cli import runtime
from helm_steward.cli.options import NamespaceOption
from helm_steward.config.settings import settings

app = typer.Typer(context_settings={"allow_interspersed_args": True})


@app.callback(invoke_without_command=True)
def uninstall(
    release: str = typer.Argument(help="Release name"),
    namespace: Optional[str] = NamespaceOption,
) -> None:
    """Uninstall a release and its resources."""
    with runtime.exit_on_error():
        runtime.build_controller().uninstall(release, namespace or settings.default_namespace)
    typer.echo(f"release \"{release}\" uninstalled")
