"""Wiring shared by commands: controller construction and error exits."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer

from helm_steward.config.settings import settings
from helm_steward.core.errors import HelmStewardError
from helm_steward.core.lifecycle import ReleaseLifecycleController
from helm_steward.core.repository import RepositoryIndexStore


def build_controller() -> ReleaseLifecycleController:
    return ReleaseLifecycleController.from_settings(settings)


def build_repository_store() -> RepositoryIndexStore:
    return RepositoryIndexStore.from_settings(settings)


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print a HelmStewardError to stderr and exit 1."""
    try:
        yield
    except (HelmStewardError, ValueError, OSError) as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1) from err
