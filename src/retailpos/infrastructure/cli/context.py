"""Shared plumbing for CLI commands: lazy service wiring and error mapping."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from retailpos.domain.exceptions import DomainException
from retailpos.infrastructure.bootstrap import AppContext, build_context
from retailpos.infrastructure.config import (
    ConfigurationError,
    find_config_file,
    read_settings,
)
from retailpos.infrastructure.persistence.exceptions import PersistenceError

# Everything a command reports to the user instead of crashing.
HANDLED_ERRORS = (DomainException, PersistenceError, ConfigurationError)


class CliState:
    """Per-invocation state stored on the root click context."""

    def __init__(self, config_path: Optional[Path]) -> None:
        self.config_path = config_path
        self.app: Optional[AppContext] = None


def app_context() -> AppContext:
    """Return the wired services, opening the database on first use."""
    ctx = click.get_current_context()
    state = ctx.find_object(CliState)
    if state is None:
        raise click.ClickException("CLI state is not initialised")
    if state.app is None:
        try:
            settings = read_settings(find_config_file(state.config_path))
            state.app = build_context(settings)
        except HANDLED_ERRORS as exc:
            raise click.ClickException(str(exc))
        ctx.find_root().call_on_close(state.app.shutdown)
    return state.app
