"""Command: show the effective configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from regprune.commands._base import RegCommand
from regprune.services.result import ServiceResult

if TYPE_CHECKING:
    from regprune.commands._context import AppContext

EXAMPLES = (
    ("regprune config", "effective settings, password masked"),
    ("regprune -c regprune.yaml config", "validate a file before deploying it"),
    ("regprune --json config", "settings as JSON"),
)


@click.command(
    "config",
    cls=RegCommand,
    examples=EXAMPLES,
)
@click.pass_obj
def config_cmd(app: AppContext) -> None:
    """Validate the configuration and print it with secrets masked."""
    app.emit(ServiceResult(ok=True, op="config", data=app.settings.summary()))
