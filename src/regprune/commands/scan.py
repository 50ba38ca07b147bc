"""Command: dry-run report of what clean would delete."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from regprune.commands._base import RegCommand

if TYPE_CHECKING:
    from regprune.commands._context import AppContext

EXAMPLES = (
    ("regprune scan", "audit trail of every image"),
    ("regprune -q scan", "image:tag per line, pipe-friendly"),
    ("regprune --json scan", "verdicts as JSON"),
)


@click.command(cls=RegCommand, examples=EXAMPLES)
@click.pass_obj
def scan(app: AppContext) -> None:
    """Evaluate every image and report verdicts without deleting anything."""
    app.emit(app.cleanup_service().plan())
