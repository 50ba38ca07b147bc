"""Command: apply the retention policy and delete stale tags."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from regprune.commands._base import RegCommand

if TYPE_CHECKING:
    from regprune.commands._context import AppContext

EXAMPLES = (
    ("regprune clean", "delete per config, honouring dry_run"),
    ("regprune --dry-run clean", "report only"),
    ("regprune -c /etc/regprune.yaml clean", "use an explicit config file"),
    ("regprune --json clean > audit.json", "keep a machine-readable audit"),
    ("regprune -q clean", "print image:tag per deletion"),
)


@click.command(cls=RegCommand, examples=EXAMPLES)
@click.pass_obj
def clean(app: AppContext) -> None:
    """Scan the registry and delete tags marked by the retention policy."""
    app.emit(app.cleanup_service().run(dry_run=app.settings.dry_run))
