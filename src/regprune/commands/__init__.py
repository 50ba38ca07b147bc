"""Subcommand modules for regprune.

Provides register_commands(), which uses deferred imports to keep
``regprune --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from regprune.commands.clean import clean
    from regprune.commands.config_cmd import config_cmd
    from regprune.commands.scan import scan

    cli.add_command(clean)
    cli.add_command(scan)
    cli.add_command(config_cmd)
