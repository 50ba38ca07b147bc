"""RegCommand — Click command carrying a table of usage examples.

Examples are ``(invocation, note)`` pairs.  ``--help`` only mentions that
they exist; ``--examples`` renders them as a definition list with Click's
own help formatter and exits.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click

Example = tuple[str, str]


class RegCommand(click.Command):
    """Click Command accepting an ``examples`` keyword."""

    def __init__(self, *args: Any, examples: Sequence[Example] = (), **kwargs: Any) -> None:
        if examples and not kwargs.get("epilog"):
            kwargs["epilog"] = "Run with --examples for typical invocations."
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples.",
                )
            )

    def format_examples(self, ctx: click.Context) -> str:
        formatter = ctx.make_formatter()
        with formatter.section(f"Examples for '{ctx.command_path}'"):
            formatter.write_dl([(f"$ {cmd}", note) for cmd, note in self.examples])
        return formatter.getvalue().rstrip("\n")

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(self.format_examples(ctx))
        ctx.exit(0)
