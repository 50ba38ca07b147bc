"""Root CLI group for regprune with global flags and command registration."""

from __future__ import annotations

import click

from regprune import __version__
from regprune.commands import register_commands
from regprune.commands._context import AppContext
from regprune.config.settings import RegSettings


@click.group("regprune", invoke_without_command=True)
@click.version_option(version=__version__, prog_name="regprune")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Only print image:tag per deletion.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Config file path.")
@click.option(
    "--dry-run/--no-dry-run",
    default=None,
    help="Report deletions without issuing them (overrides the config file).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    dry_run: bool | None,
) -> None:
    """regprune — delete stale tags from a Docker registry by retention policy."""
    settings = RegSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        quiet=quiet or None,
        verbose=verbose or None,
        log_json=log_json or None,
        dry_run=dry_run,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
