"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``.  Owns the registry client (created lazily so
``--help`` and ``config`` never touch the network) and centralizes
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from regprune.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from regprune.config.settings import RegSettings
    from regprune.infrastructure.registry import RegistryClient
    from regprune.services.cleanup import CleanupService
    from regprune.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: RegSettings) -> None:
        self.settings = settings
        self._registry: RegistryClient | None = None

        from regprune.config.logging import bind_run_context, configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        bind_run_context(registry=settings.registry.url, dry_run=settings.dry_run)

    @property
    def registry(self) -> RegistryClient:
        """The registry client (created lazily on first access)."""
        if self._registry is None:
            from regprune.infrastructure.registry import RegistryClient

            self._registry = RegistryClient.from_config(self.settings.registry)
        return self._registry

    def cleanup_service(self) -> CleanupService:
        from regprune.services.cleanup import CleanupService

        return CleanupService(
            self.registry,
            self.settings.retention,
            max_workers=self.settings.registry.max_workers,
        )

    def close(self) -> None:
        if self._registry is not None:
            self._registry.close()
            self._registry = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
