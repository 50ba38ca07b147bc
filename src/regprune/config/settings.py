"""Unified settings — CLI flags, env vars, and the config file in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``REGPRUNE_*`` prefix, ``__`` for nesting
  3. Config file  — ``regprune.toml``/``regprune.yaml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`ConfigFileSettingsSource`
that reuses the walk-up discovery from :mod:`regprune.config.discovery`.
Validation happens here, before any registry interaction: a bad regex or
a rule that keeps nothing aborts the process with a click error.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from regprune.config.discovery import find_config, read_config_file
from regprune.config.models import RegistryConfig, RetentionConfig

# Top-level keys used by legacy CamelCase YAML configs.
_LEGACY_KEYS: dict[str, str] = {
    "DryRun": "dry_run",
    "DockerRegistry": "registry",
    "RetentionPolicy": "retention",
}


class ConfigFileSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a TOML or YAML config file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if path and path.is_file():
            try:
                raw = read_config_file(path)
            except ValueError as exc:
                raise click.ClickException(str(exc)) from exc
            self._data = {_LEGACY_KEYS.get(k, k): v for k, v in raw.items()}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full config data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for the config path during construction.
_tls = threading.local()


class RegSettings(BaseSettings):
    """Unified settings for the regprune CLI.

    Stored on :class:`~regprune.commands._context.AppContext` at the CLI
    root level and frozen for the whole run.

    Attributes:
        config_path: The config file actually loaded, or None.
        dry_run: Compute and report deletions without issuing them.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "REGPRUNE_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    dry_run: bool = False

    # --- Config file sections ---
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the config file source between env vars and defaults."""
        path = getattr(_tls, "config_path", None)
        return (
            init_settings,
            env_settings,
            ConfigFileSettingsSource(settings_cls, path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> RegSettings:
        """Construct settings from a CLI invocation.

        Uses the explicit *config_path* or discovers one by walking up
        from *start*.  Flags passed as None are left to lower-priority
        sources.

        Raises:
            click.ClickException: The config file is missing, unreadable,
                or fails validation.
        """
        path: Path | None
        if config_path:
            path = Path(config_path)
            if not path.is_file():
                raise click.ClickException(f"Config file not found: {path}")
        else:
            path = find_config(start)

        flags = {k: v for k, v in cli_flags.items() if v is not None}

        _tls.config_path = path
        try:
            return cls(config_path=path, **flags)
        except ValidationError as exc:
            raise click.ClickException(f"Invalid configuration:\n{exc}") from exc
        finally:
            _tls.config_path = None

    def summary(self) -> dict[str, Any]:
        """JSON-safe view of the effective configuration, secrets masked."""
        return self.model_dump(
            mode="json",
            include={"config_path", "dry_run", "registry", "retention"},
        )
