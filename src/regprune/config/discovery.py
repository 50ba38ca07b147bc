"""Config file discovery and parsing.

Walk-up finder locates ``regprune.toml`` (or ``regprune.yaml`` /
``regprune.yml``), similar to how git finds .git/.  Supports the
REGPRUNE_CONFIG env var and the --config CLI flag as overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

CONFIG_FILENAMES = ("regprune.toml", "regprune.yaml", "regprune.yml")
CONFIG_ENV_VAR = "REGPRUNE_CONFIG"
YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for a config file.

    Returns the path to the config file, or None if not found.
    Checks REGPRUNE_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        for name in CONFIG_FILENAMES:
            candidate = current / name
            if candidate.is_file():
                return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse *path* as YAML or TOML depending on its suffix.

    Raises:
        ValueError: The file is not valid YAML/TOML or is not a mapping.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            data = YAML(typ="safe").load(raw)
        except YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    else:
        try:
            data = tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return data
