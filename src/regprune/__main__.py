"""Allow ``python -m regprune``."""

from regprune.cli import cli

cli(prog_name="regprune")
