"""Operation-specific Rich renderers for ServiceResult.

The cleanup renderers print the audit trail other tooling parses::

    marking image [<name>] using [<rule>] retention policy
      <tag padded to 40 columns><excluded|delete|retain>

Keep that text stable.  Renderers are dispatched by ``result.op`` in
:func:`render_result`; unknown ops fall through to a key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.text import Text

from regprune.domain.types import Verdict
from regprune.output.console import create_console, get_output, style_for_verdict

if TYPE_CHECKING:
    from rich.console import Console

    from regprune.services.result import ServiceResult

TAG_COLUMN_WIDTH = 40


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        if "images" in result.data:
            _render_audit_trail(result, console)
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output: one ``image:tag`` per deletion, or the status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    deletions: dict[str, list[str]] = result.data.get("deletions", {})
    lines = [f"{image}:{tag}" for image, tags in deletions.items() for tag in tags]
    return "\n".join(lines) if lines else f"OK: {result.op}"


def pad_right(text: str, width: int = TAG_COLUMN_WIDTH) -> str:
    """Pad *text* to *width*; overlong text gets a single separating space.

    Examples:
        >>> pad_right("v1", 4) + "|"
        'v1  |'
        >>> pad_right("release", 4) + "|"
        'release |'
    """
    if len(text) > width:
        return text + " "
    return text.ljust(width)


def audit_line(tag: str, verdict: Verdict) -> str:
    """Plain-text form of one tag line of the audit trail."""
    return f"  {pad_right(tag)}{verdict.label}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult, suffix: str = "") -> None:
    console.print(Text("OK", style="reg.ok"), Text(f"  {result.op}{suffix}", style="reg.op"))


def _field(console: Console, key: str, value: Any, indent: int = 2) -> None:
    console.print(Text(f"{' ' * indent}{key}: ", style="reg.key"), Text(str(value)), sep="")


def _render_audit_trail(result: ServiceResult, console: Console) -> None:
    for image in result.data.get("images", []):
        header = Text("marking image [")
        header.append(image["name"], style="reg.image")
        header.append("] using [")
        header.append(image["rule"], style="reg.rule")
        header.append("] retention policy")
        console.print(header)
        for tag in image["tags"]:
            verdict = Verdict(tag["verdict"])
            line = Text(f"  {pad_right(tag['name'])}")
            line.append(verdict.label, style=style_for_verdict(verdict.value))
            console.print(line)

    for entry in result.data.get("deleted", []):
        console.print(Text(f"deleting image [{entry['image']}:{entry['tag']}]"))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text("ERROR", style="reg.error"),
        Text(f"  {result.op}", style="reg.op"),
        Text(" — "),
        Text(msg),
        sep="",
    )

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            _field(console, k, v, indent=4)


# ── Cleanup renderers ─────────────────────────────────────────────────


def _render_cleanup(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render ``clean`` and ``scan`` results: audit trail then summary."""
    _render_audit_trail(result, console)
    d = result.data
    _status_line(console, result, " (dry run)" if d.get("dry_run") else "")
    _field(console, "images", d.get("image_count", 0))
    _field(console, "marked", d.get("delete_count", 0))
    if not d.get("dry_run"):
        _field(console, "deleted", d.get("deleted_count", 0))
    if verbose:
        for entry in d.get("deleted", []):
            _field(console, f"{entry['image']}:{entry['tag']}", entry["digest"], indent=4)


# ── Config renderer ───────────────────────────────────────────────────


def _render_config(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the effective configuration as indented sections."""
    _status_line(console, result)
    _render_mapping(console, result.data, indent=2)


def _render_mapping(console: Console, data: dict[str, Any], indent: int) -> None:
    for key, value in data.items():
        if isinstance(value, dict):
            console.print(Text(f"{' ' * indent}{key}:", style="reg.key"))
            _render_mapping(console, value, indent + 2)
        elif isinstance(value, list) and value and isinstance(value[0], dict):
            console.print(Text(f"{' ' * indent}{key}:", style="reg.key"))
            for item in value:
                console.print(Text(f"{' ' * (indent + 2)}- {json.dumps(item)}"))
        else:
            _field(console, key, value, indent)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            value = json.dumps(value, separators=(",", ":"))
        _field(console, key, value)


_OP_RENDERERS = {
    "clean": _render_cleanup,
    "scan": _render_cleanup,
    "config": _render_config,
}
