"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.text import Text

from prefixcop.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from prefixcop.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="pc.ok")
    op = Text(f"  {result.op}", style="pc.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="pc.key")
    console.print(k, Text(str(value)), end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    pad = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 1000 else "dim"

    line = f"{pad}[{style}]{duration:>8.2f}ms[/{style}]  {escape(name)}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _render_issue_lines(console: Console, issues: list[dict[str, Any]]) -> None:
    for issue in issues:
        kind = str(issue.get("kind", "violation"))
        style = style_for_kind(kind)
        label = f"[{style}]{kind}[/{style}]" if style else kind
        console.print(f"  {label}: {escape(str(issue.get('message', '')))}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="pc.error")
    op = Text(f"  {result.op}", style="pc.op")
    first, _, rest = msg.partition("\n")
    console.print(label, op, Text(" — "), Text(first))
    for line in rest.splitlines():
        console.print(Text(f"  {line}"))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {escape(str(v))}")
    if verbose:
        _render_meta(console, result)


# ── Check renderers ───────────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a passing check; reporting mode may still list issues."""
    issues = result.data.get("issues", [])
    count = result.data.get("count", len(issues))
    _status_line(console, result)
    for key in ("output_directory", "interfaces_found", "implementors_checked"):
        if key in result.data:
            _field(console, key, result.data[key])

    if count == 0:
        console.print("[pc.ok]OK[/pc.ok]  No prefix violations found.")
    else:
        summary = result.data.get("summary", f"{count} prefix violations found:")
        console.print(f"\n[pc.warning]{escape(summary)}[/pc.warning]")
        _render_issue_lines(console, issues)
        console.print("\nReporting only; the build is not failed.")
    if verbose:
        _render_meta(console, result)


def _render_interfaces(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render the constrained interface inventory."""
    items = result.data.get("interfaces", [])
    if not items:
        console.print("No constrained interfaces found.")
        return

    for item in items:
        iface = escape(str(item.get("interface", "")))
        if item.get("malformed"):
            console.print(
                f"[pc.iface]{iface}[/pc.iface]  [pc.kind.malformed]no prefix declared[/pc.kind.malformed]"
            )
            continue
        prefix = escape(str(item.get("prefix", "")))
        impls = item.get("implementors", [])
        console.print(
            f"[pc.iface]{iface}[/pc.iface]  prefix [pc.prefix]'{prefix}'[/pc.prefix]"
            f"  ({len(impls)} implementors)"
        )
        for impl in impls:
            mark = "[pc.ok]ok[/pc.ok]" if impl.get("compliant") else "[pc.error]!![/pc.error]"
            console.print(f"  {mark} {escape(str(impl.get('type', '')))}")
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "check": _render_check,
    "interfaces": _render_interfaces,
}
