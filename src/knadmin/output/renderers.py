"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers
are dispatched by ``result.op`` in :func:`render_result`; unknown ops
fall through to a generic key-value renderer.

User-controlled strings (domains, selectors, error messages) are always
wrapped in :class:`~rich.text.Text` so that ``[app=test]`` is printed
literally instead of being parsed as console markup.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from knadmin.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from knadmin.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
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

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("domain", "")) for item in items)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="kn.key")
    if isinstance(value, (dict, list)):
        value = _json.dumps(value, separators=(",", ":"))
    style = "kn.domain" if key == "domain" else ""
    console.print(k, Text(str(value), style=style), sep="")


def _selector_text(selector: dict[str, str]) -> str:
    return ",".join(f"{k}={v}" for k, v in selector.items())


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="kn.error")
    op = Text(f"  {result.op}", style="kn.op")
    console.print(label, op, Text(" — "), Text(msg), sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Domain renderers ──────────────────────────────────────────────────


def _render_domain_mutation(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render set_domain / unset_domain as the status message."""
    console.print(Text(str(result.data.get("message", result.op))), soft_wrap=True)
    if verbose:
        for key in ("changed", "namespace", "name", "resource_version"):
            if key in result.data:
                _field(console, key, result.data[key])


def _render_domain_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render list_domains as a table of domain → selector."""
    items: list[dict[str, Any]] = result.data.get("items", [])
    if not items:
        console.print(Text("No route domains configured.", style="dim"))
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Domain", style="kn.domain", no_wrap=True)
    table.add_column("Selector", style="kn.selector")
    for item in items:
        table.add_row(
            Text(str(item.get("domain", ""))),
            Text(_selector_text(item.get("selector") or {})),
        )
    console.print(table)
    if verbose:
        _field(console, "count", result.data.get("count", len(items)))


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    console.print(Text("OK", style="kn.ok"), Text(f"  {result.op}", style="kn.op"), sep="")
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "set_domain": _render_domain_mutation,
    "unset_domain": _render_domain_mutation,
    "list_domains": _render_domain_table,
}
