"""Output mode selection for ServiceResult.

The CLI renders results for humans (Rich), for scripts (``--quiet``)
or for machines (``--json``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from knadmin.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from knadmin.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output flags resolved from the global CLI options."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult according to *settings*.

    JSON wins over quiet, quiet wins over the human renderer.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
