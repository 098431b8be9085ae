"""Rich Console factory and theme for knadmin output.

Consoles render to a StringIO buffer so renderers keep a
``ServiceResult -> str`` contract. In non-TTY environments (tests,
pipes) Rich disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

KN_THEME = Theme(
    {
        "kn.ok": "bold green",
        "kn.error": "bold red",
        "kn.warning": "bold yellow",
        "kn.op": "bold cyan",
        "kn.key": "dim",
        "kn.domain": "bold blue",
        "kn.selector": "magenta",
    }
)


CONSOLE_WIDTH = 120


def create_console() -> Console:
    """Create a fixed-width Console that renders to a StringIO buffer."""
    return Console(file=StringIO(), theme=KN_THEME, highlight=False, width=CONSOLE_WIDTH)


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
