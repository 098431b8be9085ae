"""Subcommand modules for knadmin.

Provides register_commands(), which imports command modules lazily so
``knadmin --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from knadmin.commands.domain import domain

    cli.add_command(domain)
