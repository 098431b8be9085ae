"""Click base classes carrying knadmin usage examples.

``KnCommand`` and ``KnGroup`` take an ``examples`` string and expose it
through an eager ``--examples`` flag, keeping ``--help`` short. A group's
``--examples`` also prints the examples of each of its subcommands.
"""

from __future__ import annotations

from typing import Any

import click


def _collect_examples(cmd: click.Command, path: str) -> list[tuple[str, str]]:
    """Return ``(command path, examples)`` pairs for *cmd* and its subcommands."""
    found: list[tuple[str, str]] = []
    own = getattr(cmd, "examples", None)
    if own:
        found.append((path, own))
    if isinstance(cmd, click.Group):
        for name in sorted(cmd.commands):
            found.extend(_collect_examples(cmd.commands[name], f"{path} {name}"))
    return found


def _add_examples_option(cmd: click.Command) -> None:
    """Attach an eager ``--examples`` flag to a knadmin command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        sections = _collect_examples(ctx.command, ctx.command_path)
        for i, (path, examples) in enumerate(sections):
            if i:
                click.echo()
            click.echo(f"knadmin examples for '{path}':")
            click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class KnCommand(click.Command):
    """Command with an optional ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self)


class KnGroup(click.Group):
    """Group whose subcommands default to :class:`KnCommand`."""

    command_class = KnCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self)
