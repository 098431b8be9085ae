"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Opens the cluster lazily and centralizes result
emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from knadmin.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from knadmin.config.settings import KnAdminSettings
    from knadmin.infrastructure.cluster import Cluster
    from knadmin.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The cluster is created on first use so ``--help`` and ``--version``
    never touch cluster state. Tests may pass a prebuilt *cluster*.
    """

    def __init__(self, settings: KnAdminSettings, *, cluster: Cluster | None = None) -> None:
        self.settings = settings
        self._cluster = cluster

        from knadmin.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def cluster(self) -> Cluster:
        """The cluster handle (created lazily on first access)."""
        if self._cluster is None:
            from knadmin.infrastructure.cluster import Cluster

            self._cluster = Cluster(self.settings.cluster)
        return self._cluster

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout and returns. Warnings go to stderr so
          they don't pollute piped output.
        * Failure: writes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
