"""Root CLI group for knadmin with global flags and command registration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from knadmin import __version__
from knadmin.commands import register_commands
from knadmin.commands._context import AppContext
from knadmin.config.discovery import CONFIG_ENV_VAR, CONFIG_FILENAME
from knadmin.config.settings import KnAdminSettings

_EPILOG = (
    f"Settings come from CLI flags, KNADMIN_* environment variables and "
    f"{CONFIG_FILENAME} (found by walking up from the current directory, "
    f"or named by {CONFIG_ENV_VAR} or --config)."
)


@click.group(invoke_without_command=True, epilog=_EPILOG)
@click.version_option(version=__version__, prog_name="knadmin")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-n",
    "--namespace",
    default=None,
    help="Namespace holding the config-domain ConfigMap (default: knative-serving).",
)
@click.option(
    "--manifest-dir",
    type=click.Path(file_okay=False, path_type=Path, resolve_path=True),
    default=None,
    help="Directory of ConfigMap manifests acting as the cluster.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    namespace: str | None,
    manifest_dir: Path | None,
) -> None:
    """knadmin — Knative administration CLI utility."""
    overrides: dict[str, Any] = {}
    cluster = {
        key: value
        for key, value in (("namespace", namespace), ("manifest_dir", manifest_dir))
        if value is not None
    }
    if cluster:
        overrides["cluster"] = cluster
    settings = KnAdminSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        **overrides,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
