"""Command group: manage Knative route domains."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from knadmin.commands._base import KnGroup

if TYPE_CHECKING:
    from knadmin.commands._context import AppContext


@click.group(
    cls=KnGroup,
    examples="""\
  knadmin domain set --custom-domain example.com
  knadmin domain set --custom-domain internal.example.com --selector app=internal
  knadmin domain unset --custom-domain internal.example.com
  knadmin --json domain list""",
)
def domain() -> None:
    """Manage route domains in the config-domain ConfigMap."""


@domain.command(
    name="set",
    examples="""\
  knadmin domain set --custom-domain example.com
  knadmin domain set --custom-domain dev.example.com --selector app=dev
  knadmin domain set --custom-domain dev.example.com --selector app=dev --selector team=a""",
)
@click.option(
    "--custom-domain",
    "custom_domain",
    default="",
    help="Desired custom domain name (e.g. example.com).",
)
@click.option(
    "--selector",
    "selectors",
    multiple=True,
    metavar="NAME=VALUE",
    help="Route label selector (repeatable).",
)
@click.pass_obj
def set_cmd(app: AppContext, custom_domain: str, selectors: tuple[str, ...]) -> None:
    """Set a route domain, optionally scoped by label selectors."""
    from knadmin.services.domain import DomainService

    app.emit(DomainService(app.cluster).set_domain(custom_domain, selectors))


@domain.command(
    examples="""\
  knadmin domain unset --custom-domain dev.example.com""",
)
@click.option(
    "--custom-domain",
    "custom_domain",
    default="",
    help="Custom domain name to remove.",
)
@click.pass_obj
def unset(app: AppContext, custom_domain: str) -> None:
    """Remove a route domain."""
    from knadmin.services.domain import DomainService

    app.emit(DomainService(app.cluster).unset_domain(custom_domain))


@domain.command(
    name="list",
    examples="""\
  knadmin domain list
  knadmin --json domain list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List configured route domains and their selectors."""
    from knadmin.services.domain import DomainService

    app.emit(DomainService(app.cluster).list_domains())
