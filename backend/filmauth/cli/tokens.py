"""Flask CLI commands for token housekeeping."""

from __future__ import annotations

import logging
from datetime import datetime

import click
from flask.cli import with_appcontext

from filmauth.core.auth import get_cleanup_service
from filmauth.models.base import as_utc
from filmauth.services._shared.errors import ServiceError
from filmauth.services.auth import CleanupReport

LOGGER = logging.getLogger(__name__)


def _echo_summary(report: CleanupReport) -> None:
    """Print the counters of one purge pass."""
    click.echo("Token cleanup summary:")
    click.echo(f"  cutoff     {report.ran_at.isoformat()}")
    click.echo(f"  blacklist  removed={report.removed_blacklist:>4}")
    click.echo(f"  refresh    removed={report.removed_refresh:>4}")


@click.group("tokens")
def tokens_cli() -> None:
    """Maintenance commands for refresh tokens and the blacklist."""


@tokens_cli.command("cleanup")
@click.option(
    "--before",
    type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"]),
    default=None,
    help="Cut-off (UTC). Defaults to now.",
)
@with_appcontext
def cleanup_command(before: datetime | None) -> None:
    """Delete blacklist entries and refresh tokens that already expired."""
    try:
        report = get_cleanup_service().purge_expired(as_utc(before) if before else None)
    except ServiceError as exc:
        LOGGER.exception("tokens.cleanup.failed")
        raise click.ClickException(f"Cleanup failed: {exc}") from exc
    _echo_summary(report)
