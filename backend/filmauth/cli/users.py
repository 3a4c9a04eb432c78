"""Flask CLI commands for account administration."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from filmauth.core.auth import get_account_service
from filmauth.models.user import Role
from filmauth.services._shared.errors import ConflictError
from filmauth.services.account import RegisterIn


@click.group("users")
def users_cli() -> None:
    """Account administration commands."""


@users_cli.command("create-admin")
@click.argument("email")
@click.argument("username")
@click.password_option("--password", help="Password for the new account.")
@with_appcontext
def create_admin_command(email: str, username: str, password: str) -> None:
    """Create an ``ADMIN`` account; the only way to obtain that role."""
    try:
        account = get_account_service().register(
            RegisterIn(email=email, username=username, password=password, role=Role.ADMIN)
        )
    except (ConflictError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created admin #{account.id} <{account.email}>")
