"""Flask CLI commands for token maintenance and account administration."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from chatbot_api.core.container import get_container
from chatbot_api.models.user import Role
from chatbot_api.services._shared.errors import NotFoundError

LOGGER = logging.getLogger(__name__)


@click.group("auth")
def auth_cli() -> None:
    """Token maintenance and account administration commands."""


@auth_cli.command("sweep-tokens")
@with_appcontext
def sweep_tokens() -> None:
    """Delete expired refresh tokens and blacklist entries."""
    result = get_container().auth_service().cleanup_expired_tokens()
    click.echo(
        f"Swept refresh_tokens={result.refresh_tokens} "
        f"blacklist_entries={result.blacklist_entries}"
    )


@auth_cli.command("set-role")
@click.argument("email")
@click.argument("role", type=click.Choice([r.value for r in Role], case_sensitive=False))
@with_appcontext
def set_role(email: str, role: str) -> None:
    """Grant ROLE to the account registered under EMAIL."""
    try:
        user = get_container().auth_service().set_role(email, Role(role.lower()))
    except NotFoundError as exc:
        raise click.ClickException(exc.message) from exc
    LOGGER.info("auth.role_changed", extra={"user_id": user.id})
    click.echo(f"{user.email}: role={user.role}")


@auth_cli.command("deactivate")
@click.argument("email")
@with_appcontext
def deactivate(email: str) -> None:
    """Deactivate EMAIL and revoke all of its refresh tokens."""
    try:
        user = get_container().auth_service().set_active(email, False)
    except NotFoundError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"{user.email}: deactivated")
