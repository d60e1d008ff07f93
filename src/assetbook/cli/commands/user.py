"""User management commands."""

import click
from assetbook.cli.error_handling import handle_domain_error
from assetbook.domain.errors import DomainError
from assetbook.domain.user import UserService


@click.group()
def user_group():
    """Manage ledger users (account owners)."""
    pass


@user_group.command("create")
@click.argument("name")
@click.option("--display-name", help="Full name shown in listings (defaults to NAME)")
@click.pass_context
def create_user(ctx, name: str, display_name: str | None):
    """Create a user.

    The first user created becomes the owner of every account that has no
    owner yet.

    Examples:
        assetbook user create alice --display-name "Alice Martin"
    """
    service = UserService(ctx.obj["db"])

    try:
        user_id = service.create_user(name=name, display_name=display_name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created user '{name}' (ID: {user_id})")


@user_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive users")
@click.pass_context
def list_users(ctx, include_inactive: bool):
    """List users."""
    service = UserService(ctx.obj["db"])

    users = service.list_users(include_inactive=include_inactive)
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 60)
    for u in users:
        status = "" if u.is_active else " (inactive)"
        click.echo(f"ID: {u.id:3d} | {u.name:15s} | {u.display_name}{status}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
