"""Account management commands."""

from decimal import Decimal, InvalidOperation

import click
from assetbook.cli.account_resolution import resolve_account_or_exit, resolve_user_or_exit
from assetbook.cli.error_handling import handle_domain_error
from assetbook.domain.account import AccountService, infer_account_type, split_path
from assetbook.domain.entities import PATH_SEPARATOR, AccountType, AccountSubtype
from assetbook.domain.errors import DomainError, InvalidPercentage
from assetbook.domain.ownership import OwnershipService, normalize_percentage
from assetbook.domain.user import UserService

TYPE_CHOICE = click.Choice([t.value for t in AccountType], case_sensitive=False)
SUBTYPE_CHOICE = click.Choice([s.value for s in AccountSubtype], case_sensitive=False)


def parse_share(value: str) -> Decimal:
    """Read '60%' or '0.6' as the fraction 0.6."""
    text = value.strip()
    try:
        if text.endswith("%"):
            return normalize_percentage(Decimal(text[:-1].strip()) / 100)
        return normalize_percentage(Decimal(text))
    except InvalidOperation as e:
        raise InvalidPercentage(f"Invalid ownership percentage: {value!r}") from e


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("path", metavar="PATH")
@click.option("--type", "account_type", type=TYPE_CHOICE, help="Account type (inferred from the root if omitted)")
@click.option("--subtype", "account_subtype", type=SUBTYPE_CHOICE, default="category", help="Subtype of the new account")
@click.option("--currency", default="EUR", show_default=True, help="Currency code")
@click.option("--notes", help="Free-text notes")
@click.option("--owner", help="User name or ID that owns 100% (defaults to the first user)")
@click.pass_context
def create_account(
    ctx,
    path: str,
    account_type: str | None,
    account_subtype: str,
    currency: str,
    notes: str | None,
    owner: str | None,
):
    """Create an account, creating missing parents as categories.

    Examples:
        assetbook account create "Assets:Bank:Checking" --subtype checking
        assetbook account create "Liabilities:Visa" --subtype credit_card
        assetbook account create "Savings" --type asset --subtype savings
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    owner_id = None
    if owner is not None:
        owner_id = resolve_user_or_exit(ctx, UserService(db), owner).id

    try:
        segments = split_path(path)
        parent_id = None
        if len(segments) > 1:
            parent_id = service.resolve_or_create(
                PATH_SEPARATOR.join(segments[:-1]), account_type=account_type, creator_id=owner_id
            )
        if account_type is None:
            if parent_id is not None:
                account_type = service.get_account(parent_id).account_type
            else:
                account_type = infer_account_type(segments[0])

        account_id = service.create_account(
            name=segments[-1],
            account_type=account_type,
            account_subtype=account_subtype,
            parent_id=parent_id,
            currency=currency,
            notes=notes,
            owner_id=owner_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    created = service.get_account(account_id)
    click.echo(f"Created account '{created.full_path}' (ID: {account_id})")


@account_group.command("list")
@click.option("--type", "account_type", type=TYPE_CHOICE, help="Only accounts of this type")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive accounts")
@click.pass_context
def list_accounts(ctx, account_type: str | None, include_inactive: bool):
    """List accounts as a tree."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(account_type=account_type, include_inactive=include_inactive)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        depth = acc.full_path.count(PATH_SEPARATOR)
        label = f"{'  ' * depth}{acc.name}"
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:4d} | {label:40s} | {acc.account_type.value:9s} | "
            f"{acc.account_subtype.value}{status}"
        )


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_account(ctx, account: str, new_name: str) -> None:
    """Rename an account; paths of its descendants follow.

    ACCOUNT can be an account path or ID.

    Examples:
        assetbook account rename "Assets:Bank" "Bank1"
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        updated = service.move_or_rename(account_id, new_name=new_name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Renamed account to '{updated.full_path}'")


@account_group.command("move")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_parent", metavar="NEW_PARENT", required=False)
@click.option("--root", is_flag=True, help="Make the account a root account")
@click.pass_context
def move_account(ctx, account: str, new_parent: str | None, root: bool) -> None:
    """Move an account under another parent of the same type.

    Examples:
        assetbook account move "Assets:Checking" "Assets:Bank"
        assetbook account move "Assets:Bank:Old" --root
    """
    if root == (new_parent is not None):
        click.echo("Error: Give either NEW_PARENT or --root.", err=True)
        ctx.exit(1)

    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    parent_id = None if root else resolve_account_or_exit(ctx, service, new_parent)

    try:
        updated = service.move_or_rename(account_id, new_parent_id=parent_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Moved account to '{updated.full_path}'")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account. Its history is kept.

    The account can only be deactivated once all its children are inactive.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.deactivate_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deactivated account {account_id}")


@account_group.command("reactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def reactivate_account(ctx, account: str) -> None:
    """Reactivate a deactivated account."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.reactivate_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Reactivated account {account_id}")


@account_group.command("ownership")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_ownership(ctx, account: str) -> None:
    """Show who owns an account."""
    db = ctx.obj["db"]
    account_service = AccountService(db)
    user_service = UserService(db)
    account_id = resolve_account_or_exit(ctx, account_service, account)

    shares = OwnershipService(db).get_account_ownership(account_id)
    if not shares:
        click.echo("Account has no owner.")
        return

    for share in shares:
        user = user_service.get_user(share.user_id)
        name = user.name if user is not None else f"#{share.user_id}"
        click.echo(f"{name:15s} {share.percentage * 100:7.2f}%")
    total = sum(s.percentage for s in shares)
    click.echo(f"{'Total':15s} {total * 100:7.2f}%")


@account_group.command("set-owner")
@click.argument("account", metavar="ACCOUNT")
@click.argument("user", metavar="USER")
@click.argument("percentage", metavar="PERCENTAGE")
@click.pass_context
def set_owner(ctx, account: str, user: str, percentage: str) -> None:
    """Set a user's share of an account.

    PERCENTAGE is a fraction (0.6) or a percentage (60%).

    Examples:
        assetbook account set-owner "Assets:Joint" alice 50%
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    owner = resolve_user_or_exit(ctx, UserService(db), user)

    try:
        share = parse_share(percentage)
        OwnershipService(db).set_ownership(account_id, owner.id, share)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"{owner.name} now owns {share * 100:.2f}% of account {account_id}")


@account_group.command("remove-owner")
@click.argument("account", metavar="ACCOUNT")
@click.argument("user", metavar="USER")
@click.pass_context
def remove_owner(ctx, account: str, user: str) -> None:
    """Remove a user's share of an account."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    owner = resolve_user_or_exit(ctx, UserService(db), user)

    if OwnershipService(db).remove_ownership(account_id, owner.id):
        click.echo(f"Removed {owner.name} from account {account_id}")
    else:
        click.echo(f"{owner.name} does not own account {account_id}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
