"""Transaction management commands."""

import click
from assetbook.cli.date_filters import resolve_cli_date_range
from assetbook.cli.error_handling import handle_domain_error
from assetbook.domain.account import AccountService
from assetbook.domain.duplicates import DuplicateService
from assetbook.domain.errors import DomainError
from assetbook.domain.transaction import TransactionService
from assetbook.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD, DD/MM/YYYY or 'today')")
@click.option("--end-date", help="End date (YYYY-MM-DD, DD/MM/YYYY or 'today')")
@click.option(
    "--period",
    type=click.Choice(["this-month", "this-year", "last-month", "last-year"]),
    help="Named date range",
)
@click.option("--account", help="Only transactions touching this account path or its children")
@click.option("--batch", "import_batch_id", help="Only transactions from this import batch")
@click.option("--all", "include_hidden", is_flag=True, help="Include duplicates hidden by a merge")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    account: str | None,
    import_batch_id: str | None,
    include_hidden: bool,
):
    """View transactions with optional filters.

    Duplicates hidden by a merge are left out unless --all is given.
    """
    service = TransactionService(ctx.obj["db"])
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    try:
        transactions = service.list_transactions(
            start_date=start,
            end_date=end,
            account_path=account,
            import_batch_id=import_batch_id,
            include_hidden=include_hidden,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 90)
    click.echo(f"{'ID':<6} {'Date':<12} {'Amount':>12}  {'Source':<12} {'Description':<40}")
    click.echo("-" * 90)
    for txn in transactions:
        marker = f" [merged into {txn.merged_into_id}]" if txn.is_duplicate else ""
        click.echo(
            f"{txn.id:<6} {str(txn.transaction_date):<12} {txn.amount:>12,.2f}  "
            f"{(txn.import_source or ''):<12} {txn.description[:40]}{marker}"
        )


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int) -> None:
    """Show a transaction with its entries and duplicate matches."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"Transaction ID: {txn.id}")
    click.echo(f"  Date: {txn.transaction_date}")
    click.echo(f"  Description: {txn.description}")
    if txn.reference:
        click.echo(f"  Reference: {txn.reference}")
    if txn.import_source:
        click.echo(f"  Source: {txn.import_source} (batch {txn.import_batch_id or '-'})")
    if txn.is_duplicate:
        click.echo(f"  Hidden: merged into transaction {txn.merged_into_id}")
    click.echo("  Entries:")
    for entry in txn.entries:
        account = account_service.get_account(entry.account_id)
        path = account.full_path if account is not None else f"#{entry.account_id}"
        memo = f"  ({entry.memo})" if entry.memo else ""
        click.echo(f"    {path:<40} {entry.amount:>12,.2f}{memo}")

    matches = DuplicateService(db).get_matches_for_transaction(transaction_id)
    if matches:
        click.echo("  Matches:")
        for m in matches:
            other = m.duplicate_transaction_id if m.primary_transaction_id == txn.id else m.primary_transaction_id
            click.echo(
                f"    #{m.id}: with {other} | {m.match_type.value} {m.confidence} | {m.status.value}"
            )


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--description", help="New description")
@click.option("--reference", help="New reference")
@click.option("--date", "date_str", help="New date")
@click.pass_context
def update_transaction(
    ctx, transaction_id: int, description: str | None, reference: str | None, date_str: str | None
) -> None:
    """Update header fields of a transaction.

    Entries cannot be edited one by one; post a correcting transaction instead.
    """
    service = TransactionService(ctx.obj["db"])

    txn_date = None
    if date_str is not None:
        try:
            txn_date = parse_date(date_str)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        service.update_transaction(
            transaction_id, description=description, reference=reference, transaction_date=txn_date
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction with its entries and matches.

    Examples:
        assetbook transaction delete 1
    """
    service = TransactionService(ctx.obj["db"])

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
