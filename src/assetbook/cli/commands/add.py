"""Add and transfer commands: post a transaction manually."""

import click
from assetbook.cli.error_handling import handle_domain_error
from assetbook.domain.entities import NewJournalEntry
from assetbook.domain.errors import DomainError, ValidationError
from assetbook.domain.transaction import TransactionService
from assetbook.utils.amount_parser import parse_amount
from assetbook.utils.date_parser import parse_date


def parse_entry(value: str) -> NewJournalEntry:
    """Parse 'ACCOUNT=AMOUNT', where ACCOUNT is a path or numeric ID."""
    account, sep, amount = value.rpartition("=")
    if not sep or not account.strip():
        raise ValidationError(f"Entry '{value}' must look like ACCOUNT=AMOUNT")
    account = account.strip()
    ref = int(account) if account.isdigit() else account
    return NewJournalEntry(ref, parse_amount(amount))


def _parse_date_or_exit(ctx, value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@click.command("add")
@click.option(
    "--date",
    "date_str",
    required=True,
    help="Transaction date (YYYY-MM-DD, DD/MM/YYYY or 'today', 'yesterday')",
)
@click.option("--description", required=True, help="Transaction description")
@click.option(
    "--entry",
    "entries",
    multiple=True,
    required=True,
    help="ACCOUNT=AMOUNT, repeated; positive debits, negative credits",
)
@click.option("--reference", help="Reference number")
@click.option("--create-accounts", is_flag=True, help="Create missing account paths")
@click.pass_context
def add_transaction(
    ctx,
    date_str: str,
    description: str,
    entries: tuple[str, ...],
    reference: str | None,
    create_accounts: bool,
):
    """Post a balanced transaction.

    Examples:
        assetbook add --date 2024-01-15 --description "Groceries" \\
            --entry "Expenses:Food=52.30" --entry "Assets:Bank:Checking=-52.30"
        assetbook add --date 31/01/2024 --description "Salary" --create-accounts \\
            --entry "Assets:Checking=3 000,00" --entry "Income:Salary=-3 000,00"
    """
    service = TransactionService(ctx.obj["db"])
    txn_date = _parse_date_or_exit(ctx, date_str)

    try:
        parsed = [parse_entry(e) for e in entries]
        transaction_id = service.post(
            description=description,
            transaction_date=txn_date,
            entries=parsed,
            reference=reference,
            import_source="manual",
            auto_create_accounts=create_accounts,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    txn = service.get_transaction(transaction_id)
    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn.transaction_date}")
    click.echo(f"  Amount: {txn.amount:,.2f}")
    click.echo(f"  Description: {txn.description}")


@click.command("transfer")
@click.option("--date", "date_str", required=True, help="Transaction date")
@click.option("--description", required=True, help="Transaction description")
@click.option("--from", "from_account", required=True, help="Source account path or ID")
@click.option("--to", "to_account", required=True, help="Destination account path or ID")
@click.option("--amount", required=True, help="Positive amount to move")
@click.option("--create-accounts", is_flag=True, help="Create missing account paths")
@click.pass_context
def transfer(
    ctx,
    date_str: str,
    description: str,
    from_account: str,
    to_account: str,
    amount: str,
    create_accounts: bool,
):
    """Move money between two accounts.

    Examples:
        assetbook transfer --date today --description "To savings" \\
            --from "Assets:Checking" --to "Assets:Savings" --amount 200
    """
    service = TransactionService(ctx.obj["db"])
    txn_date = _parse_date_or_exit(ctx, date_str)

    def ref(account: str):
        return int(account) if account.strip().isdigit() else account

    try:
        transaction_id = service.transfer(
            description,
            txn_date,
            ref(from_account),
            ref(to_account),
            parse_amount(amount),
            import_source="manual",
            auto_create_accounts=create_accounts,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")


def register_commands(cli):
    """Register add and transfer commands with main CLI."""
    cli.add_command(add_transaction)
    cli.add_command(transfer)
