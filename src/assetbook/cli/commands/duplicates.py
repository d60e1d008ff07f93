"""Duplicate detection and merge commands."""

import click
from assetbook.cli.error_handling import handle_domain_error
from assetbook.domain.duplicates import DuplicateService
from assetbook.domain.entities import MatchStatus
from assetbook.domain.errors import DomainError
from assetbook.domain.merge import MergeService
from assetbook.utils.amount_parser import parse_amount


@click.group()
def duplicates_group():
    """Find, review and merge duplicate transactions."""
    pass


@duplicates_group.command("find")
@click.argument("transaction_id", type=int)
@click.option("--amount-tolerance", help="Maximum amount difference (default 0.01)")
@click.option("--date-tolerance", type=int, help="Maximum date difference in days (default 3)")
@click.option("--record", is_flag=True, help="Record candidates scoring at least 0.6 as matches")
@click.pass_context
def find_duplicates(
    ctx, transaction_id: int, amount_tolerance: str | None, date_tolerance: int | None, record: bool
) -> None:
    """List transactions that may duplicate TRANSACTION_ID."""
    service = DuplicateService(ctx.obj["db"])

    try:
        tolerance = parse_amount(amount_tolerance) if amount_tolerance is not None else None
        candidates = service.find_candidates(
            transaction_id, amount_tolerance=tolerance, date_tolerance_days=date_tolerance
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not candidates:
        click.echo("No duplicate candidates found.")
        return

    click.echo(f"\nFound {len(candidates)} candidate(s):")
    click.echo("-" * 90)
    for c in candidates:
        txn = c.transaction
        click.echo(
            f"{txn.id:<6} {str(txn.transaction_date):<12} {txn.amount:>12,.2f}  "
            f"{c.match_type.value:<9} {c.confidence}  {txn.description[:40]}"
        )
        if record and c.confidence >= service.config.record_threshold:
            match_id = service.record_match(transaction_id, txn.id, c.confidence, c.criteria, c.match_type)
            click.echo(f"       recorded as match #{match_id}")


@duplicates_group.command("detect")
@click.argument("import_batch_id")
@click.option("--auto-merge-exact", is_flag=True, help="Merge exact matches immediately")
@click.pass_context
def detect_duplicates(ctx, import_batch_id: str, auto_merge_exact: bool) -> None:
    """Record duplicate matches for every transaction of an import batch."""
    service = DuplicateService(ctx.obj["db"])

    try:
        summary = service.detect_duplicates_for_batch(import_batch_id, auto_merge_exact=auto_merge_exact)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Scanned {summary.transactions_scanned} transaction(s): "
        f"{len(summary.matches)} match(es) recorded, {len(summary.merged)} merged"
    )


@duplicates_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in MatchStatus]),
    help="Only matches with this status",
)
@click.pass_context
def list_matches(ctx, status: str | None) -> None:
    """List recorded matches, highest confidence first."""
    matches = DuplicateService(ctx.obj["db"]).list_matches(status=status)
    if not matches:
        click.echo("No matches found.")
        return

    click.echo(f"{'Match':<7} {'Primary':<8} {'Duplicate':<10} {'Type':<9} {'Conf.':<6} Status")
    for m in matches:
        click.echo(
            f"#{m.id:<6} {m.primary_transaction_id:<8} {m.duplicate_transaction_id:<10} "
            f"{m.match_type.value:<9} {m.confidence!s:<6} {m.status.value}"
        )


def _set_status(ctx, match_id: int, status: MatchStatus) -> None:
    try:
        DuplicateService(ctx.obj["db"]).update_match_status(match_id, status)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Match #{match_id} is now {status.value}")


@duplicates_group.command("confirm")
@click.argument("match_id", type=int)
@click.option("--merge", "merge_now", is_flag=True, help="Also merge the duplicate into the primary")
@click.pass_context
def confirm_match(ctx, match_id: int, merge_now: bool) -> None:
    """Confirm a match."""
    if not merge_now:
        _set_status(ctx, match_id, MatchStatus.CONFIRMED)
        return

    db = ctx.obj["db"]
    match = DuplicateService(db).get_match(match_id)
    if match is None:
        click.echo(f"Error: Transaction match {match_id} not found", err=True)
        ctx.exit(1)
    try:
        MergeService(db).merge(match.primary_transaction_id, match.duplicate_transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Match #{match_id} confirmed; transaction {match.duplicate_transaction_id} "
        f"merged into {match.primary_transaction_id}"
    )


@duplicates_group.command("reject")
@click.argument("match_id", type=int)
@click.pass_context
def reject_match(ctx, match_id: int) -> None:
    """Reject a match: the two transactions are distinct."""
    _set_status(ctx, match_id, MatchStatus.REJECTED)


@duplicates_group.command("reset")
@click.argument("match_id", type=int)
@click.pass_context
def reset_match(ctx, match_id: int) -> None:
    """Put a confirmed or rejected match back to pending."""
    _set_status(ctx, match_id, MatchStatus.PENDING)


@duplicates_group.command("merge")
@click.argument("primary_id", type=int)
@click.argument("duplicate_id", type=int)
@click.pass_context
def merge_transactions(ctx, primary_id: int, duplicate_id: int) -> None:
    """Hide DUPLICATE_ID behind PRIMARY_ID."""
    try:
        MergeService(ctx.obj["db"]).merge(primary_id, duplicate_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Merged transaction {duplicate_id} into {primary_id}")


@duplicates_group.command("unmerge")
@click.argument("transaction_id", type=int)
@click.pass_context
def unmerge_transaction(ctx, transaction_id: int) -> None:
    """Make a merged duplicate visible again."""
    try:
        primary_id = MergeService(ctx.obj["db"]).unmerge(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Unmerged transaction {transaction_id} from {primary_id}")


def register_commands(cli: click.Group) -> None:
    """Register duplicates commands with main CLI."""
    cli.add_command(duplicates_group, name="duplicates")
