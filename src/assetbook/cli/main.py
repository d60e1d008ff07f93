"""Main CLI entry point."""

import click
from assetbook.database.factories import create_sqlite_database
from assetbook.logging_config import configure_logging

# Import and register all commands at module level
from assetbook.cli.commands import (
    user,
    account,
    add,
    transaction,
    duplicates,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides ASSETBOOK_DB_PATH environment variable)",
    envvar="ASSETBOOK_DB_PATH",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Assetbook - personal double-entry ledger.

    Post balanced transactions over a hierarchical chart of accounts shared
    between several owners, and merge the duplicates that overlapping
    imports produce.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose=verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
account.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
duplicates.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
