"""CLI helpers for account and user resolution."""

from __future__ import annotations

import click
from assetbook.cli.error_handling import handle_domain_error
from assetbook.domain.account import AccountService
from assetbook.domain.entities import User
from assetbook.domain.errors import DomainError
from assetbook.domain.user import UserService
from assetbook.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account path or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)


def resolve_user_or_exit(ctx: click.Context, user_service: UserService, user: str) -> User:
    """Resolve user name or ID, or exit with a CLI error."""
    try:
        return user_service.resolve_user(user)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
