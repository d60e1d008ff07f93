"""Utility for resolving account paths or IDs to account IDs."""

from assetbook.domain.account import AccountService
from assetbook.domain.errors import AccountNotFound, account_not_found


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve an account path or ID to an account ID.

    Args:
        account_service: AccountService instance
        account: Colon-delimited path ("Assets:Bank:Checking") or ID (int, or a
            string of digits)

    Returns:
        Account ID

    Raises:
        AccountNotFound: If account is not found
    """
    if isinstance(account, str) and account.strip().isdigit():
        account = int(account.strip())

    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise AccountNotFound(account_not_found(account))
        return account

    return account_service.get_account_by_path(account).id
