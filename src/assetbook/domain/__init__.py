"""Domain layer for assetbook application."""

__all__ = [
    "AccountService",
    "OwnershipService",
    "UserService",
    "TransactionService",
    "DuplicateService",
    "MatchingConfig",
    "MergeService",
    "FileImportService",
]

_SERVICES = {
    "AccountService": "assetbook.domain.account",
    "OwnershipService": "assetbook.domain.ownership",
    "UserService": "assetbook.domain.user",
    "TransactionService": "assetbook.domain.transaction",
    "DuplicateService": "assetbook.domain.duplicates",
    "MatchingConfig": "assetbook.domain.matching",
    "MergeService": "assetbook.domain.merge",
    "FileImportService": "assetbook.domain.file_import",
}


# Services import the database layer, which imports entities from this
# package, so they are loaded lazily
def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
