"""Imported file tracking, used by importers to refuse re-imports."""

import hashlib
import logging
import uuid
from pathlib import Path
from typing import Optional

from assetbook.database.base import Database
from assetbook.domain.entities import ImportedFile
from assetbook.domain.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class FileImportService:
    """Service for recording which files have been imported."""

    def __init__(self, db: Database):
        """Initialize file import service.

        Args:
            db: Database instance
        """
        self.db = db

    @staticmethod
    def calculate_file_hash(file_path: str | Path) -> str:
        """Return the SHA-256 hex digest of a file's content."""
        digest = hashlib.sha256()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
        return digest.hexdigest()

    @staticmethod
    def new_batch_id() -> str:
        """Return a fresh import batch identifier."""
        return uuid.uuid4().hex

    def is_file_already_imported(self, file_path: str | Path) -> Optional[ImportedFile]:
        """Return the earlier import of identical content, or None."""
        return self.db.get_imported_file_by_hash(self.calculate_file_hash(file_path))

    def is_file_path_already_imported(self, file_path: str | Path, import_source: str) -> bool:
        """Check whether this path was already imported for the source."""
        return self.db.imported_file_exists(str(Path(file_path).resolve()), import_source)

    def record_file_import(
        self,
        file_path: str | Path,
        import_source: str,
        import_batch_id: str,
        transaction_count: int = 0,
        notes: Optional[str] = None,
    ) -> int:
        """Record a successful import.

        Returns:
            Imported file record ID

        Raises:
            ValidationError: If the file does not exist
            ConflictError: If the same content or path was already imported
        """
        path = Path(file_path).resolve()
        if not path.is_file():
            raise ValidationError(f"File not found: {file_path}")

        file_hash = self.calculate_file_hash(path)
        previous = self.db.get_imported_file_by_hash(file_hash)
        if previous is not None:
            raise ConflictError(
                f"File '{path.name}' has already been imported on "
                f"{previous.imported_at:%Y-%m-%d} (batch {previous.import_batch_id})"
            )

        record_id = self.db.create_imported_file(
            file_path=str(path),
            file_name=path.name,
            file_hash=file_hash,
            file_size=path.stat().st_size,
            import_source=import_source,
            import_batch_id=import_batch_id,
            transaction_count=transaction_count,
            notes=notes,
        )
        logger.info("Recorded import of %s (%d transactions, batch %s)", path.name, transaction_count, import_batch_id)
        return record_id

    def list_imported_files(self, import_source: Optional[str] = None, limit: int = 50) -> list[ImportedFile]:
        """List imported files, most recent first."""
        return self.db.list_imported_files(import_source=import_source, limit=limit)
