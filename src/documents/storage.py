"""Filesystem storage for uploaded document bytes."""

import uuid
from pathlib import Path

from src.utils.logger import get_logger

from .exceptions import ProcessingError

logger = get_logger(__name__)


class DocumentStorage:
    """Stores uploaded files under a single directory.

    Args:
        upload_directory: Directory that receives uploaded files. Created
            if it does not exist.
    """

    def __init__(self, upload_directory: Path | str) -> None:
        self.upload_directory = Path(upload_directory)
        self.upload_directory.mkdir(parents=True, exist_ok=True)

    def save(self, content: bytes, original_filename: str) -> tuple[str, str]:
        """Write file content under a unique name.

        Args:
            content: Raw file bytes.
            original_filename: Client-supplied file name; only its final
                component is kept.

        Returns:
            Tuple of (stored_filename, storage_path).
        """
        safe_name = Path(original_filename or "document").name
        filename = f"{uuid.uuid4()}_{safe_name}"
        path = self.upload_directory / filename
        path.write_bytes(content)
        logger.debug("Stored %d bytes at %s", len(content), path)
        return filename, str(path)

    def read(self, path: str) -> bytes:
        """Read stored file content.

        Args:
            path: Storage path returned by :meth:`save`.

        Returns:
            Raw file bytes.

        Raises:
            ProcessingError: If the file no longer exists or cannot be read.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ProcessingError(f"File not found: {path}")
        try:
            return file_path.read_bytes()
        except OSError as exc:
            raise ProcessingError(f"Could not read file {path}: {exc}") from exc
