"""Document persistence.

:class:`DocumentRepository` is the seam to a real database; the in-memory
implementation stores deep copies so that callers only ever observe state
through explicit ``save`` calls, as they would with a database row.
"""

import copy
import threading
from abc import ABC, abstractmethod
from dataclasses import fields

from src.utils.logger import get_logger

from .models import Document, Page, PageRequest, ProcessingStatus, utcnow

logger = get_logger(__name__)

SORTABLE_FIELDS = frozenset(f.name for f in fields(Document)) - {"field_mappings"}


class DocumentRepository(ABC):
    """Storage operations required by the processing pipeline."""

    @abstractmethod
    def get(self, document_id: int) -> Document | None:
        """Load a document by id, or ``None`` if it does not exist."""

    @abstractmethod
    def save(self, document: Document) -> Document:
        """Insert or update a document and return the stored state."""

    @abstractmethod
    def find_by_status(self, status: ProcessingStatus) -> list[Document]:
        """Return all documents with the given status."""

    @abstractmethod
    def find_page(self, request: PageRequest) -> Page:
        """Return one sorted page of documents."""

    @abstractmethod
    def delete(self, document_id: int) -> bool:
        """Delete a document together with its field mappings."""


class InMemoryDocumentRepository(DocumentRepository):
    """Thread-safe repository backed by a dictionary."""

    def __init__(self) -> None:
        self._documents: dict[int, Document] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def get(self, document_id: int) -> Document | None:
        with self._lock:
            document = self._documents.get(document_id)
            return copy.deepcopy(document) if document is not None else None

    def save(self, document: Document) -> Document:
        with self._lock:
            if document.id is None:
                document.id = self._next_id
                self._next_id += 1
                document.created_at = utcnow()
            document.updated_at = utcnow()
            self._documents[document.id] = copy.deepcopy(document)
            return copy.deepcopy(document)

    def find_by_status(self, status: ProcessingStatus) -> list[Document]:
        with self._lock:
            return [
                copy.deepcopy(d)
                for d in sorted(self._documents.values(), key=lambda d: d.id)
                if d.status == status
            ]

    def find_page(self, request: PageRequest) -> Page:
        """Return one sorted page of documents.

        Raises:
            ValueError: If the sort field is unknown or the page parameters
                are negative.
        """
        if request.sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort documents by {request.sort_by!r}")
        if request.page < 0 or request.size < 1:
            raise ValueError("Page index must be >= 0 and page size >= 1")

        with self._lock:
            present = [
                d for d in self._documents.values()
                if getattr(d, request.sort_by) is not None
            ]
            missing = [
                d for d in self._documents.values()
                if getattr(d, request.sort_by) is None
            ]
            ordered = sorted(
                present,
                key=lambda d: (getattr(d, request.sort_by), d.id),
                reverse=request.descending,
            ) + sorted(missing, key=lambda d: d.id)
            start = request.page * request.size
            items = [copy.deepcopy(d) for d in ordered[start : start + request.size]]
            total = len(ordered)

        return Page(items=items, total=total, page=request.page, size=request.size)

    def delete(self, document_id: int) -> bool:
        with self._lock:
            removed = self._documents.pop(document_id, None)
        if removed is not None:
            logger.info(
                "Deleted document %d with %d field mappings",
                document_id,
                len(removed.field_mappings),
            )
        return removed is not None
