"""Domain records for uploaded documents and their processing state."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum


class ProcessingStatus(StrEnum):
    """Lifecycle stage of a document."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CORRECTED = "CORRECTED"


CORRECTABLE_STATUSES = frozenset(
    {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED, ProcessingStatus.CORRECTED}
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FieldMapping:
    """Per-field extraction metadata attached to a document.

    ``confidence`` is recorded at extraction time and is not consulted when
    a correction is applied.
    """

    source_field: str
    target_field: str
    field_type: str
    extracted_value: str | None = None
    corrected_value: str | None = None
    confidence: int | None = None


@dataclass
class Document:
    """One uploaded artifact and its processing state."""

    filename: str
    original_filename: str
    content_type: str
    file_size: int
    file_path: str
    id: int | None = None
    status: ProcessingStatus = ProcessingStatus.PENDING
    extracted_text: str | None = None
    extracted_json: str | None = None
    corrected_json: str | None = None
    error_message: str | None = None
    progress: int = 0
    field_mappings: list[FieldMapping] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_pdf(self) -> bool:
        return self.content_type == "application/pdf"


@dataclass
class PageRequest:
    """Pagination and sort parameters for listing documents."""

    page: int = 0
    size: int = 10
    sort_by: str = "created_at"
    descending: bool = True


@dataclass
class Page:
    """One page of documents."""

    items: list[Document]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total / self.size)
