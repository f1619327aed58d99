"""Pydantic request/response schemas for the FastAPI endpoints."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from src.documents.batch import BatchItemResult
from src.documents.models import Document, FieldMapping, Page, ProcessingStatus
from src.ocr.languages import LanguageSettings


class SortDirection(StrEnum):
    """Sort direction for paged document listings."""

    ASC = "asc"
    DESC = "desc"


class FieldMappingResponse(BaseModel):
    """Response schema for a single field mapping."""

    source_field: str
    target_field: str
    field_type: str
    extracted_value: str | None = None
    corrected_value: str | None = None
    confidence: int | None = None

    @classmethod
    def from_mapping(cls, mapping: FieldMapping) -> "FieldMappingResponse":
        return cls(
            source_field=mapping.source_field,
            target_field=mapping.target_field,
            field_type=mapping.field_type,
            extracted_value=mapping.extracted_value,
            corrected_value=mapping.corrected_value,
            confidence=mapping.confidence,
        )


class DocumentResponse(BaseModel):
    """Response schema for a document and its processing state."""

    id: int
    filename: str
    original_filename: str
    content_type: str
    file_size: int
    status: ProcessingStatus
    progress: int
    extracted_text: str | None = None
    extracted_json: str | None = None
    corrected_json: str | None = None
    merged_json: str | None = None
    error_message: str | None = None
    field_mappings: list[FieldMappingResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(
        cls, document: Document, merged_json: str | None = None
    ) -> "DocumentResponse":
        """Build a response from a domain document.

        Args:
            document: Persisted document.
            merged_json: Extracted record with corrections applied, if any.
        """
        return cls(
            id=document.id,
            filename=document.filename,
            original_filename=document.original_filename,
            content_type=document.content_type,
            file_size=document.file_size,
            status=document.status,
            progress=document.progress,
            extracted_text=document.extracted_text,
            extracted_json=document.extracted_json,
            corrected_json=document.corrected_json,
            merged_json=merged_json,
            error_message=document.error_message,
            field_mappings=[
                FieldMappingResponse.from_mapping(m) for m in document.field_mappings
            ],
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class DocumentPageResponse(BaseModel):
    """Response schema for a page of documents."""

    items: list[DocumentResponse]
    total: int
    page: int
    size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "DocumentPageResponse":
        return cls(
            items=[DocumentResponse.from_document(d) for d in page.items],
            total=page.total,
            page=page.page,
            size=page.size,
            total_pages=page.total_pages,
        )


class ProcessingAcceptedResponse(BaseModel):
    """Response schema for a processing request that was accepted."""

    document_id: int
    status: ProcessingStatus
    message: str


class BatchUploadItemResponse(BaseModel):
    """Response schema for a single file in a batch upload."""

    filename: str
    document: DocumentResponse | None = None
    error: str | None = None


class BatchUploadResponse(BaseModel):
    """Response schema for uploading multiple documents."""

    total_documents: int
    successful: int
    failed: int
    results: list[BatchUploadItemResponse]


class BatchProcessRequest(BaseModel):
    """Request schema for processing several documents."""

    document_ids: list[int] = Field(min_length=1)


class BatchItemResponse(BaseModel):
    """Response schema for one document in a batch run."""

    document_id: int
    status: ProcessingStatus | None = None
    error_message: str | None = None

    @classmethod
    def from_result(cls, result: BatchItemResult) -> "BatchItemResponse":
        return cls(
            document_id=result.document_id,
            status=result.status,
            error_message=result.error_message,
        )


class BatchProcessResponse(BaseModel):
    """Response schema for a finished batch run."""

    total_documents: int
    successful: int
    failed: int
    results: list[BatchItemResponse]


class CorrectionRequest(BaseModel):
    """Request schema for applying a manual correction."""

    corrected_json: str


class LanguageRequest(BaseModel):
    """Request schema for changing the OCR languages."""

    language: str
    additional_languages: list[str] = Field(default_factory=list)


class LanguageInfoResponse(BaseModel):
    """Response schema describing the active OCR languages."""

    language: str
    additional_languages: list[str]
    tesseract_languages: str
    vision_hints: list[str]
    supported_languages: dict[str, str]

    @classmethod
    def from_settings(
        cls, settings: LanguageSettings, supported: dict[str, str]
    ) -> "LanguageInfoResponse":
        return cls(
            language=settings.language,
            additional_languages=list(settings.additional_languages),
            tesseract_languages=settings.tesseract_tag,
            vision_hints=settings.vision_hints,
            supported_languages=supported,
        )


class EnginesResponse(BaseModel):
    """Response schema listing the usable OCR engines."""

    engines: list[str]
    default_engine: str
    auto_detect_handwriting: bool


class HandwritingAvailabilityResponse(BaseModel):
    """Response schema for handwriting recognition availability."""

    available: bool


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
    handwriting_available: bool


class ErrorResponse(BaseModel):
    """Response schema for failed requests."""

    error: str
    type: str
