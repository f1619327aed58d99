"""FastAPI application for the picture-to-JSON document API.

Provides REST endpoints for uploading documents, starting single and batch
processing runs, polling document state, applying corrections, and
configuring OCR languages.
"""

import shutil
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.documents.batch import BatchCoordinator
from src.documents.exceptions import (
    DocumentBusyError,
    DocumentNotFoundError,
    InvalidCorrectionError,
    PipelineError,
    ValidationError,
)
from src.documents.factory import build_batch_coordinator, build_service
from src.documents.models import PageRequest, ProcessingStatus
from src.documents.orchestrator import DocumentProcessingService
from src.utils.config import AppConfig, load_config
from src.utils.logger import get_logger

from .schemas import (
    BatchItemResponse,
    BatchProcessRequest,
    BatchProcessResponse,
    BatchUploadItemResponse,
    BatchUploadResponse,
    CorrectionRequest,
    DocumentPageResponse,
    DocumentResponse,
    EnginesResponse,
    HandwritingAvailabilityResponse,
    HealthResponse,
    LanguageInfoResponse,
    LanguageRequest,
    ProcessingAcceptedResponse,
    SortDirection,
)

logger = get_logger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(
    title="Picture to JSON API",
    description="Convert scanned forms and PDFs into structured JSON records",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_config() -> AppConfig:
    """Load the application configuration once per process."""
    return load_config()


@lru_cache
def get_service() -> DocumentProcessingService:
    """Return the shared document processing service."""
    return build_service(get_config())


@lru_cache
def get_batch_coordinator() -> BatchCoordinator:
    """Return the shared batch coordinator."""
    return build_batch_coordinator(get_service(), get_config())


ServiceDep = Annotated[DocumentProcessingService, Depends(get_service)]
CoordinatorDep = Annotated[BatchCoordinator, Depends(get_batch_coordinator)]


def _error(status_code: int, message: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message, "type": error_type}
    )


@app.exception_handler(DocumentBusyError)
async def _busy_handler(request: Request, exc: DocumentBusyError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, str(exc), "DOCUMENT_BUSY")


@app.exception_handler(ValidationError)
async def _validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("Validation error: %s", exc)
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), "VALIDATION_ERROR")


@app.exception_handler(DocumentNotFoundError)
async def _not_found_handler(
    request: Request, exc: DocumentNotFoundError
) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, str(exc), "DOCUMENT_NOT_FOUND")


@app.exception_handler(InvalidCorrectionError)
async def _correction_handler(
    request: Request, exc: InvalidCorrectionError
) -> JSONResponse:
    logger.warning("Rejected correction: %s", exc)
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), "INVALID_CORRECTION")


@app.exception_handler(Exception)
async def _unexpected_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected error handling %s: %s", request.url.path, exc)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        "INTERNAL_ERROR",
    )


@app.get("/health", response_model=HealthResponse)
def health_check(service: ServiceDep) -> HealthResponse:
    """Return system health status."""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        tesseract_available=shutil.which("tesseract") is not None,
        handwriting_available=service.ocr_service.is_handwriting_recognition_available(),
    )


@app.post(
    "/documents/upload",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    file: Annotated[UploadFile, File(...)], service: ServiceDep
) -> DocumentResponse:
    """Upload a document for later processing.

    Args:
        file: Uploaded image (PNG, JPEG) or PDF.

    Returns:
        The stored document in PENDING state.
    """
    content = await file.read()
    document = service.upload_document(
        content, file.filename or "document", file.content_type, file.size
    )
    return DocumentResponse.from_document(document)


@app.post("/documents/batch/upload", response_model=BatchUploadResponse)
async def upload_batch(
    files: Annotated[list[UploadFile], File(...)], service: ServiceDep
) -> BatchUploadResponse:
    """Upload several documents; each file is validated independently.

    Args:
        files: Uploaded documents.

    Returns:
        Per-file outcomes with the stored documents or rejection reasons.
    """
    results: list[BatchUploadItemResponse] = []
    successful = 0

    for file in files:
        filename = file.filename or "unknown"
        try:
            content = await file.read()
            document = service.upload_document(
                content, filename, file.content_type, file.size
            )
        except PipelineError as exc:
            results.append(BatchUploadItemResponse(filename=filename, error=str(exc)))
            continue
        results.append(
            BatchUploadItemResponse(
                filename=filename, document=DocumentResponse.from_document(document)
            )
        )
        successful += 1

    return BatchUploadResponse(
        total_documents=len(files),
        successful=successful,
        failed=len(files) - successful,
        results=results,
    )


@app.post("/documents/batch/process", response_model=BatchProcessResponse)
def process_batch(
    request: BatchProcessRequest, coordinator: CoordinatorDep
) -> BatchProcessResponse:
    """Process several documents and wait for all of them to finish.

    Args:
        request: Ids of the documents to process.

    Returns:
        Per-document final status in request order.
    """
    results = coordinator.process_batch(request.document_ids).result()
    successful = sum(1 for r in results if r.succeeded)
    return BatchProcessResponse(
        total_documents=len(results),
        successful=successful,
        failed=len(results) - successful,
        results=[BatchItemResponse.from_result(r) for r in results],
    )


@app.post(
    "/documents/{document_id}/process",
    response_model=ProcessingAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def process_document(document_id: int, service: ServiceDep) -> ProcessingAcceptedResponse:
    """Start processing a document in the background."""
    service.start_processing(document_id)
    return ProcessingAcceptedResponse(
        document_id=document_id,
        status=ProcessingStatus.PROCESSING,
        message="Document processing started",
    )


@app.get("/documents", response_model=DocumentPageResponse)
def list_documents(
    service: ServiceDep,
    page: Annotated[int, Query(ge=0)] = 0,
    size: Annotated[int, Query(ge=1, le=100)] = 10,
    sort_by: Annotated[str, Query()] = "created_at",
    sort_dir: Annotated[SortDirection, Query()] = SortDirection.DESC,
) -> DocumentPageResponse:
    """List documents one page at a time."""
    result = service.list_paged(
        PageRequest(
            page=page,
            size=size,
            sort_by=sort_by,
            descending=sort_dir == SortDirection.DESC,
        )
    )
    return DocumentPageResponse.from_page(result)


@app.get("/documents/status/{document_status}", response_model=list[DocumentResponse])
def list_documents_by_status(
    document_status: ProcessingStatus, service: ServiceDep
) -> list[DocumentResponse]:
    """List all documents in a processing status."""
    return [
        DocumentResponse.from_document(d)
        for d in service.list_by_status(document_status)
    ]


@app.get("/documents/{document_id}", response_model=DocumentResponse)
def get_document(document_id: int, service: ServiceDep) -> DocumentResponse:
    """Return a document with its current progress and results."""
    document = service.get_document(document_id)
    return DocumentResponse.from_document(document, service.merged_json(document))


@app.put("/documents/{document_id}/correct", response_model=DocumentResponse)
def correct_document(
    document_id: int, request: CorrectionRequest, service: ServiceDep
) -> DocumentResponse:
    """Apply a manual correction to a processed document."""
    document = service.apply_correction(document_id, request.corrected_json)
    return DocumentResponse.from_document(document, service.merged_json(document))


@app.get("/ocr/engines", response_model=EnginesResponse)
def list_engines(service: ServiceDep) -> EnginesResponse:
    """List the OCR engines that can currently be used."""
    ocr = service.ocr_service
    return EnginesResponse(
        engines=[str(t) for t in ocr.available_engines()],
        default_engine=str(ocr.default_engine),
        auto_detect_handwriting=ocr.auto_detect_handwriting,
    )


@app.get("/ocr/handwriting/available", response_model=HandwritingAvailabilityResponse)
def handwriting_available(service: ServiceDep) -> HandwritingAvailabilityResponse:
    """Report whether handwriting recognition is available."""
    return HandwritingAvailabilityResponse(
        available=service.ocr_service.is_handwriting_recognition_available()
    )


@app.get("/ocr/languages", response_model=LanguageInfoResponse)
def get_languages(service: ServiceDep) -> LanguageInfoResponse:
    """Return the active OCR language settings."""
    return LanguageInfoResponse.from_settings(
        service.languages.snapshot(), service.languages.supported_languages()
    )


@app.put("/ocr/languages", response_model=LanguageInfoResponse)
def set_languages(request: LanguageRequest, service: ServiceDep) -> LanguageInfoResponse:
    """Change the OCR languages used by runs started from now on."""
    settings = service.languages.set_language(
        request.language, request.additional_languages
    )
    return LanguageInfoResponse.from_settings(
        settings, service.languages.supported_languages()
    )
