"""Document processing orchestration.

Owns the per-document state machine::

    PENDING -> PROCESSING -> COMPLETED | FAILED
    COMPLETED | FAILED -> CORRECTED   (explicit correction)

Each run executes on a worker thread and reports progress only through the
repository, which is the single source of truth for callers polling a
document's state.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor

from src.extraction.json_generator import JsonGenerator
from src.ocr.base import OCRResult
from src.ocr.languages import LanguageConfigurator, LanguageSettings
from src.ocr.pdf_handler import PDFHandler
from src.ocr.selector import OCRService
from src.preprocessing.pipeline import ImagePreprocessor
from src.utils.config import StorageConfig
from src.utils.logger import get_logger

from .exceptions import (
    DocumentBusyError,
    DocumentNotFoundError,
    InvalidCorrectionError,
    ProcessingError,
    ValidationError,
)
from .models import (
    CORRECTABLE_STATUSES,
    Document,
    Page,
    PageRequest,
    ProcessingStatus,
)
from .repository import DocumentRepository
from .storage import DocumentStorage

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Unexpected error during processing"

PROGRESS_STARTED = 10
PROGRESS_LOADED = 20
PROGRESS_PAGES_START = 30
PROGRESS_PAGES_SPAN = 30
PROGRESS_PREPROCESSED = 50
PROGRESS_OCR_DONE = 70
PROGRESS_COMPLETE = 100


class DocumentProcessingService:
    """Uploads, processes, and corrects documents.

    Args:
        repository: Document persistence.
        storage: Byte storage for uploaded files.
        preprocessor: Image normalization pipeline.
        ocr_service: Engine selection and text extraction.
        json_generator: Field extraction and JSON handling.
        languages: Holder of the active OCR language snapshot.
        pdf_handler: PDF rasterizer.
        storage_config: Upload validation limits.
        max_workers: Number of concurrent document runs.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        storage: DocumentStorage,
        preprocessor: ImagePreprocessor,
        ocr_service: OCRService,
        json_generator: JsonGenerator,
        languages: LanguageConfigurator,
        pdf_handler: PDFHandler | None = None,
        storage_config: StorageConfig | None = None,
        max_workers: int = 4,
    ) -> None:
        self.repository = repository
        self.storage = storage
        self.preprocessor = preprocessor
        self.ocr_service = ocr_service
        self.json_generator = json_generator
        self.languages = languages
        self.pdf_handler = pdf_handler or PDFHandler()
        self.storage_config = storage_config or StorageConfig()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="document-worker"
        )
        self._state_lock = threading.Lock()

    def upload_document(
        self,
        content: bytes,
        original_filename: str,
        content_type: str | None,
        size: int | None = None,
    ) -> Document:
        """Validate and store an uploaded file as a new PENDING document.

        Args:
            content: Raw file bytes.
            original_filename: Client-supplied file name.
            content_type: Client-supplied MIME type.
            size: Client-reported size in bytes, if known.

        Returns:
            The persisted document.

        Raises:
            ValidationError: If the file is empty, of an unsupported type,
                or larger than the configured limit. Nothing is stored.
        """
        logger.info("Uploading document: %s", original_filename)
        self._validate_upload(content, content_type, size)

        filename, path = self.storage.save(content, original_filename)
        document = Document(
            filename=filename,
            original_filename=original_filename or filename,
            content_type=content_type.lower(),
            file_size=len(content),
            file_path=path,
        )
        document = self.repository.save(document)
        logger.info("Document uploaded and saved with ID: %d", document.id)
        return document

    def _validate_upload(
        self, content: bytes, content_type: str | None, size: int | None
    ) -> None:
        actual_size = len(content) if content else 0
        if actual_size == 0 or size == 0:
            raise ValidationError("File is empty")

        allowed = {t.lower() for t in self.storage_config.allowed_content_types}
        if not content_type or content_type.lower() not in allowed:
            raise ValidationError(f"Unsupported file type: {content_type}")

        limit = self.storage_config.max_file_size
        if max(actual_size, size or 0) > limit:
            raise ValidationError(
                f"File size exceeds {limit // (1024 * 1024)}MB limit"
            )

    def start_processing(self, document_id: int) -> Future:
        """Start processing a document in the background.

        The document is moved to PROCESSING before this method returns; the
        pipeline itself runs on a worker thread.

        Args:
            document_id: Id of the document to process.

        Returns:
            Future resolving to the document in its final state.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            DocumentBusyError: If the document is already being processed.
            RuntimeError: If the service has been shut down. The document
                is marked FAILED.
        """
        self._begin(document_id)
        languages = self.languages.snapshot()
        logger.info("Starting async processing for document ID: %d", document_id)
        try:
            return self._executor.submit(self._run, document_id, languages)
        except Exception:
            logger.exception("Could not schedule document ID %d", document_id)
            self._mark_failed(document_id, GENERIC_FAILURE_MESSAGE)
            raise

    def process_document(
        self, document_id: int, languages: LanguageSettings | None = None
    ) -> Document:
        """Process a document on the calling thread.

        Args:
            document_id: Id of the document to process.
            languages: Language snapshot; defaults to the active one.

        Returns:
            The document in its final state (COMPLETED or FAILED).
        """
        self._begin(document_id)
        return self._run(document_id, languages or self.languages.snapshot())

    def _begin(self, document_id: int) -> None:
        with self._state_lock:
            document = self._load(document_id)
            if document.status == ProcessingStatus.PROCESSING:
                raise DocumentBusyError(
                    f"Document {document_id} is already being processed"
                )
            document.status = ProcessingStatus.PROCESSING
            document.progress = PROGRESS_STARTED
            document.error_message = None
            document.corrected_json = None
            self.repository.save(document)

    def _run(self, document_id: int, languages: LanguageSettings) -> Document:
        document = self._load(document_id)
        try:
            content = self.storage.read(document.file_path)
            self._checkpoint(document, PROGRESS_LOADED)

            if document.is_pdf or content[:4] == b"%PDF":
                results = self._process_pdf(document, content, languages)
            else:
                results = [self._process_image(document, content, languages)]

            text = "\n".join(r.text for r in results).strip()
            self._checkpoint(document, PROGRESS_OCR_DONE)

            confidences = [r.confidence for r in results]
            confidence = round(sum(confidences) / len(confidences)) if confidences else None

            document.extracted_text = text
            document.extracted_json = self.json_generator.generate_json(text)
            document.field_mappings = self.json_generator.field_mappings(text, confidence)
            document.status = ProcessingStatus.COMPLETED
            document.progress = PROGRESS_COMPLETE
            document = self.repository.save(document)
        except ProcessingError as exc:
            logger.error("Error processing document ID %d: %s", document_id, exc)
            return self._mark_failed(document_id, str(exc))
        except Exception:
            logger.exception("Unexpected error processing document ID %d", document_id)
            return self._mark_failed(document_id, GENERIC_FAILURE_MESSAGE)

        logger.info("Document processing completed: %s", document.filename)
        return document

    def _process_image(
        self, document: Document, content: bytes, languages: LanguageSettings
    ) -> OCRResult:
        logger.debug("Processing image document: %s", document.filename)
        self._checkpoint(document, PROGRESS_PAGES_START)
        image = self.preprocessor.process_bytes(content)
        self._checkpoint(document, PROGRESS_PREPROCESSED)
        return self.ocr_service.extract_text(image, languages)

    def _process_pdf(
        self, document: Document, content: bytes, languages: LanguageSettings
    ) -> list[OCRResult]:
        logger.debug("Processing PDF document: %s", document.filename)
        results: list[OCRResult] = []
        for index, page_count, page in self.pdf_handler.iter_pages(content):
            progress = PROGRESS_PAGES_START + index * PROGRESS_PAGES_SPAN // page_count
            self._checkpoint(document, progress)
            image = self.preprocessor.process(page)
            results.append(self.ocr_service.extract_text(image, languages))
        return results

    def _checkpoint(self, document: Document, progress: int) -> None:
        document.progress = max(document.progress, progress)
        self.repository.save(document)

    def _mark_failed(self, document_id: int, message: str) -> Document:
        # Reload so that nothing from the failed run is committed.
        document = self._load(document_id)
        document.status = ProcessingStatus.FAILED
        document.error_message = message
        return self.repository.save(document)

    def apply_correction(self, document_id: int, corrected_json: str) -> Document:
        """Replace the extracted record with caller-supplied JSON.

        Args:
            document_id: Id of the document to correct.
            corrected_json: Replacement JSON text.

        Returns:
            The document in CORRECTED state.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            InvalidCorrectionError: If the JSON does not parse or the
                document has not finished processing. The document is
                left unchanged.
        """
        logger.info("Applying corrections to document ID: %d", document_id)
        with self._state_lock:
            document = self._load(document_id)
            if not self.json_generator.is_valid_json(corrected_json):
                raise InvalidCorrectionError("Invalid JSON format")
            if document.status not in CORRECTABLE_STATUSES:
                raise InvalidCorrectionError(
                    f"Document {document_id} cannot be corrected while {document.status}"
                )

            document.corrected_json = corrected_json
            document.status = ProcessingStatus.CORRECTED
            document.progress = PROGRESS_COMPLETE
            document.error_message = None
            document = self.repository.save(document)

        logger.info("Corrections applied to document ID: %d", document_id)
        return document

    def merged_json(self, document: Document) -> str | None:
        """Return the extracted record with corrections applied, if any."""
        if not document.extracted_json or not document.corrected_json:
            return None
        try:
            return self.json_generator.merge_json(
                document.extracted_json, document.corrected_json
            )
        except InvalidCorrectionError as exc:
            logger.debug("Cannot merge JSON for document %s: %s", document.id, exc)
            return None

    def get_document(self, document_id: int) -> Document:
        """Load a document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        return self._load(document_id)

    def list_by_status(self, status: ProcessingStatus) -> list[Document]:
        return self.repository.find_by_status(status)

    def list_paged(self, page_request: PageRequest) -> Page:
        """Return one page of documents.

        Raises:
            ValidationError: If the sort field or page parameters are invalid.
        """
        try:
            return self.repository.find_page(page_request)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def _load(self, document_id: int) -> Document:
        document = self.repository.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting runs and optionally wait for running ones."""
        self._executor.shutdown(wait=wait)
