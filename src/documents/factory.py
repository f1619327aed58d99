"""Wiring of the document pipeline from application configuration."""

from src.extraction.json_generator import JsonGenerator
from src.ocr.languages import LanguageConfigurator
from src.ocr.pdf_handler import PDFHandler
from src.ocr.selector import OCRService
from src.ocr.tesseract_engine import TesseractEngine
from src.ocr.text_classifier import TextTypeClassifier
from src.ocr.vision_engine import GoogleVisionEngine
from src.preprocessing.pipeline import ImagePreprocessor
from src.utils.config import AppConfig
from src.utils.logger import get_logger
from src.utils.runtime import initialize_runtime

from .batch import BatchCoordinator
from .orchestrator import DocumentProcessingService
from .repository import DocumentRepository, InMemoryDocumentRepository
from .storage import DocumentStorage

logger = get_logger(__name__)


def build_ocr_service(config: AppConfig, languages: LanguageConfigurator) -> OCRService:
    """Create the OCR service with every configured engine.

    Args:
        config: Application configuration.
        languages: Language holder whose snapshot seeds engine defaults.

    Returns:
        OCR service with the Tesseract engine and the Google Vision engine.
    """
    settings = languages.snapshot()
    engines = [
        TesseractEngine(languages=settings, psm=config.ocr.psm, oem=config.ocr.oem),
        GoogleVisionEngine(config=config.google_vision, languages=settings),
    ]
    return OCRService(
        engines,
        classifier=TextTypeClassifier(),
        default_engine=config.ocr.default_engine,
        auto_detect_handwriting=config.ocr.auto_detect_handwriting,
    )


def build_service(
    config: AppConfig,
    repository: DocumentRepository | None = None,
    ocr_service: OCRService | None = None,
) -> DocumentProcessingService:
    """Create a fully wired document processing service.

    Initializes the process-wide OCR runtime on first use.

    Args:
        config: Application configuration.
        repository: Document persistence; defaults to an in-memory store.
        ocr_service: OCR service; defaults to one built from ``config``.

    Returns:
        Ready-to-use document processing service.
    """
    initialize_runtime(config.ocr)

    languages = LanguageConfigurator(
        config.ocr.preferred_language, config.ocr.additional_languages
    )
    service = DocumentProcessingService(
        repository=repository or InMemoryDocumentRepository(),
        storage=DocumentStorage(config.storage.upload_directory),
        preprocessor=ImagePreprocessor(config.preprocessing),
        ocr_service=ocr_service or build_ocr_service(config, languages),
        json_generator=JsonGenerator(),
        languages=languages,
        pdf_handler=PDFHandler(dpi=config.ocr.pdf_dpi),
        storage_config=config.storage,
        max_workers=config.processing.max_workers,
    )
    logger.info(
        "Document processing service ready (workers=%d, upload directory=%s)",
        config.processing.max_workers,
        config.storage.upload_directory,
    )
    return service


def build_batch_coordinator(
    service: DocumentProcessingService, config: AppConfig
) -> BatchCoordinator:
    """Create a batch coordinator on top of a processing service."""
    return BatchCoordinator(service, max_workers=config.processing.batch_workers)
