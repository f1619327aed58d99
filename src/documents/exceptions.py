"""Error taxonomy for document upload, processing, and correction."""


class PipelineError(Exception):
    """Base exception for all document pipeline errors."""


class ValidationError(PipelineError):
    """Raised when a request is rejected before any state is changed."""


class DocumentBusyError(ValidationError):
    """Raised when processing is requested for a document already in flight."""


class DocumentNotFoundError(PipelineError):
    """Raised when a document id is unknown to the repository."""

    def __init__(self, document_id: int) -> None:
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class ProcessingError(PipelineError):
    """Raised by a pipeline stage; recorded on the document as FAILED."""


class ImageDecodeError(ProcessingError):
    """Raised when image bytes cannot be decoded into pixels."""


class EngineError(ProcessingError):
    """Raised when an OCR engine fails to extract text."""


class PageRenderError(ProcessingError):
    """Raised when a PDF page cannot be rasterized."""


class ConfigurationError(PipelineError):
    """Raised when a requested OCR engine is not available."""


class InvalidCorrectionError(PipelineError):
    """Raised when a correction cannot be applied to a document."""
