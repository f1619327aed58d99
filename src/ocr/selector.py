"""OCR engine selection.

The policy itself is the pure function :func:`select_engine_type`; the
:class:`OCRService` gathers its inputs (classifier verdict, configuration,
engine availability) and runs the chosen engine.
"""

import numpy as np

from src.documents.exceptions import ConfigurationError
from src.utils.logger import get_logger

from .base import EngineType, OCREngine, OCRResult
from .languages import LanguageSettings
from .text_classifier import TextTypeClassifier

logger = get_logger(__name__)


def select_engine_type(
    *,
    default_engine: EngineType,
    remote_available: bool,
    is_handwritten: bool | None = None,
    requested: EngineType | None = None,
) -> EngineType:
    """Choose the engine for one extraction.

    Args:
        default_engine: Configured default engine.
        remote_available: Whether the Google Vision engine can be used.
        is_handwritten: Classifier verdict, or ``None`` when auto-detection
            is disabled.
        requested: Engine explicitly requested by the caller.

    Returns:
        The engine type to use. An explicit request always wins; an
        unavailable request is resolved later by falling back to Tesseract.
    """
    if requested is not None:
        return requested
    if is_handwritten and remote_available:
        return EngineType.GOOGLE_VISION
    return default_engine


class OCRService:
    """Routes extraction requests to the appropriate OCR engine.

    Args:
        engines: The available engines; must include Tesseract.
        classifier: Handwriting classifier used for auto-detection.
        default_engine: Engine used when no other rule applies.
        auto_detect_handwriting: Whether to consult the classifier.
    """

    def __init__(
        self,
        engines: list[OCREngine],
        classifier: TextTypeClassifier | None = None,
        default_engine: EngineType = EngineType.TESSERACT,
        auto_detect_handwriting: bool = True,
    ) -> None:
        self.engines: dict[EngineType, OCREngine] = {
            engine.engine_type(): engine for engine in engines
        }
        if EngineType.TESSERACT not in self.engines:
            raise ValueError("A Tesseract engine is required as the fallback engine")
        self.classifier = classifier or TextTypeClassifier()
        self.default_engine = default_engine
        self.auto_detect_handwriting = auto_detect_handwriting

        logger.info(
            "OCR service initialized - auto-detect handwriting: %s, default engine: %s",
            auto_detect_handwriting,
            default_engine,
        )
        logger.info("Available OCR engines: %s", self.available_engines())

    @property
    def local_engine(self) -> OCREngine:
        return self.engines[EngineType.TESSERACT]

    def _remote_available(self) -> bool:
        remote = self.engines.get(EngineType.GOOGLE_VISION)
        return remote is not None and remote.is_available()

    def get_engine(self, engine_type: EngineType) -> OCREngine:
        """Return the engine for a type.

        Raises:
            ConfigurationError: If the engine is unknown or unavailable.
        """
        engine = self.engines.get(engine_type)
        if engine is None or not engine.is_available():
            raise ConfigurationError(f"OCR engine {engine_type} is not available")
        return engine

    def select_engine(
        self, image: np.ndarray, requested: EngineType | None = None
    ) -> OCREngine:
        """Pick the engine for an image, falling back to Tesseract.

        Args:
            image: Image that will be passed to the engine.
            requested: Engine explicitly requested by the caller.

        Returns:
            A usable engine.
        """
        is_handwritten = None
        if requested is None and self.auto_detect_handwriting:
            is_handwritten = self.classifier.is_handwritten(image)

        engine_type = select_engine_type(
            default_engine=self.default_engine,
            remote_available=self._remote_available(),
            is_handwritten=is_handwritten,
            requested=requested,
        )

        try:
            return self.get_engine(engine_type)
        except ConfigurationError as exc:
            logger.warning("%s, falling back to Tesseract", exc)
            return self.local_engine

    def extract_text(
        self,
        image: np.ndarray,
        languages: LanguageSettings | None = None,
        engine_type: EngineType | None = None,
    ) -> OCRResult:
        """Extract text from an image with the selected engine.

        Args:
            image: Image to recognize.
            languages: Language snapshot captured at the start of the run.
            engine_type: Engine explicitly requested by the caller.

        Returns:
            The engine's OCR result.

        Raises:
            EngineError: If the selected engine fails.
        """
        engine = self.select_engine(image, requested=engine_type)
        result = engine.extract_text(image, languages)
        logger.debug(
            "OCR extraction completed using %s (confidence=%d)",
            result.engine_type,
            result.confidence,
        )
        return result

    def available_engines(self) -> list[EngineType]:
        """Return the engine types that are currently usable."""
        return [t for t, engine in self.engines.items() if engine.is_available()]

    def is_handwriting_recognition_available(self) -> bool:
        """Return whether the remote handwriting engine can be used."""
        return self._remote_available()
