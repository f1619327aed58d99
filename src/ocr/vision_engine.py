"""Google Cloud Vision OCR engine for handwritten text.

Uses ``DOCUMENT_TEXT_DETECTION`` with language hints. Each extraction
creates its own client, so concurrent document runs share no connection
state and a slow request only delays its own run.
"""

import os
from pathlib import Path

import cv2
import numpy as np
from google.cloud import vision

from src.documents.exceptions import EngineError
from src.utils.config import GoogleVisionConfig
from src.utils.logger import get_logger

from .base import EngineType, OCREngine, OCRResult
from .languages import LanguageSettings

logger = get_logger(__name__)

CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"
DEFAULT_CONFIDENCE = 85


class GoogleVisionEngine(OCREngine):
    """Remote OCR engine backed by the Google Cloud Vision API.

    Args:
        config: Vision configuration with the enabled flag and credentials.
        languages: Default language snapshot used when a caller does not
            pass one.
    """

    def __init__(
        self,
        config: GoogleVisionConfig | None = None,
        languages: LanguageSettings | None = None,
    ) -> None:
        self.config = config or GoogleVisionConfig()
        self.default_languages = languages or LanguageSettings()
        self._last_confidence = DEFAULT_CONFIDENCE

        if self.config.enabled:
            logger.info(
                "Google Vision engine initialized with credentials path %s and hints %s",
                self.config.credentials_path,
                self.default_languages.vision_hints,
            )
        else:
            logger.info("Google Vision engine disabled in configuration")

    def _create_client(self) -> vision.ImageAnnotatorClient:
        """Create an annotator client from explicit or ambient credentials."""
        if self.config.credentials_path:
            return vision.ImageAnnotatorClient.from_service_account_file(
                self.config.credentials_path
            )
        return vision.ImageAnnotatorClient()

    def extract_text(
        self, image: np.ndarray, languages: LanguageSettings | None = None
    ) -> OCRResult:
        """Extract text from an image through the Vision API.

        Args:
            image: Input image as a numpy array.
            languages: Language snapshot for this call.

        Returns:
            OCRResult with the full text annotation.

        Raises:
            EngineError: If the engine is unavailable, the image cannot be
                encoded, or the API reports an error.
        """
        if not self.is_available():
            raise EngineError("Google Vision OCR engine is not available")

        hints = (languages or self.default_languages).vision_hints
        ok, encoded = cv2.imencode(".png", image)
        if not ok:
            raise EngineError("Could not encode image for Google Vision")

        try:
            with self._create_client() as client:
                response = client.document_text_detection(
                    image=vision.Image(content=encoded.tobytes()),
                    image_context={"language_hints": hints},
                )
        except Exception as exc:
            logger.error("Google Vision request failed: %s", exc)
            raise EngineError(f"Google Vision request failed: {exc}") from exc

        if response.error.message:
            logger.error("Google Vision API error: %s", response.error.message)
            raise EngineError(f"Google Vision API error: {response.error.message}")

        annotation = response.full_text_annotation
        confidence = self._page_confidence(annotation)
        self._last_confidence = confidence

        logger.debug("Google Vision extracted text with hints %s", hints)
        return OCRResult(
            text=(annotation.text or "").strip(),
            engine_type=EngineType.GOOGLE_VISION,
            confidence=confidence,
            language=",".join(hints),
        )

    @staticmethod
    def _page_confidence(annotation: vision.TextAnnotation) -> int:
        scores = [page.confidence for page in annotation.pages if page.confidence > 0]
        if not scores:
            return DEFAULT_CONFIDENCE
        return int(round(sum(scores) / len(scores) * 100))

    def confidence(self) -> int:
        """Return the last confidence seen by this engine across all runs."""
        return self._last_confidence

    def engine_type(self) -> EngineType:
        return EngineType.GOOGLE_VISION

    def is_available(self) -> bool:
        """Return whether the engine is enabled and has credentials.

        An explicit credentials path must exist on disk; otherwise the
        standard credentials environment variable must be set.
        """
        if not self.config.enabled:
            return False
        if self.config.credentials_path:
            return Path(self.config.credentials_path).exists()
        return bool(os.environ.get(CREDENTIALS_ENV_VAR))
