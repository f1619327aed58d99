"""Tesseract OCR engine for printed text.

Runs locally and synchronously through pytesseract. Recognition uses the
LSTM engine with automatic page segmentation; confidence is the mean
word-level confidence reported by Tesseract.
"""

import numpy as np
import pytesseract
from PIL import Image

from src.documents.exceptions import EngineError
from src.utils.logger import get_logger

from .base import EngineType, OCREngine, OCRResult
from .languages import LanguageSettings

logger = get_logger(__name__)

DEFAULT_CONFIDENCE = 85


class TesseractEngine(OCREngine):
    """Local OCR engine backed by the Tesseract binary.

    The binary location and tessdata prefix are process-wide and set by
    :func:`src.utils.runtime.initialize_runtime`, not here.

    Args:
        languages: Default language snapshot used when a caller does not
            pass one.
        psm: Tesseract page segmentation mode.
        oem: Tesseract OCR engine mode.
    """

    def __init__(
        self,
        languages: LanguageSettings | None = None,
        psm: int = 1,
        oem: int = 1,
    ) -> None:
        self.default_languages = languages or LanguageSettings()
        self.psm = psm
        self.oem = oem
        self._last_confidence = DEFAULT_CONFIDENCE
        logger.info(
            "Tesseract engine initialized with language %s",
            self.default_languages.tesseract_tag,
        )

    def extract_text(
        self, image: np.ndarray, languages: LanguageSettings | None = None
    ) -> OCRResult:
        """Extract text from an image.

        Args:
            image: Input image as a numpy array.
            languages: Language snapshot for this call.

        Returns:
            OCRResult with the trimmed text and mean word confidence.

        Raises:
            EngineError: If Tesseract fails or is not installed.
        """
        lang = (languages or self.default_languages).tesseract_tag
        config = f"--oem {self.oem} --psm {self.psm}"

        try:
            pil_image = Image.fromarray(image)
            text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except Exception as exc:
            logger.error("Tesseract OCR failed: %s", exc)
            raise EngineError(f"Tesseract OCR failed: {exc}") from exc

        text = (text or "").strip()
        confidence = self._mean_confidence(data)
        self._last_confidence = confidence

        logger.debug(
            "Tesseract extracted %d characters (lang=%s, confidence=%d)",
            len(text),
            lang,
            confidence,
        )
        return OCRResult(
            text=text,
            engine_type=EngineType.TESSERACT,
            confidence=confidence,
            language=lang,
        )

    @staticmethod
    def _mean_confidence(data: dict) -> int:
        """Average the confidence of recognized words.

        Args:
            data: Output of ``pytesseract.image_to_data`` as a dict.

        Returns:
            Mean confidence in the 0-100 range, or 0 if no words were found.
        """
        scores = [
            float(conf)
            for conf, word in zip(data.get("conf", []), data.get("text", []))
            if float(conf) > 0 and str(word).strip()
        ]
        if not scores:
            return 0
        return int(round(sum(scores) / len(scores)))

    def confidence(self) -> int:
        """Return the last confidence seen by this engine across all runs."""
        return self._last_confidence

    def engine_type(self) -> EngineType:
        return EngineType.TESSERACT

    def is_available(self) -> bool:
        return True
