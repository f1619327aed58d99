"""Common contract shared by the OCR engines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .languages import LanguageSettings


class EngineType(StrEnum):
    """Identifiers of the available OCR engines."""

    TESSERACT = "TESSERACT"
    GOOGLE_VISION = "GOOGLE_VISION"


@dataclass
class OCRResult:
    """Text extracted from one image by one engine."""

    text: str
    engine_type: EngineType
    confidence: int
    language: str


class OCREngine(ABC):
    """Text extractor that can be selected at runtime."""

    @abstractmethod
    def extract_text(
        self, image: np.ndarray, languages: LanguageSettings | None = None
    ) -> OCRResult:
        """Extract text from an image.

        Args:
            image: Image as a numpy array (usually already normalized).
            languages: Language snapshot to use. ``None`` uses the
                engine's configured default.

        Returns:
            OCR result with trimmed text.

        Raises:
            EngineError: If extraction fails.
        """

    @abstractmethod
    def confidence(self) -> int:
        """Return the confidence (0-100) of the last extraction by this engine.

        Engines are shared across worker threads, so this is the value from
        whichever run finished last. Per-run confidence is carried on
        :class:`OCRResult`.
        """

    @abstractmethod
    def engine_type(self) -> EngineType:
        """Return the engine identifier."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return whether the engine is configured and usable."""
