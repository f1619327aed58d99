"""OCR language configuration shared by all document runs.

The active configuration is an immutable :class:`LanguageSettings` snapshot.
Reconfiguration swaps the snapshot under a lock, so a run that captured the
previous snapshot keeps using it until it finishes.
"""

import threading
from dataclasses import dataclass, field

from src.documents.exceptions import ValidationError
from src.utils.logger import get_logger

logger = get_logger(__name__)

TESSERACT_LANGUAGE_MAP: dict[str, str] = {
    "en": "eng",
    "de": "deu",
    "fr": "fra",
    "es": "spa",
    "it": "ita",
    "pt": "por",
    "nl": "nld",
    "ru": "rus",
}

VISION_LANGUAGE_MAP: dict[str, str] = {
    "en": "en",
    "de": "de",
    "fr": "fr",
    "es": "es",
    "it": "it",
    "pt": "pt",
    "nl": "nl",
    "ru": "ru",
}

SUPPORTED_LANGUAGES: dict[str, str] = {
    "en": "English",
    "de": "German (Deutsch)",
    "fr": "French (Français)",
    "es": "Spanish (Español)",
    "it": "Italian (Italiano)",
    "pt": "Portuguese (Português)",
    "nl": "Dutch (Nederlands)",
    "ru": "Russian (Русский)",
}


def _dedupe(codes: list[str]) -> list[str]:
    seen: list[str] = []
    for code in codes:
        if code and code not in seen:
            seen.append(code)
    return seen


def tesseract_language_tag(primary: str, additional: list[str] | tuple[str, ...]) -> str:
    """Combine a primary and additional Tesseract codes into one tag.

    Additional codes keep their order, duplicates are dropped, and codes
    equal to the primary are skipped.

    Args:
        primary: Primary Tesseract language code (e.g. ``"deu"``).
        additional: Extra Tesseract language codes.

    Returns:
        A tag such as ``"deu+eng+fra"``.
    """
    return "+".join(_dedupe([primary, *additional]))


@dataclass(frozen=True)
class LanguageSettings:
    """Immutable snapshot of the OCR language configuration.

    Codes are ISO 639-1 (``"en"``, ``"de"``); unmapped codes are passed
    to the engines unchanged.
    """

    language: str = "en"
    additional_languages: tuple[str, ...] = field(default_factory=tuple)

    @property
    def tesseract_languages(self) -> list[str]:
        codes = [self.language, *self.additional_languages]
        return _dedupe([TESSERACT_LANGUAGE_MAP.get(code, code) for code in codes])

    @property
    def tesseract_tag(self) -> str:
        primary, *additional = self.tesseract_languages
        return tesseract_language_tag(primary, additional)

    @property
    def vision_hints(self) -> list[str]:
        codes = [self.language, *self.additional_languages]
        return _dedupe([VISION_LANGUAGE_MAP.get(code, code) for code in codes])


class LanguageConfigurator:
    """Holds the active language snapshot and swaps it atomically.

    Args:
        language: Initial primary ISO language code.
        additional_languages: Initial additional ISO language codes.
    """

    def __init__(
        self,
        language: str = "en",
        additional_languages: list[str] | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._settings = self._build(language, additional_languages or [])
        logger.info(
            "Language configuration initialized: %s (tesseract=%s)",
            self._settings.language,
            self._settings.tesseract_tag,
        )

    @staticmethod
    def _build(language: str, additional_languages: list[str]) -> LanguageSettings:
        code = (language or "").strip().lower()
        if not code:
            raise ValidationError("Language code must not be empty")
        extras = tuple(
            c.strip().lower() for c in additional_languages if c and c.strip()
        )
        return LanguageSettings(language=code, additional_languages=extras)

    def snapshot(self) -> LanguageSettings:
        """Return the currently active language settings."""
        with self._lock:
            return self._settings

    def set_language(
        self, language: str, additional_languages: list[str] | None = None
    ) -> LanguageSettings:
        """Replace the active language settings.

        Only runs started after this call observe the new settings.

        Args:
            language: Primary ISO language code.
            additional_languages: Additional ISO language codes.

        Returns:
            The newly active settings.

        Raises:
            ValidationError: If the primary language code is empty.
        """
        settings = self._build(language, additional_languages or [])
        with self._lock:
            self._settings = settings
        for code in (settings.language, *settings.additional_languages):
            if not self.is_supported(code):
                logger.warning("No engine mapping for language %s", code)
        logger.info(
            "OCR language set to %s (tesseract=%s, vision=%s)",
            settings.language,
            settings.tesseract_tag,
            settings.vision_hints,
        )
        return settings

    @staticmethod
    def supported_languages() -> dict[str, str]:
        """Return the supported ISO codes mapped to display names."""
        return dict(SUPPORTED_LANGUAGES)

    @staticmethod
    def is_supported(language: str) -> bool:
        """Return whether a language has an explicit engine mapping."""
        code = (language or "").strip().lower()
        return code in TESSERACT_LANGUAGE_MAP or code in VISION_LANGUAGE_MAP
