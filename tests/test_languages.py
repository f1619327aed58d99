"""Tests for OCR language configuration."""

import threading

import pytest

from src.documents.exceptions import ValidationError
from src.ocr.languages import (
    LanguageConfigurator,
    LanguageSettings,
    tesseract_language_tag,
)


class TestTesseractLanguageTag:
    """Tests for combining Tesseract language codes."""

    def test_single_language(self) -> None:
        assert tesseract_language_tag("eng", []) == "eng"

    def test_additional_languages_in_order(self) -> None:
        assert tesseract_language_tag("deu", ["eng", "fra"]) == "deu+eng+fra"

    def test_duplicates_removed(self) -> None:
        assert tesseract_language_tag("eng", ["eng", "deu", "deu"]) == "eng+deu"


class TestLanguageSettings:
    """Tests for the immutable language snapshot."""

    def test_defaults(self) -> None:
        settings = LanguageSettings()
        assert settings.language == "en"
        assert settings.tesseract_tag == "eng"
        assert settings.vision_hints == ["en"]

    def test_mapped_codes(self) -> None:
        settings = LanguageSettings("de", ("en", "ru"))
        assert settings.tesseract_languages == ["deu", "eng", "rus"]
        assert settings.tesseract_tag == "deu+eng+rus"
        assert settings.vision_hints == ["de", "en", "ru"]

    def test_unmapped_code_passes_through(self) -> None:
        settings = LanguageSettings("pl")
        assert settings.tesseract_tag == "pl"
        assert settings.vision_hints == ["pl"]

    def test_is_frozen(self) -> None:
        settings = LanguageSettings()
        with pytest.raises(AttributeError):
            settings.language = "de"


class TestLanguageConfigurator:
    """Tests for swapping the active language snapshot."""

    def test_initial_snapshot(self) -> None:
        configurator = LanguageConfigurator("fr", ["en"])
        snapshot = configurator.snapshot()
        assert snapshot.language == "fr"
        assert snapshot.additional_languages == ("en",)

    def test_set_language_normalizes_codes(self) -> None:
        configurator = LanguageConfigurator()
        settings = configurator.set_language(" DE ", ["EN", " ", ""])
        assert settings.language == "de"
        assert settings.additional_languages == ("en",)
        assert configurator.snapshot() is settings

    def test_previous_snapshot_unchanged(self) -> None:
        configurator = LanguageConfigurator("en")
        before = configurator.snapshot()
        configurator.set_language("es")
        assert before.tesseract_tag == "eng"
        assert configurator.snapshot().tesseract_tag == "spa"

    def test_empty_language_rejected(self) -> None:
        configurator = LanguageConfigurator("en")
        with pytest.raises(ValidationError):
            configurator.set_language("  ")
        assert configurator.snapshot().language == "en"

    def test_supported_languages(self) -> None:
        supported = LanguageConfigurator.supported_languages()
        assert supported["en"] == "English"
        assert len(supported) == 8

    def test_is_supported(self) -> None:
        assert LanguageConfigurator.is_supported("nl") is True
        assert LanguageConfigurator.is_supported("xx") is False

    def test_is_supported_normalizes_code(self) -> None:
        assert LanguageConfigurator.is_supported(" DE ") is True
        configurator = LanguageConfigurator()
        assert configurator.set_language(" DE ").language == "de"

    def test_unmapped_language_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        configurator = LanguageConfigurator()
        with caplog.at_level("WARNING"):
            settings = configurator.set_language("xx", ["en"])

        assert settings.tesseract_tag == "xx+eng"
        assert "No engine mapping for language xx" in caplog.text

    def test_concurrent_updates_leave_consistent_snapshot(self) -> None:
        configurator = LanguageConfigurator()
        codes = ["de", "fr", "es", "it"]
        threads = [
            threading.Thread(target=configurator.set_language, args=(code, ["en"]))
            for code in codes
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = configurator.snapshot()
        assert snapshot.language in codes
        assert snapshot.additional_languages == ("en",)
