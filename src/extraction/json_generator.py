"""Conversion of extracted text into JSON records.

Also validates caller-supplied corrections and merges them over the
extracted record, corrected values always winning.
"""

import json
from typing import Any

from src.documents.exceptions import InvalidCorrectionError
from src.documents.models import FieldMapping
from src.utils.logger import get_logger

from .field_extractor import FieldExtractor

logger = get_logger(__name__)


class JsonGenerator:
    """Builds flat JSON objects from raw OCR text.

    Args:
        extractor: Field extractor used to find labeled values.
    """

    def __init__(self, extractor: FieldExtractor | None = None) -> None:
        self.extractor = extractor or FieldExtractor()

    def extract_fields(self, text: str) -> dict[str, Any]:
        """Extract a flat key/value record from text.

        Args:
            text: Raw OCR text.

        Returns:
            Mapping of field names to extracted values.
        """
        return {f.field_name: f.value for f in self.extractor.extract(text)}

    def generate_json(self, text: str) -> str:
        """Convert extracted text to a JSON object string.

        Args:
            text: Raw OCR text.

        Returns:
            JSON object; ``"{}"`` when nothing is found.
        """
        record = self.extract_fields(text)
        logger.debug("Generated JSON with %d fields", len(record))
        return json.dumps(record, ensure_ascii=False)

    def field_mappings(self, text: str, confidence: int | None = None) -> list[FieldMapping]:
        """Describe each extracted field as a :class:`FieldMapping`.

        Args:
            text: Raw OCR text.
            confidence: OCR confidence (0-100) recorded on every mapping.

        Returns:
            One mapping per extracted field.
        """
        return [
            FieldMapping(
                source_field=f.source_label,
                target_field=f.field_name,
                field_type=f.field_type,
                extracted_value=str(f.value),
                confidence=confidence,
            )
            for f in self.extractor.extract(text)
        ]

    @staticmethod
    def is_valid_json(value: str | None) -> bool:
        """Return whether a string parses as JSON."""
        if value is None:
            return False
        try:
            json.loads(value)
        except (TypeError, ValueError):
            return False
        return True

    @staticmethod
    def merge(extracted: dict[str, Any], corrected: dict[str, Any]) -> dict[str, Any]:
        """Overlay corrected values on an extracted record.

        Keys only in ``extracted`` survive, keys in ``corrected`` always win,
        and keys only in ``corrected`` are added.
        """
        merged = dict(extracted)
        merged.update(corrected)
        return merged

    def merge_json(self, extracted_json: str, corrected_json: str) -> str:
        """Merge two JSON object strings, corrected values winning.

        Args:
            extracted_json: JSON object produced by extraction.
            corrected_json: JSON object supplied as a correction.

        Returns:
            Merged JSON object string.

        Raises:
            InvalidCorrectionError: If either input is not a JSON object.
        """
        extracted = self._load_object(extracted_json, "extracted")
        corrected = self._load_object(corrected_json, "corrected")
        return json.dumps(self.merge(extracted, corrected), ensure_ascii=False)

    @staticmethod
    def _load_object(value: str, name: str) -> dict[str, Any]:
        try:
            data = json.loads(value)
        except (TypeError, ValueError) as exc:
            raise InvalidCorrectionError(f"Invalid {name} JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise InvalidCorrectionError(f"The {name} JSON must be an object")
        return data
