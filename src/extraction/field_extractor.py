"""Rule-based field extraction for signup and registration forms.

Matches "label: value" patterns in OCR text. Fields are organized in
independent groups (name, contact, address, date, other); within a field
the first matching pattern wins. Labels are case-insensitive and values
never extend past the end of the label's line.
"""

import re
from dataclasses import dataclass

from src.utils.logger import get_logger

logger = get_logger(__name__)

_SEP = r"[ \t]*[:#]?[ \t]*"
_WORD = r"[^\W\d_](?:[^\W\d_]|['\-])*"
_PHRASE = rf"{_WORD}(?:[ \t]+{_WORD})*"
_ZIP_TOKEN = r"[A-Za-z0-9]*\d[A-Za-z0-9]*"


@dataclass
class ExtractedField:
    """A field value extracted from a labeled line of text."""

    field_name: str
    value: str | int
    source_label: str
    field_type: str = "string"


def _pattern(label: str, value: str) -> re.Pattern[str]:
    return re.compile(
        rf"\b(?P<label>{label})\b{_SEP}(?P<value>{value})", re.IGNORECASE
    )


# Field definitions: (field_name, [patterns]) in output order per group.
_NAME_FIELDS: list[tuple[str, list[re.Pattern[str]]]] = [
    ("firstName", [_pattern(r"first[ \t]*name|given[ \t]*name|forename", _WORD)]),
    ("lastName", [_pattern(r"last[ \t]*name|family[ \t]*name|surname", _WORD)]),
]

_FULL_NAME_PATTERNS: list[re.Pattern[str]] = [
    _pattern(r"full[ \t]*name|name", _PHRASE),
]

_CONTACT_FIELDS: list[tuple[str, list[re.Pattern[str]]]] = [
    (
        "email",
        [
            _pattern(
                r"e-?mail(?:[ \t]*address)?",
                r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}",
            )
        ],
    ),
    (
        "phone",
        [
            _pattern(
                r"phone(?:[ \t]*number)?|telephone|tel|mobile|cell(?:[ \t]*phone)?",
                r"\+?\d{7,15}(?!\d)",
            )
        ],
    ),
]

_ADDRESS_FIELDS: list[tuple[str, list[re.Pattern[str]]]] = [
    (
        "address",
        [
            _pattern(
                r"street[ \t]*address|home[ \t]*address|(?<!mail[ \t])address|street",
                r"[^\W_][\w .,'/#\-]*",
            )
        ],
    ),
    ("city", [_pattern(r"city|town", _PHRASE)]),
    (
        "zipCode",
        [
            _pattern(
                r"zip[ \t]*code|zip|postal[ \t]*code|post[ \t]*code|postcode",
                rf"{_ZIP_TOKEN}(?:[ \-]{_ZIP_TOKEN})?",
            )
        ],
    ),
]

_DATE_FIELDS: list[tuple[str, list[re.Pattern[str]]]] = [
    (
        "dateOfBirth",
        [
            _pattern(
                r"date[ \t]*of[ \t]*birth|birth[ \t]*date|dob",
                r"\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}(?!\d)",
            )
        ],
    ),
]

_OTHER_FIELDS: list[tuple[str, list[re.Pattern[str]]]] = [
    ("gender", [_pattern(r"gender|sex", r"(?:female|male|other|f|m)\b")]),
    ("age", [_pattern(r"age", r"\d{1,3}(?!\d)")]),
]

_INTEGER_FIELDS = frozenset({"age"})


class FieldExtractor:
    """Extracts structured fields from raw OCR text."""

    def __init__(self) -> None:
        self.groups: dict[str, list[tuple[str, list[re.Pattern[str]]]]] = {
            "contact": _CONTACT_FIELDS,
            "address": _ADDRESS_FIELDS,
            "date": _DATE_FIELDS,
            "other": _OTHER_FIELDS,
        }

    def extract(self, text: str) -> list[ExtractedField]:
        """Extract all recognized fields from text.

        Args:
            text: Raw OCR text.

        Returns:
            Extracted fields in output order (name, contact, address,
            date, other).
        """
        if not text or not text.strip():
            return []

        results = self._extract_name_fields(text)
        for fields in self.groups.values():
            results.extend(self._extract_group(text, fields))

        logger.info("Field extraction found %d fields", len(results))
        return results

    def _extract_group(
        self, text: str, fields: list[tuple[str, list[re.Pattern[str]]]]
    ) -> list[ExtractedField]:
        results: list[ExtractedField] = []
        for field_name, patterns in fields:
            match = self._first_match(text, patterns)
            if match is None:
                continue
            value: str | int = match.group("value").strip()
            field_type = "string"
            if field_name in _INTEGER_FIELDS:
                value = int(value)
                field_type = "integer"
            results.append(
                ExtractedField(
                    field_name=field_name,
                    value=value,
                    source_label=match.group("label"),
                    field_type=field_type,
                )
            )
        return results

    def _extract_name_fields(self, text: str) -> list[ExtractedField]:
        """Extract first/last name, falling back to a generic name label.

        A generic name with two or more tokens is split into first and last
        token; a single token is kept as ``fullName``.
        """
        results = self._extract_group(text, _NAME_FIELDS)
        if results:
            return results

        match = self._first_match(text, _FULL_NAME_PATTERNS)
        if match is None:
            return []

        label = match.group("label")
        full_name = match.group("value").strip()
        parts = full_name.split()
        if len(parts) >= 2:
            return [
                ExtractedField("firstName", parts[0], label),
                ExtractedField("lastName", parts[-1], label),
            ]
        return [ExtractedField("fullName", full_name, label)]

    @staticmethod
    def _first_match(text: str, patterns: list[re.Pattern[str]]) -> re.Match[str] | None:
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                return match
        return None
