"""Tests for field extraction and JSON generation."""

import json

import pytest

from src.documents.exceptions import InvalidCorrectionError
from src.extraction.field_extractor import FieldExtractor
from src.extraction.json_generator import JsonGenerator

SIGNUP_FORM = """Registration Form
First Name: Jane
Last Name: O'Neil
Email Address: jane.oneil@example.org
Phone: +4915123456789
Address: 12 Baker Street
City: New York
Zip Code: 10001
Date of Birth: 03/14/1990
Gender: Female
Age: 34
"""


@pytest.fixture
def extractor() -> FieldExtractor:
    return FieldExtractor()


@pytest.fixture
def generator() -> JsonGenerator:
    return JsonGenerator()


class TestFieldExtractor:
    """Tests for label-based field extraction."""

    def test_first_last_and_email(self, generator: JsonGenerator) -> None:
        text = "First Name: John\nLast Name: Doe\nEmail: john.doe@example.com"
        record = generator.extract_fields(text)
        assert record["firstName"] == "John"
        assert record["lastName"] == "Doe"
        assert record["email"] == "john.doe@example.com"

    def test_generic_name_is_split(self, generator: JsonGenerator) -> None:
        record = generator.extract_fields("Name: Max Müller")
        assert record["firstName"] == "Max"
        assert record["lastName"] == "Müller"

    def test_single_token_name_is_full_name(self, generator: JsonGenerator) -> None:
        record = generator.extract_fields("Name: Cher")
        assert record == {"fullName": "Cher"}

    def test_full_signup_form(self, generator: JsonGenerator) -> None:
        record = generator.extract_fields(SIGNUP_FORM)
        assert record == {
            "firstName": "Jane",
            "lastName": "O'Neil",
            "email": "jane.oneil@example.org",
            "phone": "+4915123456789",
            "address": "12 Baker Street",
            "city": "New York",
            "zipCode": "10001",
            "dateOfBirth": "03/14/1990",
            "gender": "Female",
            "age": 34,
        }

    def test_labels_are_case_insensitive(self, generator: JsonGenerator) -> None:
        record = generator.extract_fields("FIRST NAME: Ada\nsurname: Lovelace")
        assert record == {"firstName": "Ada", "lastName": "Lovelace"}

    def test_value_stops_at_end_of_line(self, generator: JsonGenerator) -> None:
        record = generator.extract_fields("City: Berlin\nCountry: Germany")
        assert record["city"] == "Berlin"

    def test_email_address_label_is_not_an_address(self, generator: JsonGenerator) -> None:
        record = generator.extract_fields("Email Address: a@b.io")
        assert "address" not in record
        assert record["email"] == "a@b.io"

    def test_unlabeled_text_yields_nothing(self, extractor: FieldExtractor) -> None:
        assert extractor.extract("Lorem ipsum dolor sit amet") == []

    def test_blank_text_yields_nothing(self, extractor: FieldExtractor) -> None:
        assert extractor.extract("") == []
        assert extractor.extract("   \n\t") == []

    def test_source_label_recorded(self, extractor: FieldExtractor) -> None:
        fields = extractor.extract("Surname: Smith")
        assert len(fields) == 1
        assert fields[0].field_name == "lastName"
        assert fields[0].source_label == "Surname"
        assert fields[0].field_type == "string"

    def test_age_is_integer(self, extractor: FieldExtractor) -> None:
        fields = extractor.extract("Age: 42")
        assert fields[0].value == 42
        assert fields[0].field_type == "integer"

    def test_first_match_wins(self, generator: JsonGenerator) -> None:
        record = generator.extract_fields("City: Paris\nCity: Lyon")
        assert record["city"] == "Paris"

    def test_word_containing_label_is_ignored(self, generator: JsonGenerator) -> None:
        record = generator.extract_fields("Page: 3\nStage: 2")
        assert "age" not in record


class TestJsonGenerator:
    """Tests for JSON generation, validation, and merging."""

    def test_empty_text_gives_empty_object(self, generator: JsonGenerator) -> None:
        assert generator.generate_json("") == "{}"

    def test_generated_json_is_valid(self, generator: JsonGenerator) -> None:
        for text in ["", "Name: Max Müller", SIGNUP_FORM, "garbage ::: ###"]:
            assert generator.is_valid_json(generator.generate_json(text))

    def test_non_ascii_preserved(self, generator: JsonGenerator) -> None:
        assert "Müller" in generator.generate_json("Name: Max Müller")

    def test_field_mappings(self, generator: JsonGenerator) -> None:
        mappings = generator.field_mappings("First Name: John\nAge: 30", confidence=77)
        assert [m.target_field for m in mappings] == ["firstName", "age"]
        assert mappings[0].source_field == "First Name"
        assert mappings[1].extracted_value == "30"
        assert mappings[1].field_type == "integer"
        assert all(m.confidence == 77 for m in mappings)
        assert all(m.corrected_value is None for m in mappings)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ('{"a": 1}', True),
            ("[1, 2]", True),
            ('"text"', True),
            ("{not valid}", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_valid_json(self, value: str | None, expected: bool) -> None:
        assert JsonGenerator.is_valid_json(value) is expected

    def test_merge_corrected_wins(self) -> None:
        merged = JsonGenerator.merge({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert merged == {"a": 1, "b": 3, "c": 4}

    def test_merge_is_idempotent(self) -> None:
        extracted = {"firstName": "Jon", "email": "x@y.z"}
        corrected = {"firstName": "John"}
        once = JsonGenerator.merge(extracted, corrected)
        assert JsonGenerator.merge(once, corrected) == once

    def test_merge_with_empty_correction(self) -> None:
        extracted = {"a": 1}
        assert JsonGenerator.merge(extracted, {}) == extracted

    def test_merge_json(self, generator: JsonGenerator) -> None:
        merged = generator.merge_json('{"a": 1, "b": 2}', '{"b": "x"}')
        assert json.loads(merged) == {"a": 1, "b": "x"}

    def test_merge_json_rejects_invalid(self, generator: JsonGenerator) -> None:
        with pytest.raises(InvalidCorrectionError):
            generator.merge_json('{"a": 1}', "{not valid}")

    def test_merge_json_rejects_non_object(self, generator: JsonGenerator) -> None:
        with pytest.raises(InvalidCorrectionError, match="object"):
            generator.merge_json('{"a": 1}', "[1, 2]")
