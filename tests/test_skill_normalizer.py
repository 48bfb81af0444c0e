"""Unit tests for skill name cleaning, id detection and category guessing."""

from uuid import UUID, uuid4

import pytest

from app.services.skill_normalizer import clean_name, guess_category, name_key, parse_uuid


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("React", "React"),
        ('  "React" ', "React"),
        ("(SQL)", "SQL"),
        ("'Node.js'", "Node.js"),
        ('Re"act', "React"),
        ("Spring    Boot", "Spring Boot"),
        ("\tMachine\nLearning ", "Machine Learning"),
        ('""', ""),
        (None, ""),
    ],
)
def test_clean_name(raw, expected) -> None:
    assert clean_name(raw) == expected


def test_name_key_ignores_case_and_stray_punctuation() -> None:
    assert name_key("React") == name_key('"react"') == name_key(" REACT ") == "react"


def test_parse_uuid_accepts_only_id_shaped_values() -> None:
    value = uuid4()

    assert parse_uuid(value) is value
    assert parse_uuid(str(value)) == value
    assert parse_uuid(value.hex) == value
    assert parse_uuid(f"  {value}  ") == value
    assert parse_uuid("React") is None
    assert parse_uuid("12345") is None
    assert parse_uuid(123) is None
    assert parse_uuid(None) is None
    assert isinstance(parse_uuid(str(value).upper()), UUID)


@pytest.mark.parametrize(
    ("name", "category"),
    [
        ("TypeScript", "Language"),
        ("C++", "Language"),
        ("Django", "Framework / Library"),
        ("Next.js", "Framework / Library"),
        ("MongoDB", "Database"),
        ("PostgreSQL", "Database"),
        ("GitHub Actions", "DevOps / Cloud"),
        ("Webpack", "Tooling"),
        ("Cypress", "Testing"),
        ("Figma", "UI / UX"),
        ("Public Speaking", "Other"),
        ("", "Other"),
    ],
)
def test_guess_category(name, category) -> None:
    assert guess_category(name) == category
