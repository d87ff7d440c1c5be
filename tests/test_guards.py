"""Tests for the length gates and truncation."""

import pytest

from veritas.exceptions import ExtractionError, ExtractionFailure, InputError
from veritas.guards import (
    MAX_ARTICLE_LENGTH,
    TRUNCATION_MARKER,
    ensure_extracted_length,
    ensure_input_length,
    truncate,
)


def test_input_gate_boundary():
    with pytest.raises(InputError) as exc_info:
        ensure_input_length("x" * 49)
    assert exc_info.value.details["kind"] == "too_short"

    assert ensure_input_length("x" * 50) == "x" * 50


def test_input_gate_ignores_surrounding_whitespace():
    with pytest.raises(InputError):
        ensure_input_length("   " + "x" * 49 + "\n\n\n")


def test_input_gate_rejects_empty():
    with pytest.raises(InputError):
        ensure_input_length("")


def test_extraction_gate_boundary():
    with pytest.raises(ExtractionError) as exc_info:
        ensure_extracted_length("x" * 99)
    assert exc_info.value.reason == ExtractionFailure.INSUFFICIENT_CONTENT

    assert ensure_extracted_length("x" * 100) == "x" * 100


def test_truncate_leaves_short_text_alone():
    text = "x" * MAX_ARTICLE_LENGTH
    assert truncate(text) == text


def test_truncate_caps_long_text_with_one_marker():
    result = truncate("x" * 60000)

    assert result == "x" * MAX_ARTICLE_LENGTH + TRUNCATION_MARKER
    assert result.count("[Article truncated for analysis]") == 1
    assert result.startswith("x" * MAX_ARTICLE_LENGTH + "...")
