"""Tests for string-level HTML cleanup and charset detection."""

import pytest

from veritas.preprocessor import Preprocessor


@pytest.fixture
def preprocessor():
    return Preprocessor()


def test_clean_html_passes_through(preprocessor):
    html = "<html><body><p>Hello</p></body></html>"
    assert preprocessor.sanitize(html) == (html, [])


def test_removes_null_bytes(preprocessor):
    sanitized, warnings = preprocessor.sanitize("<p>He\x00llo</p>")

    assert sanitized == "<p>Hello</p>"
    assert "Removed NULL bytes" in warnings


def test_fixes_double_brackets(preprocessor):
    sanitized, _ = preprocessor.sanitize("<<p>>Hello<</p>>")
    assert sanitized == "<p>Hello</p>"


def test_normalizes_line_endings_and_control_chars(preprocessor):
    sanitized, warnings = preprocessor.sanitize("<p>a\r\nb\rc\x07d\te</p>")

    assert sanitized == "<p>a\nb\ncd\te</p>"
    assert "Removed control characters" in warnings


def test_replaces_lone_surrogates(preprocessor):
    sanitized, _ = preprocessor.sanitize("<p>bad \ud800 char</p>")
    assert "\ud800" not in sanitized


@pytest.mark.parametrize(
    "raw, expected",
    [
        (b'<meta charset="utf-8">', "utf-8"),
        (b"<meta charset=ISO-8859-1>", "windows-1252"),
        (b'<meta http-equiv="Content-Type" content="text/html; charset=Shift_JIS">', "shift_jis"),
        (b"<html><head><title>none</title></head>", None),
    ],
)
def test_detect_charset_from_bytes(raw, expected):
    assert Preprocessor.detect_charset_from_bytes(raw) == expected


@pytest.mark.parametrize("label, expected", [("latin1", "windows-1252"), (' "UTF-8" ', "utf-8"), ("koi8-r", "koi8-r")])
def test_map_charset(label, expected):
    assert Preprocessor.map_charset(label) == expected
