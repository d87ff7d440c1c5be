"""
Length gates and truncation.

The gates look at the real content length, so truncate() must only run
after both of them have passed.
"""

from .exceptions import ExtractionError, ExtractionFailure, InputError

MIN_EXTRACTED_LENGTH = 100
MIN_INPUT_LENGTH = 50
MAX_ARTICLE_LENGTH = 50000

TRUNCATION_MARKER = "...\n\n[Article truncated for analysis]"


def ensure_extracted_length(text: str) -> str:
    """Fail when normalized page text is too short to be an article."""
    if len(text) < MIN_EXTRACTED_LENGTH:
        raise ExtractionError(
            f"Extracted only {len(text)} characters of article text",
            reason=ExtractionFailure.INSUFFICIENT_CONTENT,
            details={"length": len(text)}
        )
    return text


def ensure_input_length(text: str) -> str:
    """Fail when the text headed for analysis is too short to judge."""
    length = len(text.strip()) if text else 0
    if length < MIN_INPUT_LENGTH:
        raise InputError(
            "Article text is too short",
            details={"kind": "too_short", "length": length}
        )
    return text


def truncate(text: str) -> str:
    """Cap text at MAX_ARTICLE_LENGTH characters, marking the cut once."""
    if len(text) <= MAX_ARTICLE_LENGTH:
        return text
    return text[:MAX_ARTICLE_LENGTH] + TRUNCATION_MARKER
