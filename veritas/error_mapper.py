"""
Boundary error mapping: the only place typed failures become user-facing
messages and HTTP status codes.

Messages say what happened and what to try. Internal detail (exception text,
backend responses, tracebacks) goes to the log, never into the response.
"""

from .schemas import ErrorResponse
from .exceptions import (
    VeritasError, InputError, ExtractionError, ExtractionFailure, ConfigError,
    ModelError, ModelFailure, AnalysisTimeoutError
)
from .logger import get_module_logger

logger = get_module_logger("error_mapper")

MISSING_INPUT_MESSAGE = "Either article text or URL must be provided."
TOO_SHORT_MESSAGE = (
    "Article text is too short for meaningful analysis. "
    "Please provide a longer article or check the URL."
)
INVALID_URL_MESSAGE = "Invalid URL format. Please provide a valid HTTP or HTTPS URL."

EXTRACTION_MESSAGES = {
    ExtractionFailure.FORBIDDEN:
        "Access denied. The website may be blocking automated requests.",
    ExtractionFailure.NOT_FOUND:
        "Article not found. Please check the URL and try again.",
    ExtractionFailure.SERVER_UNAVAILABLE:
        "The website is currently unavailable. Please try again later.",
    ExtractionFailure.NETWORK_UNREACHABLE:
        "Unable to access the URL. Please check your internet connection and try again.",
    ExtractionFailure.NOT_HTML:
        "The URL does not point to a web page. Please provide a link to an article.",
    ExtractionFailure.TOO_LARGE:
        "The page is too large to analyze. Please provide a link to a single article.",
    ExtractionFailure.INSUFFICIENT_CONTENT:
        "Could not extract sufficient article content from the URL. The page may be behind "
        "a paywall, require JavaScript, or contain mostly non-text content.",
}

CONFIG_MESSAGE = (
    "The analysis service API key is not configured. "
    "Please set the API key for the configured LLM provider."
)

MODEL_MESSAGES = {
    ModelFailure.AUTH: (
        "The analysis service API key is missing or invalid. "
        "Please check the API key configured for the LLM provider.",
        500,
    ),
    ModelFailure.RATE_LIMIT: (
        "Service temporarily unavailable due to high demand. Please try again in a few minutes.",
        429,
    ),
    ModelFailure.SCHEMA_VIOLATION: (
        "The analysis service returned an invalid result. Please try again.",
        500,
    ),
    ModelFailure.BACKEND_FAILURE: (
        "The analysis service failed to respond. Please try again later.",
        500,
    ),
}

FETCH_TIMEOUT_MESSAGE = "Request timed out. The website may be slow to respond."
MODEL_TIMEOUT_MESSAGE = "Analysis timed out. Please try again with a shorter article."

UNKNOWN_MESSAGE = "Analysis failed due to an unexpected error. Please try again later."


def _input_message(error: InputError) -> str:
    kind = error.details.get("kind")
    if kind == "missing":
        return MISSING_INPUT_MESSAGE
    if kind == "invalid_url":
        return INVALID_URL_MESSAGE
    return TOO_SHORT_MESSAGE


def map_error(error: Exception) -> tuple[ErrorResponse, int]:
    """
    Translate any pipeline failure into a response body and status code.

    Args:
        error: Whatever the pipeline raised

    Returns:
        Tuple of (ErrorResponse, HTTP status)
    """
    if isinstance(error, InputError):
        response, status = ErrorResponse(error=_input_message(error)), 400

    elif isinstance(error, ExtractionError):
        if error.reason == ExtractionFailure.FETCH_FAILED:
            message = (
                f"Failed to fetch URL ({error.status_code}). "
                "Please verify the URL is accessible."
            )
        else:
            message = EXTRACTION_MESSAGES[error.reason]
        response, status = ErrorResponse(error=message), 400

    elif isinstance(error, ConfigError):
        response, status = ErrorResponse(error=CONFIG_MESSAGE), 500

    elif isinstance(error, ModelError):
        message, status = MODEL_MESSAGES[error.kind]
        response = ErrorResponse(error=message)

    elif isinstance(error, AnalysisTimeoutError):
        message = FETCH_TIMEOUT_MESSAGE if error.stage == "fetch" else MODEL_TIMEOUT_MESSAGE
        response, status = ErrorResponse(error=message), 408

    else:
        logger.exception("Unclassified analysis error", exc_info=error)
        return ErrorResponse(error=UNKNOWN_MESSAGE), 500

    error_class = error.error_class if isinstance(error, VeritasError) else "UnknownError"
    logger.warning(f"{error_class} ({status}): {error}")
    return response, status
