"""
Error taxonomy for the Veritas pipeline.

Every stage raises one of these; only the error mapper turns them into
user-facing messages and status codes.

  - InputError           → the request itself is malformed or too short.
  - ExtractionError      → the URL could not be fetched or yielded no article.
  - ConfigError          → the generation backend credential is missing.
  - ModelError           → the backend rejected, throttled or garbled the call.
  - AnalysisTimeoutError → the fetch or the backend call ran past its deadline.

Anything else reaching the boundary is reported as an UnknownError.
"""

from enum import Enum
from typing import Optional


class VeritasError(Exception):
    """Base exception for all Veritas errors."""

    error_class = "VeritasError"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputError(VeritasError):
    """Raised when the request has no usable text or URL."""

    error_class = "InputError"


# --- Extraction failures, subdivided by cause ---

class ExtractionFailure(str, Enum):
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_UNAVAILABLE = "server_unavailable"
    FETCH_FAILED = "fetch_failed"
    NETWORK_UNREACHABLE = "network_unreachable"
    NOT_HTML = "not_html"
    TOO_LARGE = "too_large"
    INSUFFICIENT_CONTENT = "insufficient_content"


class ExtractionError(VeritasError):
    """
    Raised when an article URL cannot be turned into article text.

    `reason` says which step failed; `status_code` carries the upstream HTTP
    status for FETCH_FAILED.
    """

    error_class = "ExtractionError"

    def __init__(
        self,
        message: str,
        reason: ExtractionFailure,
        status_code: Optional[int] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.reason = reason
        self.status_code = status_code


class ConfigError(VeritasError):
    """Raised when the generation backend credential is not configured."""

    error_class = "ConfigError"


# --- Backend failures ---

class ModelFailure(str, Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    SCHEMA_VIOLATION = "schema_violation"
    BACKEND_FAILURE = "backend_failure"


class ModelError(VeritasError):
    """Raised when the generation backend call fails or returns a bad object."""

    error_class = "ModelError"

    def __init__(
        self,
        message: str,
        kind: ModelFailure,
        provider: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.kind = kind
        self.provider = provider  # "openai" or "anthropic"


class AnalysisTimeoutError(VeritasError):
    """Raised when the article fetch or the backend call exceeds its deadline."""

    error_class = "TimeoutError"

    def __init__(self, message: str, stage: str, details: Optional[dict] = None):
        super().__init__(message, details)
        self.stage = stage  # "fetch" or "model"
