"""
Outbound side of the pipeline: URL validation, the single-shot HTTP fetch and
the content-type guard.

Pipeline position: first I/O stage, only for requests that carry a URL and no text.
Input:  caller-supplied URL string
Output: FetchedPage with decoded HTML, or a typed error

No retries happen here. One attempt, then fail fast. The timeout is a deadline
for the whole request, body included, and the body is capped at MAX_RESPONSE_BYTES.
"""

import time
from typing import Optional
from urllib.parse import urlparse

import httpx

from .schemas import FetchedPage
from .preprocessor import Preprocessor
from .exceptions import ExtractionError, ExtractionFailure, AnalysisTimeoutError
from .logger import get_module_logger

logger = get_module_logger("fetcher")

ALLOWED_SCHEMES = ("http", "https")

# Headers a desktop Chrome would send; many news sites refuse bare clients
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

DEFAULT_TIMEOUT = 30.0

# Larger pages are not articles worth reading
MAX_RESPONSE_BYTES = 5 * 1024 * 1024


def is_valid_url(value: str) -> bool:
    """True only for parseable http(s) URLs with a host."""
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.netloc)


def ensure_html(content_type: Optional[str]) -> None:
    """Reject anything that is not declared as text/html."""
    if not content_type or "text/html" not in content_type.lower():
        raise ExtractionError(
            f"Unsupported content type: {content_type or 'missing'}",
            reason=ExtractionFailure.NOT_HTML,
            details={"content_type": content_type}
        )


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if 200 <= status < 300:
        return

    logger.warning(f"Fetch of {response.request.url} returned HTTP {status}")
    if status == 403:
        raise ExtractionError("Forbidden", reason=ExtractionFailure.FORBIDDEN, status_code=status)
    if status == 404:
        raise ExtractionError("Not found", reason=ExtractionFailure.NOT_FOUND, status_code=status)
    if status >= 500:
        raise ExtractionError(
            "Server unavailable", reason=ExtractionFailure.SERVER_UNAVAILABLE, status_code=status
        )
    raise ExtractionError(
        f"Fetch failed with HTTP {status}", reason=ExtractionFailure.FETCH_FAILED, status_code=status
    )


class HtmlFetcher:
    """
    Fetches one HTML page.

    Args:
        timeout: Hard deadline for the whole request, body included, in seconds.
        client: Optional pre-built httpx.Client (tests pass one with a MockTransport).
        max_bytes: Largest body accepted before the download is abandoned.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
        max_bytes: int = MAX_RESPONSE_BYTES
    ):
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._client = client

    def fetch(self, url: str) -> FetchedPage:
        """GET `url` and return the decoded page, mapping every failure to a typed error."""
        logger.info(f"Fetching {url}")
        deadline = time.monotonic() + self.timeout

        client = self._client or httpx.Client()
        try:
            # httpx timeouts apply per phase (each read gets the full budget),
            # so the body is streamed and checked against the overall deadline
            with client.stream(
                "GET", url, headers=BROWSER_HEADERS, timeout=self.timeout, follow_redirects=True
            ) as response:
                _raise_for_status(response)

                content_type = response.headers.get("content-type")
                ensure_html(content_type)

                content = self._read_body(response, url, deadline)
        except httpx.TimeoutException as e:
            raise AnalysisTimeoutError(
                f"Fetching {url} timed out after {self.timeout}s", stage="fetch"
            ) from e
        except httpx.RequestError as e:
            # DNS failure, refused connection, reset, too many redirects
            raise ExtractionError(
                f"Could not reach {url}",
                reason=ExtractionFailure.NETWORK_UNREACHABLE,
                details={"error": type(e).__name__}
            ) from e
        finally:
            if self._client is None:
                client.close()

        encoding = self._resolve_encoding(response, content)
        try:
            html = content.decode(encoding, errors="replace")
        except LookupError:
            logger.warning(f"Unknown charset '{encoding}', decoding as utf-8")
            encoding = "utf-8"
            html = content.decode(encoding, errors="replace")

        logger.info(f"Fetched {len(html)} chars ({encoding}) from {url}")
        return FetchedPage(
            url=str(response.url),
            status_code=response.status_code,
            content_type=content_type,
            encoding=encoding,
            html=html,
        )

    def _read_body(self, response: httpx.Response, url: str, deadline: float) -> bytes:
        """Read the streamed body, enforcing the size cap and the overall deadline."""
        declared_length = response.headers.get("content-length", "")
        if declared_length.isdigit() and int(declared_length) > self.max_bytes:
            raise self._too_large(url, int(declared_length))

        if time.monotonic() > deadline:
            raise AnalysisTimeoutError(
                f"Fetching {url} exceeded the {self.timeout}s deadline", stage="fetch"
            )

        chunks = []
        received = 0
        for chunk in response.iter_bytes():
            received += len(chunk)
            if received > self.max_bytes:
                raise self._too_large(url, received)
            if time.monotonic() > deadline:
                raise AnalysisTimeoutError(
                    f"Fetching {url} exceeded the {self.timeout}s deadline after {received} bytes",
                    stage="fetch"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def _too_large(self, url: str, size: int) -> ExtractionError:
        logger.warning(f"Response from {url} exceeds {self.max_bytes} bytes")
        return ExtractionError(
            f"Response larger than {self.max_bytes} bytes",
            reason=ExtractionFailure.TOO_LARGE,
            details={"bytes": size, "limit": self.max_bytes}
        )

    def _resolve_encoding(self, response: httpx.Response, content: bytes) -> str:
        """HTTP header charset first, then <meta charset>, then utf-8."""
        declared = response.charset_encoding
        if declared:
            return Preprocessor.map_charset(declared)
        return Preprocessor.detect_charset_from_bytes(content) or "utf-8"
