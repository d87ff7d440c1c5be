"""
Main orchestrator for the Veritas pipeline.

Request flow:
  config check → URL validation → fetch → extract → normalize → extraction gate
  → input gate → truncate → prompt → backend → result callback

Every stage raises a typed error; handle() is the boundary that turns them
into {error} responses via the error mapper.
"""

import threading
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .config import Settings
from .schemas import AnalysisRequest, AnalysisResult, GenerationOptions
from .fetcher import HtmlFetcher, is_valid_url
from .extractor import ArticleExtractor
from .normalizer import normalize, prepend_title
from .guards import ensure_extracted_length, ensure_input_length, truncate
from .prompt import build_prompt
from .analyzer import Analyzer
from .llm_client import LLMProvider
from .error_mapper import map_error
from .exceptions import InputError
from .logger import get_module_logger, setup_logger

logger = get_module_logger("main")

# Receives (result, source_url, input_type) once per successful analysis.
# This is where a history store plugs in; the pipeline never reads it back.
ResultCallback = Callable[[AnalysisResult, Optional[str], str], None]


class VerificationPipeline:
    """
    Runs one authenticity analysis per request.

    Holds no per-request state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        analyzer: Optional[Analyzer] = None,
        fetcher: Optional[HtmlFetcher] = None,
        extractor: Optional[ArticleExtractor] = None,
        on_result: Optional[ResultCallback] = None
    ):
        self.settings = settings or Settings.from_env()
        setup_logger(level=self.settings.log_level)

        self._analyzer = analyzer
        self._analyzer_lock = threading.Lock()
        self.fetcher = fetcher or HtmlFetcher(timeout=self.settings.fetch_timeout)
        self.extractor = extractor or ArticleExtractor()
        self.on_result = on_result

        logger.info("VerificationPipeline initialized")

    @property
    def analyzer(self) -> Analyzer:
        # Built on first use: a missing credential fails the request, not the server start.
        # The lock keeps concurrent first requests from each building a backend client.
        if self._analyzer is None:
            with self._analyzer_lock:
                if self._analyzer is None:
                    api_key = self.settings.require_api_key()
                    self._analyzer = Analyzer(
                        provider=LLMProvider(self.settings.provider),
                        api_key=api_key,
                        model=self.settings.model,
                        options=GenerationOptions(grounding_enabled=self.settings.grounding_enabled)
                    )
        return self._analyzer

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Analyze one article.

        Args:
            request: Text and/or URL; text wins when both are given

        Returns:
            Validated AnalysisResult

        Raises:
            VeritasError subclasses for every anticipated failure
        """
        analyzer = self.analyzer

        if not request.has_text and not request.has_url:
            raise InputError("Neither text nor url provided", details={"kind": "missing"})

        source_url = (request.url or "").strip() or None
        if request.has_text:
            article_text = request.text
        else:
            if not is_valid_url(source_url):
                raise InputError(f"Invalid URL: {request.url!r}", details={"kind": "invalid_url"})
            article_text = self.extract_text(source_url)

        ensure_input_length(article_text)
        article_text = truncate(article_text)

        logger.info(f"Analyzing {len(article_text)} chars ({request.input_type} input)")
        prompt = build_prompt(article_text, source_url)
        result = analyzer.invoke(prompt)

        if self.on_result is not None:
            self.on_result(result, source_url, request.input_type)
        return result

    def extract_text(self, url: str) -> str:
        """Fetch `url` and return normalized article text with its title on top."""
        page = self.fetcher.fetch(url)
        article = self.extractor.extract(page.html)

        body = normalize(article.body)
        ensure_extracted_length(body)
        text = prepend_title(body, article.title)

        logger.info(f"Extracted {len(text)} chars from {url}")
        return text

    def handle(self, payload: Any) -> tuple[dict, int]:
        """
        Boundary entry point: raw JSON payload in, (response body, status) out.

        Never raises.
        """
        try:
            request = AnalysisRequest.model_validate(payload if payload is not None else {})
        except ValidationError as e:
            return self._error_response(
                InputError("Malformed request body", details={"kind": "missing", "errors": e.errors()})
            )

        try:
            result = self.analyze(request)
        except Exception as e:
            return self._error_response(e)
        return result.model_dump(mode="json"), 200

    def _error_response(self, error: Exception) -> tuple[dict, int]:
        response, status = map_error(error)
        return response.model_dump(), status


def analyze_text(text: str, source_url: Optional[str] = None) -> AnalysisResult:
    """Convenience function to analyze article text."""
    return VerificationPipeline().analyze(AnalysisRequest(text=text, url=source_url))


def analyze_url(url: str) -> AnalysisResult:
    """Convenience function to fetch and analyze an article URL."""
    return VerificationPipeline().analyze(AnalysisRequest(url=url))
