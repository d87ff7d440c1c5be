"""
Veritas: article authenticity analysis.

Takes article text or a URL, extracts clean article prose from hostile HTML,
and asks a generation backend for a schema-validated authenticity verdict.
- Fetcher:    single-shot HTTP GET with content-type guard
- Extractor:  boilerplate removal, JSON-LD, selector cascade, body fallback
- Normalizer: deterministic text cleanup
- Analyzer:   schema-constrained backend invocation

Public API surface:
  Pipeline:     VerificationPipeline, create_app
  Stages:       HtmlFetcher, ArticleExtractor, Analyzer, normalize, build_prompt
  Data models:  AnalysisRequest, AnalysisResult, Claim, Source
  Error types:  InputError, ExtractionError, ConfigError, ModelError, AnalysisTimeoutError
"""

# --- Pipeline ---
from .main import VerificationPipeline
from .api import create_app

# --- Stages ---
from .fetcher import HtmlFetcher, is_valid_url
from .extractor import ArticleExtractor
from .normalizer import normalize
from .prompt import build_prompt
from .analyzer import Analyzer

# --- Data models ---
from .schemas import AnalysisRequest, AnalysisResult, Claim, ClaimStatus, Source

# --- Exceptions ---
from .exceptions import (
    VeritasError,
    InputError,
    ExtractionError,
    ConfigError,
    ModelError,
    AnalysisTimeoutError,
)

__version__ = "0.1.0"
__all__ = [
    "VerificationPipeline",
    "create_app",
    "HtmlFetcher",
    "is_valid_url",
    "ArticleExtractor",
    "normalize",
    "build_prompt",
    "Analyzer",
    "AnalysisRequest",
    "AnalysisResult",
    "Claim",
    "ClaimStatus",
    "Source",
    "VeritasError",
    "InputError",
    "ExtractionError",
    "ConfigError",
    "ModelError",
    "AnalysisTimeoutError",
]
