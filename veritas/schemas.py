"""
Pydantic schemas defining the contracts between pipeline stages.

AnalysisRequest:   what the endpoint accepts
ExtractedArticle:  Extractor → Normalizer (transient, one per URL request)
AnalysisResult:    what the generation backend must return, validated before use
GenerationOptions: fixed sampling settings handed to the backend
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# --- Request side ---

class AnalysisRequest(BaseModel):
    """Inbound request: article text, a URL to fetch, or both."""
    text: Optional[str] = None
    url: Optional[str] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def has_url(self) -> bool:
        return bool(self.url)

    @property
    def input_type(self) -> str:
        # Supplied text always wins over fetching the URL
        return "text" if self.has_text else "url"


class ExtractedArticle(BaseModel):
    """Best-effort article candidate pulled out of an HTML page."""
    title: str = ""
    body: str = ""


# --- Result side ---

class ClaimStatus(str, Enum):
    verified = "verified"
    contradicted = "contradicted"
    unverified = "unverified"


class Claim(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = Field(description="The specific claim from the article")
    status: ClaimStatus = Field(description="Verification status of the claim")
    explanation: str = Field(description="Explanation of why the claim received this status")


class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Title of the source")
    url: str = Field(description="URL of the source")


class AnalysisResult(BaseModel):
    """Structured authenticity verdict. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    verdict: str = Field(
        description='Overall authenticity verdict (e.g., "Highly Authentic", "Likely Misleading", "Unverified")'
    )
    # strict: a numeric string from the backend is a protocol error, not a number
    confidence: float = Field(ge=0, le=100, strict=True, description="Confidence score as a percentage")
    summary: str = Field(description="Concise summary of the article content")
    claims: list[Claim] = Field(description="Analysis of key claims in the article")
    reasoning: str = Field(description="Detailed reasoning for the overall verdict")
    sources: list[Source] = Field(description="External sources used for verification")


class ErrorResponse(BaseModel):
    """Body returned at the boundary when a request fails."""
    error: str


class GenerationOptions(BaseModel):
    """Backend sampling settings. Low temperature keeps verdicts reproducible."""
    temperature: float = 0.1
    max_output_tokens: int = 4000
    grounding_enabled: bool = True


# --- Authenticity scale ---
# (label, lowest confidence, highest confidence), best tier first

AUTHENTICITY_TIERS: list[tuple[str, int, int]] = [
    ("Highly Authentic", 90, 100),
    ("Mostly Authentic", 70, 89),
    ("Partially Authentic", 50, 69),
    ("Likely Misleading", 30, 49),
    ("Highly Misleading", 10, 29),
    ("Unverified", 0, 9),
]


def tier_for_confidence(confidence: float) -> str:
    """Return the tier label whose band contains `confidence`."""
    for label, low, _high in AUTHENTICITY_TIERS:
        if confidence >= low:
            return label
    return AUTHENTICITY_TIERS[-1][0]


class FetchedPage(BaseModel):
    """HTML document returned by the fetcher, already decoded to text."""
    url: str
    status_code: int
    content_type: str
    encoding: str = "utf-8"
    html: str
