"""Shared fixtures: a fake generation backend and a pipeline wired to mock HTTP."""

import copy
from typing import Callable, Optional

import httpx
import pytest

from veritas.analyzer import Analyzer
from veritas.config import Settings
from veritas.fetcher import HtmlFetcher
from veritas.llm_client import BaseLLMClient
from veritas.main import VerificationPipeline
from veritas.schemas import GenerationOptions

VALID_RESULT = {
    "verdict": "Mostly Authentic",
    "confidence": 78,
    "summary": "The city council approved next year's budget after a public hearing.",
    "claims": [
        {
            "text": "The council approved the budget 7-2.",
            "status": "verified",
            "explanation": "The vote count matches the published meeting minutes.",
        },
        {
            "text": "Property taxes will not rise.",
            "status": "unverified",
            "explanation": "No independent source confirms the tax projection.",
        },
    ],
    "reasoning": "Core facts are corroborated; one forward-looking claim cannot be checked yet.",
    "sources": [
        {"title": "Council meeting minutes", "url": "https://city.example/minutes"},
    ],
}

ARTICLE_SENTENCE = (
    "The city council voted seven to two on Tuesday evening to approve next year's "
    "operating budget after a three hour public hearing. "
)


class FakeLLMClient(BaseLLMClient):
    """Records every call and returns a canned object, or raises a canned error."""

    provider = "fake"

    def __init__(self, response: Optional[dict] = None, error: Optional[Exception] = None):
        self.response = copy.deepcopy(VALID_RESULT) if response is None else response
        self.error = error
        self.calls = []

    def generate(self, prompt: str, schema: dict, options: GenerationOptions) -> dict:
        self.calls.append({"prompt": prompt, "schema": schema, "options": options})
        if self.error is not None:
            raise self.error
        return self.response


class RecordingHandler:
    """MockTransport handler that counts requests and delegates to `respond`."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self.respond = respond
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


def html_response(html: str, status_code: int = 200, content_type: str = "text/html; charset=utf-8"):
    return lambda request: httpx.Response(
        status_code, headers={"content-type": content_type}, content=html.encode("utf-8")
    )


def make_fetcher(handler) -> HtmlFetcher:
    return HtmlFetcher(client=httpx.Client(transport=httpx.MockTransport(handler)))


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def article_html() -> str:
    paragraphs = "".join(f"<p>{ARTICLE_SENTENCE * 2}</p>" for _ in range(3))
    return (
        "<html><head><title>Council approves budget</title></head><body>"
        "<nav>Home World Politics NAVTOKEN</nav>"
        "<div class=\"ads\">Buy now ADTOKEN</div>"
        f"<article><h1>Council approves budget</h1>{paragraphs}"
        "<div class=\"social-share\">SHARETOKEN</div></article>"
        "<footer>Copyright FOOTERTOKEN</footer>"
        "</body></html>"
    )


@pytest.fixture
def make_pipeline(fake_llm: FakeLLMClient):
    """Build a pipeline around the fake backend and a MockTransport handler."""

    def _make(handler=None, on_result=None, llm: Optional[BaseLLMClient] = None) -> VerificationPipeline:
        if handler is None:
            handler = RecordingHandler(lambda request: httpx.Response(500))
        return VerificationPipeline(
            settings=Settings(api_key="test-key"),
            analyzer=Analyzer(llm_client=llm or fake_llm),
            fetcher=make_fetcher(handler),
            on_result=on_result,
        )

    return _make
