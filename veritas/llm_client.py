"""
Generation backend clients with an OpenAI/Anthropic provider switch.

LLMClient.create picks the provider from an explicit argument or the
LLM_PROVIDER env var. Each provider implements BaseLLMClient.generate, so the
Analyzer never needs to know which model is behind the call.

Every SDK failure leaves this module as a Veritas error:
  auth/permission  → ModelError(AUTH)
  rate limit/quota → ModelError(RATE_LIMIT)
  timeout          → AnalysisTimeoutError(stage="model")
  unparseable JSON → ModelError(SCHEMA_VIOLATION)
  anything else    → ModelError(BACKEND_FAILURE)
"""

import os
import json
from abc import ABC, abstractmethod
from typing import Optional
from enum import Enum

from .schemas import GenerationOptions
from .logger import get_module_logger
from .exceptions import (
    VeritasError, ConfigError, ModelError, ModelFailure, AnalysisTimeoutError
)

logger = get_module_logger("llm_client")

DEFAULT_MODEL_TIMEOUT = 120.0


class LLMProvider(Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


def classify_sdk_error(sdk, error: Exception, provider: str) -> VeritasError:
    """
    Map an openai/anthropic SDK exception onto the Veritas taxonomy.

    Both SDKs share the same exception names, so one function serves both.
    """
    if isinstance(error, sdk.APITimeoutError):
        return AnalysisTimeoutError(f"{provider} request timed out", stage="model")
    if isinstance(error, (sdk.AuthenticationError, sdk.PermissionDeniedError)):
        return ModelError(f"{provider} rejected the credential", ModelFailure.AUTH, provider=provider)
    if isinstance(error, sdk.RateLimitError):
        return ModelError(f"{provider} rate limit or quota exceeded", ModelFailure.RATE_LIMIT,
                          provider=provider)

    # Some gateways report quota problems with a generic status
    message = str(error).lower()
    if "rate limit" in message or "quota" in message:
        return ModelError(f"{provider} rate limit or quota exceeded", ModelFailure.RATE_LIMIT,
                          provider=provider)
    return ModelError(
        f"{provider} API call failed",
        ModelFailure.BACKEND_FAILURE,
        provider=provider,
        details={"error": type(error).__name__}
    )


def parse_json_text(text: str, provider: str) -> dict:
    """Parse a JSON object out of model text, tolerating code fences and preambles."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    cleaned = cleaned.strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Grounded answers sometimes narrate before the object
        start, end = cleaned.find("{"), cleaned.rfind("}")
        try:
            data = json.loads(cleaned[start:end + 1]) if 0 <= start < end else None
        except json.JSONDecodeError:
            data = None
        if data is None:
            logger.error(f"Failed to parse {provider} response as JSON")
            raise ModelError(
                "Response is not valid JSON",
                ModelFailure.SCHEMA_VIOLATION,
                provider=provider,
                details={"response_length": len(text or "")}
            )

    if not isinstance(data, dict):
        raise ModelError(
            f"Expected a JSON object, got {type(data).__name__}",
            ModelFailure.SCHEMA_VIOLATION,
            provider=provider
        )
    return data


class BaseLLMClient(ABC):
    """Abstract base class for generation backends."""

    provider: str = "unknown"

    @abstractmethod
    def generate(self, prompt: str, schema: dict, options: GenerationOptions) -> dict:
        """
        Ask the backend for an object shaped like `schema`.

        Args:
            prompt: The full instruction block
            schema: JSON schema of the expected object
            options: Sampling and grounding settings

        Returns:
            The parsed (not yet validated) JSON object
        """
        pass


class OpenAIClient(BaseLLMClient):
    """OpenAI chat completions with structured outputs."""

    provider = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        timeout: float = DEFAULT_MODEL_TIMEOUT
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ConfigError("OpenAI API key not provided", details={"env_var": "OPENAI_API_KEY"})
        self.model = model
        self.timeout = timeout

        # Lazy import: only require the openai SDK when this provider is selected
        try:
            import openai
        except ImportError:
            raise ConfigError("openai package not installed. Run: pip install openai")
        self._sdk = openai
        self.client = openai.OpenAI(api_key=self.api_key, timeout=timeout)

    def generate(self, prompt: str, schema: dict, options: GenerationOptions) -> dict:
        if options.grounding_enabled:
            logger.debug("Search grounding is not available on chat completions; ignoring")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=options.temperature,
                max_tokens=options.max_output_tokens,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": "analysis_result", "schema": schema},
                },
            )
        except self._sdk.OpenAIError as e:
            logger.error(f"OpenAI API error: {type(e).__name__}")
            raise classify_sdk_error(self._sdk, e, self.provider) from e

        message = response.choices[0].message
        if not message.content:
            raise ModelError(
                "OpenAI returned no content",
                ModelFailure.SCHEMA_VIOLATION,
                provider=self.provider,
                details={"refusal": bool(getattr(message, "refusal", None))}
            )
        return parse_json_text(message.content, self.provider)


class AnthropicClient(BaseLLMClient):
    """Anthropic messages API, optionally grounded with server-side web search."""

    provider = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-sonnet-4-20250514",
        timeout: float = DEFAULT_MODEL_TIMEOUT,
        max_searches: int = 5
    ):
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ConfigError("Anthropic API key not provided", details={"env_var": "ANTHROPIC_API_KEY"})
        self.model = model
        self.timeout = timeout
        self.max_searches = max_searches

        try:
            import anthropic
        except ImportError:
            raise ConfigError("anthropic package not installed. Run: pip install anthropic")
        self._sdk = anthropic
        self.client = anthropic.Anthropic(api_key=self.api_key, timeout=timeout)

    def generate(self, prompt: str, schema: dict, options: GenerationOptions) -> dict:
        # No native schema mode here, so the schema travels in the prompt
        json_prompt = (
            f"{prompt}\n\nRespond with a single JSON object only, no additional text, "
            f"matching this JSON schema:\n{json.dumps(schema, indent=2, sort_keys=True)}"
        )

        kwargs = {
            "model": self.model,
            "max_tokens": options.max_output_tokens,
            "temperature": options.temperature,
            "messages": [{"role": "user", "content": json_prompt}],
        }
        if options.grounding_enabled:
            kwargs["tools"] = [{
                "type": "web_search_20250305",
                "name": "web_search",
                "max_uses": self.max_searches,
            }]

        try:
            response = self.client.messages.create(**kwargs)
        except self._sdk.AnthropicError as e:
            logger.error(f"Anthropic API error: {type(e).__name__}")
            raise classify_sdk_error(self._sdk, e, self.provider) from e

        # With web search the reply interleaves tool blocks; the answer is in the text blocks
        texts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        return parse_json_text("".join(texts), self.provider)


class LLMClient:
    """
    Factory for generation backends.

    Usage:
        # Using environment variable LLM_PROVIDER
        client = LLMClient.create()

        # Explicit provider
        client = LLMClient.create(provider=LLMProvider.ANTHROPIC, api_key="...")
    """

    @staticmethod
    def create(
        provider: Optional[LLMProvider] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None
    ) -> BaseLLMClient:
        """
        Create a client for the specified provider.

        Args:
            provider: LLM provider (defaults to env var LLM_PROVIDER or 'openai')
            api_key: API key (defaults to provider-specific env var)
            model: Model name (defaults to provider-specific default)

        Returns:
            Configured client
        """
        if provider is None:
            provider_str = os.getenv("LLM_PROVIDER", "openai").lower()
            try:
                provider = LLMProvider(provider_str)
            except ValueError:
                logger.warning(
                    f"Unknown LLM_PROVIDER '{provider_str}', defaulting to openai"
                )
                provider = LLMProvider.OPENAI

        logger.info(f"Creating LLM client for provider: {provider.value}")

        kwargs = {"api_key": api_key}
        if model:
            kwargs["model"] = model

        if provider == LLMProvider.OPENAI:
            return OpenAIClient(**kwargs)
        if provider == LLMProvider.ANTHROPIC:
            return AnthropicClient(**kwargs)
        raise ConfigError(f"Unsupported provider: {provider}")
