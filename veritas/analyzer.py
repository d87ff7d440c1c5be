"""
Schema-constrained invocation of the generation backend.

Pipeline position: last stage, after the prompt is assembled.
Input:  prompt string
Output: validated AnalysisResult, or ModelError(SCHEMA_VIOLATION)

The backend's object is checked against AnalysisResult before anything sees
it. A confidence outside 0-100 or an unknown claim status is a protocol error;
nothing is coerced or partially returned.
"""

from typing import Optional

from pydantic import ValidationError

from .schemas import AnalysisResult, GenerationOptions, tier_for_confidence
from .llm_client import LLMClient, BaseLLMClient, LLMProvider
from .exceptions import ModelError, ModelFailure
from .logger import get_module_logger

logger = get_module_logger("analyzer")

ANALYSIS_SCHEMA = AnalysisResult.model_json_schema()


class Analyzer:
    """Calls the backend and validates what it returns."""

    def __init__(
        self,
        llm_client: Optional[BaseLLMClient] = None,
        provider: Optional[LLMProvider] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        options: Optional[GenerationOptions] = None
    ):
        self.options = options or GenerationOptions()

        # Tests inject a fake client; otherwise build one from the provider switch
        self.llm_client = llm_client or LLMClient.create(provider=provider, api_key=api_key, model=model)

    def invoke(self, prompt: str) -> AnalysisResult:
        """Run one analysis and return the validated result."""
        logger.info(
            f"Invoking {self.llm_client.provider} backend "
            f"(temperature={self.options.temperature}, grounding={self.options.grounding_enabled})"
        )

        response = self.llm_client.generate(prompt, ANALYSIS_SCHEMA, self.options)
        result = self._validate(response)

        logger.info(
            f"Analysis complete: verdict='{result.verdict}', confidence={result.confidence} "
            f"(scale: {tier_for_confidence(result.confidence)}), {len(result.claims)} claims"
        )
        return result

    def _validate(self, response: dict) -> AnalysisResult:
        try:
            return AnalysisResult.model_validate(response)
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(x) for x in err.get('loc', []))}: {err.get('msg', '')}"
                for err in e.errors()
            ]
            logger.error(f"Backend response violates the result schema: {problems}")
            raise ModelError(
                "Backend response does not match the analysis schema",
                ModelFailure.SCHEMA_VIOLATION,
                provider=self.llm_client.provider,
                details={"problems": problems}
            ) from e
