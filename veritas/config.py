"""
Runtime configuration read from environment variables.

The entry points call load_dotenv() first, so a local .env file works the
same as exported variables.
"""

import os
import logging
from typing import Optional
from pydantic import BaseModel

from .exceptions import ConfigError
from .logger import get_module_logger, parse_level

logger = get_module_logger("config")

# Which env var holds the credential for each provider
API_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

DEFAULT_FETCH_TIMEOUT = 30.0


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_seconds(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        seconds = float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}='{value}', using {default}s")
        return default
    # nan and inf fail both comparisons
    if not 0 < seconds < float("inf"):
        logger.warning(f"Ignoring out-of-range {name}='{value}', using {default}s")
        return default
    return seconds


class Settings(BaseModel):
    """Configuration for one pipeline instance."""
    provider: str = "openai"
    api_key: Optional[str] = None
    model: Optional[str] = None
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    grounding_enabled: bool = True
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls) -> "Settings":
        provider = os.getenv("LLM_PROVIDER", "openai").lower()
        if provider not in API_KEY_ENV_VARS:
            logger.warning(f"Unknown LLM_PROVIDER '{provider}', defaulting to openai")
            provider = "openai"

        return cls(
            provider=provider,
            api_key=os.getenv(API_KEY_ENV_VARS[provider]) or None,
            model=os.getenv("VERITAS_MODEL") or None,
            fetch_timeout=_env_seconds("VERITAS_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
            grounding_enabled=_env_flag("VERITAS_GROUNDING", True),
            log_level=parse_level(os.getenv("VERITAS_LOG_LEVEL")),
        )

    def require_api_key(self) -> str:
        """Return the backend credential or fail before any network activity."""
        if not self.api_key:
            env_var = API_KEY_ENV_VARS.get(self.provider, "the provider API key")
            raise ConfigError(
                f"{self.provider} API key is not configured",
                details={"env_var": env_var}
            )
        return self.api_key
