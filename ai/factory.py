from typing import Dict

from ai.service import ExtractionClient
from ai.openai_service import OpenAIService
from ai.gemini_service import GeminiService
from ai.claude_service import ClaudeService
from config import ExtractionConfig, normalise_provider
from errors import ConfigurationError

_API_KEY_HINTS: Dict[str, str] = {
    "gemini": "GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY)",
    "claude": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def get_extraction_client(config: ExtractionConfig) -> ExtractionClient:
    """
    Return an ExtractionClient for the configured provider.

    The provider is chosen via ``config.provider``:
      - "gemini"     → GeminiService  (default)
      - "claude"     → ClaudeService
      - "openai"     → OpenAIService

    Raises ``ConfigurationError`` for an unknown provider or a missing API
    key; no client (and so no connection) is created in that case.
    """
    provider = normalise_provider(config.provider)
    if provider not in _API_KEY_HINTS:
        raise ConfigurationError(f"Unknown extraction provider: {config.provider!r}")
    if not config.api_key:
        raise ConfigurationError(
            f"No API key configured for provider {provider!r}; set {_API_KEY_HINTS[provider]}"
        )

    kwargs = {
        "api_key": config.api_key,
        "timeout_seconds": config.timeout_seconds,
        "max_attempts": config.max_attempts,
    }
    if config.model:
        kwargs["model"] = config.model

    if provider == "gemini":
        return GeminiService(**kwargs)
    if provider == "claude":
        return ClaudeService(**kwargs)
    return OpenAIService(**kwargs)
