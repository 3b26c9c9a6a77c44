"""
Runtime configuration.

Settings come from environment variables (a ``.env`` file is honoured via
python-dotenv) and are collected into explicit pydantic models that are
passed into the extractor and the conversion session.  Nothing here is
read again after ``load_config`` returns.

Recognised variables:
  - EXTRACTION_PROVIDER          gemini (default) | claude | openai
  - EXTRACTION_MODEL             provider model override
  - GEMINI_API_KEY / GOOGLE_API_KEY / API_KEY   (gemini)
  - ANTHROPIC_API_KEY            (claude)
  - OPENAI_API_KEY               (openai)
  - EXTRACTION_TIMEOUT_SECONDS   network timeout, default 60
  - EXTRACTION_MAX_ATTEMPTS      attempts per request, default 1 (no retry)
  - MAX_FILE_SIZE_MB             upload limit, default 10
"""

from __future__ import annotations

import os
from typing import Dict, Optional, Sequence

import dotenv
from pydantic import BaseModel, Field

DEFAULT_PROVIDER = "gemini"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_ATTEMPTS = 1
DEFAULT_MAX_FILE_SIZE_MB = 10

# Environment variables consulted for each provider's key, in order.
_API_KEY_VARS: Dict[str, Sequence[str]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"),
    "claude": ("ANTHROPIC_API_KEY",),
    "openai": ("OPENAI_API_KEY",),
}

_PROVIDER_ALIASES = {"anthropic": "claude", "google": "gemini"}


class ExtractionConfig(BaseModel):
    """Settings for the remote extraction service."""

    provider: str = DEFAULT_PROVIDER
    api_key: Optional[str] = None
    model: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_attempts: int = DEFAULT_MAX_ATTEMPTS


class ConverterConfig(BaseModel):
    """Top-level settings for a conversion session."""

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    max_file_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


def normalise_provider(provider: str) -> str:
    provider = provider.lower().strip()
    return _PROVIDER_ALIASES.get(provider, provider)


def _api_key_for(provider: str) -> Optional[str]:
    for var in _API_KEY_VARS.get(provider, ()):
        value = os.getenv(var)
        if value and value.strip():
            return value.strip()
    return None


def load_config(provider: Optional[str] = None) -> ConverterConfig:
    """
    Build a ``ConverterConfig`` from the environment.

    *provider* overrides ``EXTRACTION_PROVIDER`` when given.  A missing API
    key is not an error here; the extractor reports it before any request
    is attempted.
    """
    dotenv.load_dotenv()

    name = normalise_provider(
        provider or os.getenv("EXTRACTION_PROVIDER", DEFAULT_PROVIDER)
    )
    extraction = ExtractionConfig(
        provider=name,
        api_key=_api_key_for(name),
        model=os.getenv("EXTRACTION_MODEL") or None,
        timeout_seconds=float(
            os.getenv("EXTRACTION_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        ),
        max_attempts=int(os.getenv("EXTRACTION_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)),
    )
    return ConverterConfig(
        extraction=extraction,
        max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", DEFAULT_MAX_FILE_SIZE_MB)),
    )
