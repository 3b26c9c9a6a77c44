"""
ExtractionClient implementation backed by the Anthropic Claude API.

Supports:
  - application/pdf: sent as a base64 ``document`` content block
  - text/plain: decoded and sent as a plain-text ``document`` block

Claude has no native response-schema switch, so the schema is appended
to the instruction and the answer is expected to be bare JSON.

Default model: claude-opus-4-6
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict

from anthropic import (
    Anthropic,
    APIConnectionError,
    APITimeoutError,
    RateLimitError,
    InternalServerError,
)

from ai.retry import build_retry
from ai.service import ExtractionClient
from errors import TransportError

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "claude-opus-4-6"

# Transient exception types that may trigger a retry.
_RETRYABLE_EXCEPTIONS = (
    APIConnectionError,
    APITimeoutError,
    RateLimitError,
    InternalServerError,
)


def schema_instruction(instruction: str, schema: Dict[str, Any]) -> str:
    """Append the JSON schema to an instruction for providers without schema mode."""
    return (
        f"{instruction}\n"
        "Respond with ONLY the JSON object, no markdown fences or commentary. "
        "It must validate against this JSON schema:\n"
        f"{json.dumps(schema, indent=2)}\n"
    )


class ClaudeService(ExtractionClient):
    """ExtractionClient backed by the Anthropic Claude API."""

    def __init__(
        self,
        api_key: str,
        model: str = _DEFAULT_MODEL,
        timeout_seconds: float = 60.0,
        max_attempts: int = 1,
    ):
        self._model = model
        # SDK-level retries are disabled; tenacity owns the policy.
        self._client = Anthropic(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self._create_with_retry = build_retry(
            _RETRYABLE_EXCEPTIONS, max_attempts, logger
        )(self._create)

    @staticmethod
    def _document_block(payload: str, media_type: str) -> Dict[str, Any]:
        if media_type == "application/pdf":
            return {
                "type": "document",
                "source": {"type": "base64", "media_type": media_type, "data": payload},
            }
        text = base64.b64decode(payload).decode("utf-8", errors="replace")
        return {
            "type": "document",
            "source": {"type": "text", "media_type": "text/plain", "data": text},
        }

    def _create(
        self, instruction: str, payload: str, media_type: str, schema: Dict[str, Any]
    ) -> str:
        message = self._client.messages.create(
            model=self._model,
            max_tokens=16384,
            messages=[
                {
                    "role": "user",
                    "content": [
                        self._document_block(payload, media_type),
                        {"type": "text", "text": schema_instruction(instruction, schema)},
                    ],
                }
            ],
        )
        return message.content[0].text if message.content else ""

    def send(
        self, instruction: str, payload: str, media_type: str, schema: Dict[str, Any]
    ) -> str:
        logger.info("  [Claude] Sending %s document to %s", media_type, self._model)
        try:
            return self._create_with_retry(instruction, payload, media_type, schema)
        except Exception as exc:
            raise TransportError(f"Claude request failed: {exc}") from exc
