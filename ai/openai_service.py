import base64
import logging
from typing import Any, Dict, List

from openai import OpenAI, APIConnectionError, APITimeoutError, RateLimitError, InternalServerError

from ai.retry import build_retry
from ai.service import ExtractionClient
from errors import TransportError

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gpt-5.2"

_RETRYABLE_EXCEPTIONS = (
    APIConnectionError,
    APITimeoutError,
    RateLimitError,
    InternalServerError,
)


class OpenAIService(ExtractionClient):
    """ExtractionClient backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = _DEFAULT_MODEL,
        timeout_seconds: float = 60.0,
        max_attempts: int = 1,
    ):
        self._model = model
        self._client = OpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self._complete_with_retry = build_retry(
            _RETRYABLE_EXCEPTIONS, max_attempts, logger
        )(self._complete)

    @staticmethod
    def _content(instruction: str, payload: str, media_type: str) -> List[Dict[str, Any]]:
        if media_type == "application/pdf":
            return [
                {"type": "text", "text": instruction},
                {
                    "type": "file",
                    "file": {
                        "filename": "document.pdf",
                        "file_data": f"data:{media_type};base64,{payload}",
                    },
                },
            ]
        text = base64.b64decode(payload).decode("utf-8", errors="replace")
        return [
            {"type": "text", "text": instruction},
            {"type": "text", "text": f"--- BEGIN FILE ---\n{text}\n--- END FILE ---"},
        ]

    def _complete(
        self, instruction: str, payload: str, media_type: str, schema: Dict[str, Any]
    ) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "user", "content": self._content(instruction, payload, media_type)}
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "extracted_workbook", "schema": schema},
            },
        )
        return response.choices[0].message.content or ""

    def send(
        self, instruction: str, payload: str, media_type: str, schema: Dict[str, Any]
    ) -> str:
        logger.info("  [OpenAI] Sending %s document to %s", media_type, self._model)
        try:
            return self._complete_with_retry(instruction, payload, media_type, schema)
        except Exception as exc:
            raise TransportError(f"OpenAI request failed: {exc}") from exc
