import base64
import logging
from typing import Any, Dict

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ai.retry import build_retry
from ai.service import ExtractionClient
from errors import TransportError

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-2.5-flash"

_RETRYABLE_EXCEPTIONS = (ConnectionError, genai_errors.ServerError)


class GeminiService(ExtractionClient):
    """
    ExtractionClient backed by the Google Gemini API.

    The document is sent inline and the schema is enforced natively via
    ``response_schema`` with a JSON response MIME type.
    """

    def __init__(
        self,
        api_key: str,
        model: str = _DEFAULT_MODEL,
        timeout_seconds: float = 60.0,
        max_attempts: int = 1,
    ):
        self._model = model
        # HttpOptions.timeout is in milliseconds.
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
        )
        self._generate_with_retry = build_retry(
            _RETRYABLE_EXCEPTIONS, max_attempts, logger
        )(self._generate)

    def _generate(
        self, instruction: str, payload: str, media_type: str, schema: Dict[str, Any]
    ) -> str:
        document = types.Part.from_bytes(
            data=base64.b64decode(payload), mime_type=media_type
        )
        response = self._client.models.generate_content(
            model=self._model,
            contents=[instruction, document],
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )
        return response.text or ""

    def send(
        self, instruction: str, payload: str, media_type: str, schema: Dict[str, Any]
    ) -> str:
        logger.info("  [Gemini] Sending %s document to %s", media_type, self._model)
        try:
            return self._generate_with_retry(instruction, payload, media_type, schema)
        except Exception as exc:  # SDK and httpx errors alike
            raise TransportError(f"Gemini request failed: {exc}") from exc
