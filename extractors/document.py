"""
DocumentExtractor: converts PDF / plain-text uploads into a ``Workbook``
through a remote extraction service.

Responsibilities:
  1. Fail fast with ``ConfigurationError`` when no API key is configured,
     before the file is read or any client is created.
  2. Build the request: kind-specific instruction, base64 payload, media
     type and the strict response schema.
  3. Send it through an ``ExtractionClient`` (blocking).
  4. Validate the answer's structure and convert it into a ``Workbook``.

Column counts are deliberately not checked; ragged rows pass through and
the assembler copes with them.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from ai.factory import get_extraction_client
from ai.response_parser import parse_llm_json
from ai.service import ExtractionClient
from config import ExtractionConfig
from dto.extraction import RESPONSE_SCHEMA, ExtractionRequest, ExtractionResponse
from dto.upload import FileKind, UploadedFile
from dto.workbook import Workbook
from errors import ConfigurationError, ResponseFormatError
from extractors.decoder import decode_as_base64
from prompts.extraction import get_extraction_prompt
from utils.cancellation import CancellationToken, check

logger = logging.getLogger(__name__)


def build_request(kind: FileKind, payload: str, media_type: Optional[str] = None) -> ExtractionRequest:
    return ExtractionRequest(
        instruction=get_extraction_prompt(kind),
        payload=payload,
        media_type=media_type or kind.media_type,
        response_schema=RESPONSE_SCHEMA,
    )


def parse_response(raw: str) -> Workbook:
    """
    Parse and structurally validate a service response.

    The top level must be an object with a ``sheets`` array of objects.
    Raises ``ResponseFormatError`` otherwise.
    """
    parsed: Any = parse_llm_json(raw)

    if not isinstance(parsed, dict):
        raise ResponseFormatError(
            f"Expected a JSON object at the top level, got {type(parsed).__name__}"
        )
    if not isinstance(parsed.get("sheets"), list):
        raise ResponseFormatError("Response is missing the 'sheets' array")

    try:
        response = ExtractionResponse.model_validate(parsed)
    except ValidationError as exc:
        raise ResponseFormatError(f"Response does not match the schema: {exc}") from exc

    return response.to_workbook()


class DocumentExtractor:
    """
    Runs one extraction per ``extract`` call; holds no per-call state.

    Usage::

        extractor = DocumentExtractor(config.extraction)
        workbook = extractor.extract(upload, FileKind.PDF)

    *client* may be injected (tests, alternative backends).  When omitted a
    provider client is built from *config* on each call.
    """

    def __init__(
        self,
        config: ExtractionConfig,
        client: Optional[ExtractionClient] = None,
    ) -> None:
        self._config = config
        self._client = client

    def _get_client(self) -> ExtractionClient:
        if self._client is not None:
            return self._client
        return get_extraction_client(self._config)

    def extract(
        self,
        file: UploadedFile,
        kind: FileKind,
        token: Optional[CancellationToken] = None,
    ) -> Workbook:
        if not self._config.api_key:
            raise ConfigurationError(
                "No API key configured for the extraction service"
            )

        client = self._get_client()
        payload = decode_as_base64(file, token)
        request = build_request(kind, payload, kind.media_type)

        logger.info(
            "Extracting tables from %s (%s, %d base64 chars)",
            file.name,
            kind.value,
            len(payload),
        )
        raw = client.send(
            request.instruction,
            request.payload,
            request.media_type,
            request.response_schema,
        )

        # A newer selection may have superseded this request while it ran.
        check(token, "extraction")

        workbook = parse_response(raw)
        logger.info(
            "  -> %d sheet(s) extracted: %s",
            len(workbook.sheets),
            workbook.sheet_names,
        )
        return workbook
