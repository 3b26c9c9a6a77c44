from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
import sys

import pytest

# Ensure project root is on sys.path for absolute imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ai.service import ExtractionClient
from config import ConverterConfig, ExtractionConfig
from dto.upload import UploadedFile


class FakeExtractionClient(ExtractionClient):
    """Records every request and answers with a canned response."""

    def __init__(
        self,
        response: str = '{"sheets": []}',
        on_send: Optional[Callable[[], None]] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.response = response
        self.on_send = on_send
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def send(self, instruction, payload, media_type, schema) -> str:
        self.calls.append(
            {
                "instruction": instruction,
                "payload": payload,
                "media_type": media_type,
                "schema": schema,
            }
        )
        if self.on_send is not None:
            self.on_send()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def extraction_config() -> ExtractionConfig:
    return ExtractionConfig(provider="gemini", api_key="test-key")


@pytest.fixture
def converter_config(extraction_config: ExtractionConfig) -> ConverterConfig:
    return ConverterConfig(extraction=extraction_config, max_file_size_mb=1)


@pytest.fixture
def make_upload() -> Callable[..., UploadedFile]:
    def _make(
        content: bytes,
        media_type: str = "text/csv",
        name: str = "data.csv",
    ) -> UploadedFile:
        return UploadedFile(name=name, media_type=media_type, content=content)

    return _make
