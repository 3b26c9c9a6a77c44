"""
Byte decoder: loads an uploaded file fully into memory.

Two views are offered:
  - ``decode``            raw bytes, for local spreadsheet parsing
  - ``decode_as_base64``  plain base64 text (no ``data:`` URI prefix), for
                          embedding in an extraction request

Size limits are enforced upstream by the conversion session, so no
streaming is attempted here.
"""

from __future__ import annotations

import base64
import logging
from typing import Optional

from dto.upload import UploadedFile
from errors import FileReadError
from utils.cancellation import CancellationToken, check

logger = logging.getLogger(__name__)


def decode(file: UploadedFile, token: Optional[CancellationToken] = None) -> bytes:
    check(token, "file read")

    if file.content is not None:
        data = file.content
    elif file.path is not None:
        try:
            data = file.path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Could not read '{file.name}': {exc}") from exc
    else:
        raise FileReadError(f"File handle for '{file.name}' has no content")

    # The read may have been slow; a newer selection wins.
    check(token, "file read")

    logger.debug("Read %d byte(s) from %s", len(data), file.name)
    return data


def decode_as_base64(
    file: UploadedFile, token: Optional[CancellationToken] = None
) -> str:
    return base64.standard_b64encode(decode(file, token)).decode("ascii")
