"""
Cooperative cancellation for a single conversion.

The token is checked at step boundaries (before / after a file read, after
the extraction service answers).  Work already in flight is not
interrupted; its result is simply discarded when it arrives.
"""

from __future__ import annotations

import threading
from typing import Optional

from errors import ConversionCancelled


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, step: str = "") -> None:
        if self._event.is_set():
            raise ConversionCancelled(
                f"Conversion cancelled{f' during {step}' if step else ''}"
            )


def check(token: Optional[CancellationToken], step: str = "") -> None:
    """``token.raise_if_cancelled`` that tolerates ``None``."""
    if token is not None:
        token.raise_if_cancelled(step)
