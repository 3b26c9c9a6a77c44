"""
Retry policy shared by the provider clients.

Automatic retries are off by default (``max_attempts=1``): a failed
conversion is retried by the user, not by us.  Deployments that want
backoff on transient errors raise ``EXTRACTION_MAX_ATTEMPTS``.
"""

from __future__ import annotations

import logging
from typing import Tuple, Type

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

_MIN_WAIT_SECONDS = 2
_MAX_WAIT_SECONDS = 60


def build_retry(
    exceptions: Tuple[Type[BaseException], ...],
    max_attempts: int,
    logger: logging.Logger,
):
    return retry(
        retry=retry_if_exception_type(exceptions),
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=_MIN_WAIT_SECONDS, max=_MAX_WAIT_SECONDS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
