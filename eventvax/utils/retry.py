# eventvax/utils/retry.py
import logging
from typing import Tuple, Type

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_none,
)

from eventvax.core.exceptions import NetworkError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    NetworkError,
    httpx.TransportError,
    ConnectionError,
    TimeoutError,
)


def network_retrying(attempts: int, max_wait: float) -> Retrying:
    """
    Bounded retry with exponential backoff for infra-level network calls.

    Re-raises the last error once `attempts` is exhausted. `max_wait=0`
    disables the backoff sleep.
    """
    wait = wait_exponential(multiplier=1, min=1, max=max_wait) if max_wait > 0 else wait_none()
    return Retrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait,
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
