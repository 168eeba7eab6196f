# eventvax/utils/fallback.py
"""
Ordered fallback across a list of equivalent endpoints.

Used for RPC endpoint selection and IPFS gateway fetches: each endpoint is
tried once, in order, with its own timeout; the first success wins.
"""
import logging
from typing import Callable, Iterable, List, NamedTuple, TypeVar

from eventvax.core.exceptions import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackResult(NamedTuple):
    endpoint: str
    value: object


def expand_templates(templates: Iterable[str], **params) -> List[str]:
    """Fills `{placeholder}` fields of every endpoint template."""
    return [template.format(**params) for template in templates]


def first_successful(
    endpoints: Iterable[str],
    attempt: Callable[[str, float], T],
    *,
    timeout: float,
    label: str = "endpoint",
) -> FallbackResult:
    """
    Calls `attempt(endpoint, timeout)` for each endpoint until one returns.

    A failing endpoint is skipped, never retried. Raises NetworkError carrying
    every underlying error when no endpoint succeeds.
    """
    errors: List[Exception] = []
    tried = 0
    for endpoint in endpoints:
        tried += 1
        try:
            return FallbackResult(endpoint, attempt(endpoint, timeout))
        except Exception as e:
            logger.warning(f"{label} {endpoint} failed: {e}")
            errors.append(e)

    if tried == 0:
        raise NetworkError(f"No {label} configured")
    raise NetworkError(f"All {tried} {label} candidates failed", errors=errors)
