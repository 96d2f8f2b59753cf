"""
Response header helpers.

- Retry-After parsing (delta-seconds or HTTP-date) with validation against
  malformed input
- X-Continuation token access for paged endpoints
"""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional, Union

import httpx

logger = logging.getLogger(__name__)

RETRY_AFTER_HEADER = "Retry-After"
CONTINUATION_HEADER = "X-Continuation"

SDK_TRACKING_HEADER = "X-KC-SDKID"
SOURCE_TRACKING_HEADER = "X-KC-SOURCE"

# httpx response extension carrying the number of attempts made by the retry strategy
RETRY_ATTEMPTS_EXTENSION = "retry_attempts"

# "60" or "Wed, 21 Oct 2015 07:28:00 GMT"
MAX_RETRY_AFTER_LENGTH = 100
MAX_RETRY_AFTER_SECONDS = 86400 * 365

HeadersLike = Union[httpx.Headers, httpx.Response]


def _headers(source: HeadersLike) -> httpx.Headers:
    if isinstance(source, httpx.Response):
        return source.headers
    return source


def parse_retry_after(
    source: HeadersLike,
    now: Optional[Callable[[], datetime]] = None
) -> Optional[float]:
    """
    Seconds to wait according to Retry-After, or None if absent/invalid.

    HTTP-date values in the past are clamped to 0.

    Args:
        source: Response or its headers
        now: Current UTC time provider (for tests)

    Examples:
        >>> parse_retry_after(httpx.Headers({"Retry-After": "5"}))
        5.0
        >>> parse_retry_after(httpx.Headers({}))
    """
    value = _headers(source).get(RETRY_AFTER_HEADER)
    if not value:
        return None

    value = value.strip()
    if len(value) > MAX_RETRY_AFTER_LENGTH:
        logger.warning(
            "Retry-After header too long (%d chars), ignoring. Value: %s...",
            len(value), value[:50]
        )
        return None

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if seconds < 0 or seconds > MAX_RETRY_AFTER_SECONDS:
            logger.warning("Retry-After seconds value out of reasonable range: %s", seconds)
            return None
        return seconds

    try:
        retry_date = parsedate_to_datetime(value)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug("Failed to parse Retry-After header '%s': %s", value, e)
        return None

    if retry_date.tzinfo is None:
        retry_date = retry_date.replace(tzinfo=timezone.utc)
    current = now() if now else datetime.now(timezone.utc)
    delta = (retry_date - current).total_seconds()
    if delta > MAX_RETRY_AFTER_SECONDS:
        logger.warning("Retry-After date too far in the future: %s", value)
        return None
    return max(0.0, delta)


def get_continuation_token(source: HeadersLike) -> Optional[str]:
    """X-Continuation value of a paged response, or None."""
    return _headers(source).get(CONTINUATION_HEADER)
