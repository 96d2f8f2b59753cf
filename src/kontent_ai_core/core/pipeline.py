"""
Transport chain assembly.

Per attempt, outermost first:

    Telemetry -> Retry -> Timeout -> CircuitBreaker -> Tracking -> Authentication -> httpx transport

Telemetry sees one logical request; everything below Retry runs once per
attempt, so every attempt carries fresh auth and tracking headers.
"""

import logging
import time
from typing import Callable, Optional

import httpx

from ..middleware.authentication import AuthenticationTransport
from ..middleware.telemetry import TelemetryTransport
from ..middleware.tracking import TrackingTransport
from ..resilience.pipeline import ConfigureResilience, compose_resilience
from ..resilience.retry import SleepFunc
from .identity import TrackingHeaders
from .logging import configure_logging
from .options import ClientOptions, CoreServicesOptions, HasApiKey

logger = logging.getLogger(__name__)


def build_transport(
    options: ClientOptions,
    core_options: Optional[CoreServicesOptions] = None,
    *,
    options_provider: Optional[Callable[[], HasApiKey]] = None,
    inner: Optional[httpx.AsyncBaseTransport] = None,
    configure_resilience: Optional[ConfigureResilience] = None,
    tracking: Optional[TrackingHeaders] = None,
    sleep: Optional[SleepFunc] = None,
    clock: Callable[[], float] = time.monotonic,
) -> httpx.AsyncBaseTransport:
    """
    Build the middleware + resilience chain for one client.

    Args:
        options: Validated client options
        core_options: Shared services (listener, identity, logging)
        options_provider: Live options source for authentication (static options if None)
        inner: Transport doing the actual I/O (httpx.AsyncHTTPTransport if None)
        configure_resilience: Customisation applied after the default strategies
        tracking: Pre-resolved tracking headers (resolved from core_options if None)
        sleep: Async sleep for retry delays
        clock: Monotonic clock for the circuit breaker

    Example:
        >>> transport = build_transport(options, inner=httpx.MockTransport(handler))
    """
    core_options = core_options or CoreServicesOptions()

    if core_options.logging is not None:
        configure_logging(core_options.logging)

    if tracking is None:
        tracking = TrackingHeaders.resolve(core_options.sdk_identity, core_options.repository_host)

    if options_provider is None:
        options_provider = lambda: options  # noqa: E731

    transport: httpx.AsyncBaseTransport = inner or httpx.AsyncHTTPTransport()
    transport = AuthenticationTransport(transport, options_provider)
    transport = TrackingTransport(transport, tracking)

    resilience = compose_resilience(options, configure_resilience, sleep=sleep, clock=clock)
    transport = resilience.wrap(transport)

    transport = TelemetryTransport(
        transport,
        listener=core_options.api_usage_listener,
        behavior=core_options.telemetry_exception_behavior,
    )

    logger.debug(
        "Built transport for %s (resilience: %r, sdk: %s)",
        options.http_client_name, resilience, tracking.sdk_header
    )
    return transport


def build_http_client(
    options: ClientOptions,
    core_options: Optional[CoreServicesOptions] = None,
    **kwargs
) -> httpx.AsyncClient:
    """
    httpx.AsyncClient with base URL, timeout and the full transport chain.

    Keyword arguments are passed to build_transport().
    """
    transport = build_transport(options, core_options, **kwargs)
    return httpx.AsyncClient(
        base_url=options.base_url,
        transport=transport,
        timeout=options.request_timeout,
    )
