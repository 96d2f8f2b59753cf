"""
Registration / factory layer.

Single client:

    >>> client = create_client(options, DeliveryClient)

Several named configurations sharing one client type:

    >>> factory = (
    ...     ClientFactoryBuilder(DeliveryClient)
    ...     .add_client("production", production_options)
    ...     .add_client("preview", lambda name: ClientOptions(
    ...         environment_id="975bf280",
    ...         base_url="https://preview-deliver.kontent.ai",
    ...         http_client_name=name,
    ...     ))
    ...     .build()
    ... )
    >>> preview = factory.create_client("preview")

``DeliveryClient`` is any callable ``(options, invoker) -> client``.
"""

import logging
import re
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

import httpx

from ..resilience.pipeline import ConfigureResilience
from .exceptions import ClientNotRegisteredError, ConfigurationError
from .identity import TrackingHeaders
from .invoker import ActionInvoker
from .options import ClientOptions, CoreServicesOptions, DEFAULT_HTTP_CLIENT_NAME
from .options_monitor import OptionsMonitor
from .pipeline import build_http_client

logger = logging.getLogger(__name__)

TClient = TypeVar("TClient")

ClientConstructor = Callable[[Any, ActionInvoker], TClient]
OptionsSource = Union[ClientOptions, Callable[[str], ClientOptions]]

CLIENT_NAME_PREFIX = "kontent-ai-client-"
_INVALID_NAME_CHARS = re.compile(r"[^\w\-.]")


def sanitize_client_name(name: str) -> str:
    """Replace characters outside [word, '-', '.'] with '-'."""
    return _INVALID_NAME_CHARS.sub("-", name)


def default_client_name(name: str) -> str:
    return sanitize_client_name(f"{CLIENT_NAME_PREFIX}{name}")


def configure_http_client(http_client: httpx.AsyncClient, options: ClientOptions) -> None:
    """Apply base URL and timeout to a caller-supplied httpx client."""
    http_client.base_url = httpx.URL(options.base_url)
    http_client.timeout = httpx.Timeout(options.request_timeout)


def create_client(
    options: ClientOptions,
    client_factory: ClientConstructor,
    core_options: Optional[CoreServicesOptions] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    configure_resilience: Optional[ConfigureResilience] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TClient:
    """
    Build one client.

    Args:
        options: Client options (validated again before anything is built)
        client_factory: ``(options, invoker) -> client``
        core_options: Shared services
        http_client: Use this httpx client as-is (base URL and timeout are applied,
            tracking headers are added per request)
        configure_resilience: Resilience customisation
        transport: Inner I/O transport (httpx.AsyncHTTPTransport if None)

    Raises:
        ConfigurationError: invalid options
    """
    options.validate()
    core_options = core_options or CoreServicesOptions()

    tracking = None
    if http_client is None:
        http_client = build_http_client(
            options,
            core_options,
            inner=transport,
            configure_resilience=configure_resilience,
        )
    else:
        configure_http_client(http_client, options)
        # no middleware chain, the invoker stamps the tracking headers itself
        tracking = TrackingHeaders.resolve(core_options.sdk_identity, core_options.repository_host)

    invoker = ActionInvoker(http_client, core_options.json_convention, tracking)
    return client_factory(options, invoker)


@dataclass(frozen=True)
class ClientRegistration:
    name: str
    options: ClientOptions
    configure_resilience: Optional[ConfigureResilience] = None
    transport: Optional[httpx.AsyncBaseTransport] = None


class MultipleClientFactory(Generic[TClient]):
    """
    Creates clients for registered names.

    One httpx client (and one transport chain, so one circuit breaker) is
    built per name on first use and shared by every client created for it.
    Authentication reads the options through ``self.options`` so updating
    a named value there applies to the next request.
    """

    def __init__(
        self,
        client_factory: ClientConstructor,
        registrations: Dict[str, ClientRegistration],
        core_options: Optional[CoreServicesOptions] = None,
        monitor: Optional[OptionsMonitor] = None
    ):
        self._client_factory = client_factory
        self._registrations = dict(registrations)
        self._core_options = core_options or CoreServicesOptions()
        self.options: OptionsMonitor = monitor if monitor is not None else OptionsMonitor()
        self._http_clients: Dict[str, httpx.AsyncClient] = {}
        self._lock = threading.Lock()

        for name, registration in self._registrations.items():
            if name not in self.options:
                self.options.set(name, registration.options)

    def _http_client(self, name: str) -> httpx.AsyncClient:
        with self._lock:
            http_client = self._http_clients.get(name)
            if http_client is None:
                registration = self._registrations[name]
                http_client = build_http_client(
                    self.options.get(name),
                    self._core_options,
                    options_provider=self.options.getter(name),
                    inner=registration.transport,
                    configure_resilience=registration.configure_resilience,
                )
                self._http_clients[name] = http_client
                logger.debug("Created HTTP client '%s'", registration.options.http_client_name)
            return http_client

    def create_client(self, name: str) -> TClient:
        """
        Raises:
            ValueError: blank name
            ClientNotRegisteredError: unknown name
        """
        if not name or not name.strip():
            raise ValueError("Client name cannot be empty")
        if name not in self._registrations:
            raise ClientNotRegisteredError(name)

        invoker = ActionInvoker(self._http_client(name), self._core_options.json_convention)
        return self._client_factory(self.options.get(name), invoker)

    def registered_client_names(self) -> List[str]:
        return list(self._registrations)

    def is_client_registered(self, name: str) -> bool:
        return name in self._registrations

    async def aclose(self) -> None:
        with self._lock:
            clients = list(self._http_clients.values())
            self._http_clients.clear()
        for http_client in clients:
            await http_client.aclose()

    async def __aenter__(self) -> "MultipleClientFactory[TClient]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


class ClientFactoryBuilder(Generic[TClient]):
    """
    Collects named client configurations.

    Args:
        client_factory: ``(options, invoker) -> client``
        core_options: Services shared by all clients
    """

    def __init__(
        self,
        client_factory: ClientConstructor,
        core_options: Optional[CoreServicesOptions] = None
    ):
        if client_factory is None:
            raise ValueError("client_factory is required")
        self._client_factory = client_factory
        self._core_options = core_options
        self._registrations: Dict[str, ClientRegistration] = {}

    def add_client(
        self,
        name: str,
        options: OptionsSource,
        *,
        configure_resilience: Optional[ConfigureResilience] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ClientFactoryBuilder[TClient]":
        """
        Register a named configuration.

        Args:
            name: Unique, non-blank client name
            options: ClientOptions, or a callable receiving the default
                HTTP client name (``kontent-ai-client-{name}``, sanitised)
                and returning ClientOptions
            configure_resilience: Resilience customisation for this client
            transport: Inner I/O transport for this client

        Raises:
            ValueError: blank or duplicate name
            ConfigurationError: invalid options
        """
        if not name or not name.strip():
            raise ValueError("Client name cannot be null or empty.")
        if name in self._registrations:
            raise ValueError(f"A client with name '{name}' is already registered.")

        http_client_name = default_client_name(name)
        if callable(options) and not isinstance(options, ClientOptions):
            resolved = options(http_client_name)
        else:
            resolved = options

        if not isinstance(resolved, ClientOptions):
            raise ConfigurationError(
                "options", resolved, f"Client '{name}' must be configured with ClientOptions"
            )
        if resolved.http_client_name == DEFAULT_HTTP_CLIENT_NAME:
            resolved = resolved.with_name(http_client_name)
        resolved.validate()

        self._registrations[name] = ClientRegistration(
            name=name,
            options=resolved,
            configure_resilience=configure_resilience,
            transport=transport,
        )
        return self

    def build(self, monitor: Optional[OptionsMonitor] = None) -> MultipleClientFactory[TClient]:
        """
        Args:
            monitor: Options source to share (e.g. OptionsFileWatcher.monitor);
                names it already holds keep their current value
        """
        return MultipleClientFactory(
            self._client_factory,
            self._registrations,
            self._core_options,
            monitor,
        )
