"""
Live, named client options.

Middleware reads options through ``OptionsMonitor.getter(name)`` on every
request, so a reloaded value (e.g. a rotated API key pushed by
OptionsFileWatcher) applies without rebuilding the transport chain.
"""

import logging
import threading
from typing import Callable, Dict, Generic, List, TypeVar

from .options import ClientOptions

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ClientOptions)

ChangeCallback = Callable[[str, ClientOptions], None]

DEFAULT_NAME = ""


class OptionsMonitor(Generic[T]):
    """
    Thread-safe registry of named options.

    Example:
        >>> monitor = OptionsMonitor()
        >>> monitor.set("production", options)
        >>> current = monitor.getter("production")
        >>> current().api_key
        'secret'
        >>> monitor.set("production", options.with_api_key("rotated"))
        >>> current().api_key
        'rotated'
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._values: Dict[str, T] = {}
        self._callbacks: List[ChangeCallback] = []

    def get(self, name: str = DEFAULT_NAME) -> T:
        with self._lock:
            try:
                return self._values[name]
            except KeyError:
                raise KeyError(f"No options registered under '{name}'") from None

    @property
    def current_value(self) -> T:
        return self.get(DEFAULT_NAME)

    def set(self, name: str, options: T) -> None:
        with self._lock:
            previous = self._values.get(name)
            self._values[name] = options
            callbacks = list(self._callbacks)

        if previous is None or previous == options:
            return

        logger.info("Options '%s' changed", name or "<default>")
        for callback in callbacks:
            try:
                callback(name, options)
            except Exception as e:
                logger.warning("Options change callback failed: %s", e)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._values)

    def getter(self, name: str = DEFAULT_NAME) -> Callable[[], T]:
        """Zero-argument callable returning the current value of ``name``."""
        return lambda: self.get(name)

    def on_change(self, callback: ChangeCallback) -> Callable[[], None]:
        """
        Register a callback invoked after a named value is replaced.

        Returns:
            Function that unregisters the callback
        """
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
