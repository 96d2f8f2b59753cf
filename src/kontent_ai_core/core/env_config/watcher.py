"""Hot reload of client options for long-running processes.

Polls a YAML/JSON options file and pushes every client it defines into an
OptionsMonitor. Authentication reads the monitor on each request, so a
rotated API key applies to the next request without rebuilding clients.

Example:
    >>> factory = builder.build()
    >>> with OptionsFileWatcher("kontent.yaml", factory.options, check_interval=10.0):
    ...     client = factory.create_client("preview")
    ...     await client.get_item("about_us")
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, Type, Union

from ..options import ClientOptions
from ..options_monitor import OptionsMonitor
from .file_loader import load_options_file

logger = logging.getLogger(__name__)


class OptionsFileWatcher:
    """Monitors an options file and applies changes to an OptionsMonitor.

    Thread-safe implementation that polls the file's modification time.
    A failed reload keeps the previously loaded options.

    Attributes:
        path: Path to the options file
        check_interval: Seconds between modification checks
        monitor: Receives the loaded options, one entry per client name
    """

    def __init__(
        self,
        path: Union[str, Path],
        monitor: Optional[OptionsMonitor] = None,
        check_interval: float = 5.0,
        options_type: Type[ClientOptions] = ClientOptions,
        on_reload: Optional[Callable[[Dict[str, ClientOptions]], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        """
        Args:
            path: Options file (YAML or JSON)
            monitor: Monitor to update (a new one if None)
            check_interval: Seconds between file checks
            options_type: ClientOptions subclass to build
            on_reload: Called with the new options after a successful reload
            on_error: Called with the exception when a reload fails

        Raises:
            FileNotFoundError: file does not exist
            ConfigurationError: initial load failed
        """
        self.path = Path(path)
        self.monitor = monitor if monitor is not None else OptionsMonitor()
        self.check_interval = check_interval
        self.options_type = options_type
        self.on_reload = on_reload
        self.on_error = on_error

        self._lock = threading.RLock()
        self._current: Optional[Dict[str, ClientOptions]] = None
        self._last_mtime: Optional[float] = None

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._load()

    def _load(self) -> bool:
        try:
            loaded = load_options_file(self.path, self.options_type)
        except Exception as e:
            if self._current is None:
                raise
            logger.warning("Options reload failed, keeping previous: %s", e)
            if self.on_error:
                try:
                    self.on_error(e)
                except Exception as cb_error:
                    logger.warning("on_error callback failed: %s", cb_error)
            return False

        with self._lock:
            is_reload = self._current is not None
            self._current = loaded
            self._last_mtime = os.path.getmtime(self.path)

        for name, options in loaded.items():
            self.monitor.set(name, options)

        if is_reload and self.on_reload:
            try:
                self.on_reload(loaded)
            except Exception as e:
                logger.warning("on_reload callback failed: %s", e)

        logger.info("Options loaded from %s (%d client(s))", self.path, len(loaded))
        return True

    def _check_and_reload(self) -> None:
        if not self.path.exists():
            logger.warning("Options file disappeared: %s", self.path)
            return

        try:
            mtime = os.path.getmtime(self.path)
        except OSError as e:
            logger.error("Error checking options file: %s", e)
            return

        if self._last_mtime is None or mtime > self._last_mtime:
            logger.debug("Options file modified, reloading: %s", self.path)
            self._load()

    def _loop(self) -> None:
        logger.info("Options watcher started for %s (interval: %ss)", self.path, self.check_interval)
        while not self._stop_event.is_set():
            self._check_and_reload()
            self._stop_event.wait(self.check_interval)
        logger.info("Options watcher stopped for %s", self.path)

    @property
    def current_options(self) -> Dict[str, ClientOptions]:
        """Most recently loaded options, by client name."""
        with self._lock:
            return dict(self._current or {})

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start polling. Calling it again while running does nothing."""
        if self.is_running:
            logger.debug("Options watcher already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name=f"OptionsFileWatcher-{self.path.name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop polling and wait for the thread to finish."""
        if not self.is_running:
            return

        self._stop_event.set()
        self._thread.join(timeout=self.check_interval + 1.0)
        if self._thread.is_alive():
            logger.warning("Watcher thread did not stop cleanly")

    def reload_now(self) -> bool:
        """
        Reload immediately.

        Returns:
            True if the file was loaded, False if the previous options were kept
        """
        logger.info("Manual options reload requested for %s", self.path)
        return self._load()

    def __enter__(self) -> "OptionsFileWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
