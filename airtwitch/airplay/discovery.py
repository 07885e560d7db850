"""
AirPlay receiver discovery over multicast DNS.

Browses for ``_airplay._tcp.local.`` with zeroconf and publishes a
DeviceRecord on ``events`` whenever a service resolves. Events arrive on
zeroconf's browser thread.
"""

import logging
import threading
from typing import Any, Callable, Optional

from zeroconf import ServiceBrowser, ServiceListener, Zeroconf

from airtwitch.airplay.device import DeviceRecord
from airtwitch.exceptions import ConfigurationError
from airtwitch.utils.events import EventChannel

logger = logging.getLogger(__name__)

AIRPLAY_SERVICE_TYPE = "_airplay._tcp.local."

# Milliseconds to wait for a service's address and TXT records
RESOLVE_TIMEOUT_MS = 3000


class AirPlayServiceListener(ServiceListener):
    """Resolves browsed services and hands DeviceRecords to a callback."""

    def __init__(
        self,
        on_resolved: Callable[[DeviceRecord], None],
        resolve_timeout_ms: int = RESOLVE_TIMEOUT_MS,
    ):
        self._on_resolved = on_resolved
        self._resolve_timeout_ms = resolve_timeout_ms

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        logger.debug(f"Service added: name {name}; type {type_}")
        self._resolve(zc, type_, name)

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        logger.debug(f"Service updated: name {name}; type {type_}")
        self._resolve(zc, type_, name)

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        # Records live for the process lifetime; removal is informational
        logger.debug(f"Service removed: name {name}; type {type_}")

    def _resolve(self, zc: Zeroconf, type_: str, name: str) -> None:
        info = zc.get_service_info(type_, name, timeout=self._resolve_timeout_ms)
        if info is None:
            logger.warning(f"Could not resolve service {name}")
            return

        record = DeviceRecord.from_service_info(info, type_)
        if not record.ipv4_addresses and not record.ipv6_addresses:
            logger.warning(f"Service {name} resolved without addresses, ignoring")
            return

        logger.info(f"Device resolved: {record}")
        self._on_resolved(record)


class AirPlayDiscovery:
    """
    Continuous AirPlay service discovery.

    Subscribers of ``events`` receive every resolved DeviceRecord. ``start``
    begins browsing; ``close`` stops it and may be called repeatedly.

    Args:
        service_type: mDNS service type to browse
        zeroconf_factory: Builds the Zeroconf instance (injectable for tests)
        browser_factory: Builds the service browser (injectable for tests)
        resolve_timeout_ms: Per-service resolution timeout
    """

    def __init__(
        self,
        service_type: str = AIRPLAY_SERVICE_TYPE,
        zeroconf_factory: Callable[[], Any] = Zeroconf,
        browser_factory: Callable[..., Any] = ServiceBrowser,
        resolve_timeout_ms: int = RESOLVE_TIMEOUT_MS,
    ):
        self.service_type = service_type
        self.events: EventChannel[DeviceRecord] = EventChannel("device-resolved")
        self._zeroconf_factory = zeroconf_factory
        self._browser_factory = browser_factory
        self._listener = AirPlayServiceListener(self.events.emit, resolve_timeout_ms)
        self._zeroconf: Optional[Any] = None
        self._browser: Optional[Any] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._browser is not None

    def start(self) -> None:
        """
        Start browsing. Calling start on a running discovery does nothing.

        Raises:
            ConfigurationError: If the multicast socket cannot be opened
        """
        with self._lock:
            if self._browser is not None:
                return
            try:
                self._zeroconf = self._zeroconf_factory()
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot open multicast DNS socket: {e}", original_error=e
                ) from e
            self._browser = self._browser_factory(
                self._zeroconf, self.service_type, listener=self._listener
            )
            logger.info(f"Browsing for {self.service_type}")

    def close(self) -> None:
        """Stop browsing and release the multicast socket."""
        with self._lock:
            browser, zc = self._browser, self._zeroconf
            self._browser = None
            self._zeroconf = None

        if browser is not None:
            browser.cancel()
        if zc is not None:
            zc.close()
            logger.info(f"Stopped browsing for {self.service_type}")

    def __enter__(self) -> "AirPlayDiscovery":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
