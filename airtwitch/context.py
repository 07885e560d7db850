"""
Process-level component context.

AirTwitchContext builds and owns one instance of every core component and
hands them out by reference. Presentation layers create one context at
startup and close it at shutdown.
"""

import logging
import threading
from typing import Any, Optional

from airtwitch.airplay.control import PlaybackController
from airtwitch.airplay.discovery import AirPlayDiscovery
from airtwitch.airplay.registry import DeviceRegistry
from airtwitch.config import AirTwitchConfig, get_config
from airtwitch.twitch.api import TwitchClient
from airtwitch.twitch.resolver import StreamResolver
from airtwitch.utils.http_gateway import HttpGateway

logger = logging.getLogger(__name__)


class AirTwitchContext:
    """
    Owner of the device registry, discovery, resolver and controller.

    The Twitch client is built lazily on first use of ``resolver`` so that a
    missing Client-ID only affects the features that need it.

    Args:
        config: Configuration (the loaded global configuration by default)
        gateway: Shared HTTP gateway (built from ``config.http`` by default)
        discovery: Discovery component (built from ``config.discovery`` by default)
    """

    def __init__(
        self,
        config: Optional[AirTwitchConfig] = None,
        gateway: Optional[HttpGateway] = None,
        discovery: Optional[AirPlayDiscovery] = None,
    ):
        self.config = config or get_config()
        self.gateway = gateway or HttpGateway(timeout=self.config.http.timeout)
        self.discovery = discovery or AirPlayDiscovery(service_type=self.config.discovery.service_type)
        self.registry = DeviceRegistry()
        self.controller = PlaybackController(
            self.gateway,
            user_agent=self.config.playback.user_agent,
            start_position=self.config.playback.start_position,
        )
        self._resolver: Optional[StreamResolver] = None
        self._lock = threading.Lock()
        self._started = False
        self._closed = False

    @property
    def resolver(self) -> StreamResolver:
        """
        Stream resolver bound to the shared gateway.

        Raises:
            ConfigurationError: If no Client-ID can be determined
        """
        with self._lock:
            if self._resolver is None:
                twitch = self.config.twitch
                client = TwitchClient(
                    self.gateway,
                    client_id=twitch.client_id,
                    client_id_file=twitch.client_id_file,
                    api_host=twitch.api_host,
                )
                self._resolver = StreamResolver(
                    client,
                    usher_base_url=twitch.usher_base_url,
                    player=twitch.player,
                )
            return self._resolver

    def start(self) -> None:
        """Subscribe the registry to discovery and start browsing. Runs once."""
        with self._lock:
            if self._started:
                return
            self._started = True
        self.registry.attach(self.discovery.events)
        self.discovery.start()

    def close(self) -> None:
        """Stop playback and discovery and release the gateway. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        self.controller.close()
        self.discovery.close()
        self.registry.close()
        self.gateway.close()
        logger.debug("AirTwitch context closed")

    def __enter__(self) -> "AirTwitchContext":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
