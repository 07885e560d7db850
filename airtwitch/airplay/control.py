"""
Remote playback control for AirPlay receivers.

The controller owns at most one PlaybackSession. Its state machine is

    IDLE -> STARTING -> PLAYING -> STOPPING -> IDLE

A failed PLAY returns to IDLE and raises PlaybackError. STOP is best
effort: whatever the device answers, the controller ends in IDLE and the
failure is only logged.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from airtwitch.airplay.device import DeviceRecord
from airtwitch.exceptions import PlaybackError, TransportError
from airtwitch.twitch.models import LiveStreamVariant
from airtwitch.utils.http_gateway import HttpGateway, HttpResponse

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "MediaControl/1.0"


class PlaybackState(str, Enum):
    """Controller lifecycle states."""

    IDLE = "idle"
    STARTING = "starting"
    PLAYING = "playing"
    STOPPING = "stopping"


class Command(str, Enum):
    """Device control commands and their endpoint paths."""

    PLAY = "/play"
    STOP = "/stop"


@dataclass
class PlaybackSession:
    """Binding of one playing content URI to one device."""

    device: DeviceRecord
    content_uri: str
    title: str = ""
    state: PlaybackState = PlaybackState.STARTING
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def build_play_body(content_uri: str, start_position: float = 0.0) -> str:
    """Text body of a PLAY command."""
    return f"Content-Location: {content_uri}\nStart-Position: {start_position:.1f}\n"


class PlaybackController:
    """
    Drives playback sessions on AirPlay receivers.

    Args:
        gateway: Shared HTTP gateway used for every command
        user_agent: Identifying header sent with every command
        start_position: Start position sent with PLAY, in seconds
    """

    def __init__(
        self,
        gateway: HttpGateway,
        user_agent: str = DEFAULT_USER_AGENT,
        start_position: float = 0.0,
    ):
        self._gateway = gateway
        self.user_agent = user_agent
        self.start_position = start_position
        self._state = PlaybackState.IDLE
        self._session: Optional[PlaybackSession] = None
        self._lock = threading.RLock()

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    def play(self, device: DeviceRecord, variant: LiveStreamVariant) -> PlaybackSession:
        """
        Start playing a stream variant on a device.

        An active session is stopped first, whatever the outcome of its STOP.

        Returns:
            The new session, in PLAYING state

        Raises:
            PlaybackError: If the PLAY command fails; the controller is IDLE
        """
        with self._lock:
            if self._session is not None:
                logger.info(
                    f"Replacing session on {self._session.device.name} before starting a new one"
                )
                self._stop_session()

            content_uri = variant.uri
            session = PlaybackSession(device=device, content_uri=content_uri, title=variant.title)
            self._session = session
            self._set_state(PlaybackState.STARTING)

            try:
                response = self._send(device, Command.PLAY, build_play_body(content_uri, self.start_position))
            except TransportError as e:
                self._reset()
                raise PlaybackError(
                    f"Could not send PLAY to {device.name}: {e.message}", original_error=e
                ) from e
            except PlaybackError:
                self._reset()
                raise

            if not response.ok:
                self._reset()
                raise PlaybackError(
                    f"Device {device.name} rejected PLAY with status {response.status_code}"
                )

            session.state = PlaybackState.PLAYING
            self._set_state(PlaybackState.PLAYING)
            logger.info(f"Playing {variant.title} on {device.name}")
            return session

    def stop(self) -> None:
        """
        Stop the active session. Without one, nothing is sent.

        Never raises for device or transport failures.
        """
        with self._lock:
            if self._session is None:
                logger.debug("stop() while idle; nothing to do")
                return
            self._stop_session()

    def close(self) -> None:
        """Stop any active session at shutdown. Repeated calls are no-ops."""
        self.stop()

    def _stop_session(self) -> None:
        session = self._session
        session.state = PlaybackState.STOPPING
        self._set_state(PlaybackState.STOPPING)
        try:
            response = self._send(session.device, Command.STOP, None)
            if not response.ok:
                logger.warning(
                    f"Device {session.device.name} answered STOP with status {response.status_code}"
                )
        except (TransportError, PlaybackError) as e:
            logger.warning(f"STOP to {session.device.name} failed: {e}")
        finally:
            session.state = PlaybackState.IDLE
            self._reset()
            logger.info(f"Stopped playback on {session.device.name}")

    def _send(self, device: DeviceRecord, command: Command, body: Optional[str]) -> HttpResponse:
        base_uri = device.base_uri
        if base_uri is None:
            raise PlaybackError(f"Device {device.name} has no IPv4 address")

        headers = {"User-Agent": self.user_agent}
        if body:
            headers["Content-Type"] = "text/parameters"
            logger.debug(f"Sending {command.name} to {device.name} with content:\n{body}")
        response = self._gateway.post(f"{base_uri}{command.value}", content=body or b"", headers=headers)
        logger.debug(f"Response from device {device.name}: {response.status_code} {response.text}")
        return response

    def _reset(self) -> None:
        self._session = None
        self._set_state(PlaybackState.IDLE)

    def _set_state(self, state: PlaybackState) -> None:
        if state != self._state:
            logger.debug(f"Playback state {self._state.value} -> {state.value}")
        self._state = state
