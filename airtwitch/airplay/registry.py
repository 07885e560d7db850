"""
Registry of discovered playback receivers.

Keeps one record per device key in discovery order. The first record seen
for a key wins; later records with the same key are dropped.
"""

import logging
import threading
from typing import Optional

from airtwitch.airplay.device import DeviceRecord
from airtwitch.exceptions import DeviceNotFoundError
from airtwitch.utils.events import EventChannel

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """
    Deduplicated, append-ordered set of DeviceRecords.

    Discovery threads write through ``on_device_resolved`` while selection
    code reads snapshots; a single lock guards both.
    """

    def __init__(self):
        self._devices: list[DeviceRecord] = []
        self._keys: set[str] = set()
        self._lock = threading.Lock()
        self._source: Optional[EventChannel[DeviceRecord]] = None

    def attach(self, events: EventChannel[DeviceRecord]) -> None:
        """
        Subscribe to a discovery event channel.

        The registry follows one channel at a time; attaching again to the
        same channel is a no-op.
        """
        with self._lock:
            if self._source is events:
                return
            if self._source is not None:
                raise RuntimeError("DeviceRegistry is already attached to a discovery channel")
            self._source = events
        events.subscribe(self.on_device_resolved)

    def close(self) -> None:
        """Unsubscribe from discovery. Repeated calls are no-ops."""
        with self._lock:
            source, self._source = self._source, None
        if source is not None:
            source.unsubscribe(self.on_device_resolved)

    def on_device_resolved(self, record: DeviceRecord) -> bool:
        """
        Record a resolved device.

        Returns:
            True if the record was added, False if its key was already known
        """
        with self._lock:
            if record.key in self._keys:
                logger.debug(f"Ignoring known device {record.key}")
                return False
            self._keys.add(record.key)
            self._devices.append(record)
            position = len(self._devices) - 1

        logger.info(f"Registered device #{position}: {record.name}")
        return True

    def list(self) -> list[DeviceRecord]:
        """Snapshot of all devices in discovery order."""
        with self._lock:
            return list(self._devices)

    def get(self, index: int) -> DeviceRecord:
        """
        Device at a position in discovery order.

        Raises:
            DeviceNotFoundError: If no device is registered at ``index``
        """
        with self._lock:
            if 0 <= index < len(self._devices):
                return self._devices[index]
            count = len(self._devices)
        raise DeviceNotFoundError(f"No device at index {index} ({count} known)")

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)
