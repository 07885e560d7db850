"""
AirPlay receiver discovery, registry and playback control.

Components:
- DeviceRecord: Immutable receiver description, identified by key
- AirPlayDiscovery: zeroconf browser publishing resolved devices
- DeviceRegistry: Deduplicated, discovery-ordered device set
- PlaybackController: Single-session PLAY/STOP state machine
"""

from airtwitch.airplay.control import (
    PlaybackController,
    PlaybackSession,
    PlaybackState,
)
from airtwitch.airplay.device import DeviceRecord
from airtwitch.airplay.discovery import AIRPLAY_SERVICE_TYPE, AirPlayDiscovery
from airtwitch.airplay.registry import DeviceRegistry

__all__ = [
    "AIRPLAY_SERVICE_TYPE",
    "AirPlayDiscovery",
    "DeviceRecord",
    "DeviceRegistry",
    "PlaybackController",
    "PlaybackSession",
    "PlaybackState",
]
