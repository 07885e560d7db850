"""
Streaming platform integration.

Components:
- TwitchClient: Client-ID resolution and v5 API access
- StreamResolver: Channel search and live variant resolution
- ManifestParser: HLS manifest to track list
- Channel, ChannelToken, LiveStreamVariant: Data models
"""

from airtwitch.twitch.api import TwitchClient, resolve_client_id
from airtwitch.twitch.manifest import ManifestParser, ManifestTrack
from airtwitch.twitch.models import (
    Channel,
    ChannelToken,
    LiveStreamVariant,
    infer_title,
)
from airtwitch.twitch.resolver import StreamResolver

__all__ = [
    "Channel",
    "ChannelToken",
    "LiveStreamVariant",
    "ManifestParser",
    "ManifestTrack",
    "StreamResolver",
    "TwitchClient",
    "infer_title",
    "resolve_client_id",
]
