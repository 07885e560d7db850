"""
Mock API Responses

Pre-defined mock responses for external service testing.
"""

from .twitch_responses import (
    ACCESS_TOKEN_RESPONSE,
    CHANNEL_RETRO,
    CHANNEL_SPEEDRUN,
    EMPTY_MANIFEST,
    MEDIA_MANIFEST,
    SEARCH_EMPTY_RESPONSE,
    SEARCH_RESPONSE,
    STREAM_LIVE_RESPONSE,
    STREAM_OFFLINE_RESPONSE,
    VARIANT_MANIFEST,
    VARIANT_MANIFEST_WITH_VIDEO_GROUPS,
)

__all__ = [
    "ACCESS_TOKEN_RESPONSE",
    "CHANNEL_RETRO",
    "CHANNEL_SPEEDRUN",
    "EMPTY_MANIFEST",
    "MEDIA_MANIFEST",
    "SEARCH_EMPTY_RESPONSE",
    "SEARCH_RESPONSE",
    "STREAM_LIVE_RESPONSE",
    "STREAM_OFFLINE_RESPONSE",
    "VARIANT_MANIFEST",
    "VARIANT_MANIFEST_WITH_VIDEO_GROUPS",
]
