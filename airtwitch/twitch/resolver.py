"""
Live stream resolution for platform channels.

Resolves a channel to its playable variants in four steps:

1. Negotiate a fresh channel access token (never cached).
2. Check the channel's live status; an offline channel yields no variants.
3. Fetch the variant manifest from the usher service.
4. Parse the manifest into LiveStreamVariants.

Live status and manifest fetch are separate round trips, so a channel can
go offline in between; that surfaces as a failed fetch.
"""

import logging
import random
from typing import Any, Optional
from urllib.parse import quote

from airtwitch.exceptions import (
    ApiError,
    AuthError,
    ResolutionError,
    TransportError,
)
from airtwitch.twitch.api import TwitchClient
from airtwitch.twitch.manifest import ManifestParser
from airtwitch.twitch.models import Channel, ChannelToken, LiveStreamVariant
from airtwitch.utils.http_gateway import HttpResponse

logger = logging.getLogger(__name__)

USHER_API_BASE = "https://usher.ttvnw.net/api/channel/hls/"
HLS_ACCEPT = "application/vnd.apple.mpegurl"
DEFAULT_PLAYER = "twitchweb"

# Upper bound of the per-request cache-buster value
CACHE_BUSTER_MAX = 999999


class StreamResolver:
    """
    Channel search and live variant resolution.

    Args:
        client: Platform API client
        parser: Manifest parser (a new ManifestParser by default)
        usher_base_url: Base URL of the manifest service
        player: Player identity sent with manifest requests
        rng: Source of cache-buster values
    """

    def __init__(
        self,
        client: TwitchClient,
        parser: Optional[ManifestParser] = None,
        usher_base_url: str = USHER_API_BASE,
        player: str = DEFAULT_PLAYER,
        rng: Optional[random.Random] = None,
    ):
        self.client = client
        self.parser = parser or ManifestParser()
        self.usher_base_url = usher_base_url if usher_base_url.endswith("/") else usher_base_url + "/"
        self.player = player
        self._rng = rng or random.Random()

    def search_channels(self, query: str) -> list[Channel]:
        """
        Search channels by text.

        Returns:
            Matching channels in API order; empty when nothing matches

        Raises:
            ResolutionError: API unreachable, failing, or unparseable
        """
        data = self._get("/kraken/search/channels", {"query": query}, f"search for {query!r}")

        channels = data.get("channels") if isinstance(data, dict) else None
        if channels is None:
            # v5 returns an explicit empty list, a missing key means a malformed reply
            raise ResolutionError(f"Search response for {query!r} has no channel list")
        if not isinstance(channels, list):
            raise ResolutionError(f"Unexpected channel list in search for {query!r}")

        results = [Channel.from_api(entry) for entry in channels]
        logger.info(f"Search for {query!r} returned {len(results)} channel(s)")
        return results

    def get_channel(self, channel_id: str) -> Channel:
        """
        Look up a channel by ID.

        Raises:
            ResolutionError: API unreachable, failing, or unparseable
        """
        data = self._get(f"/kraken/channels/{quote(str(channel_id), safe='')}", None, f"channel {channel_id}")
        return Channel.from_api(data)

    def negotiate_token(self, channel: Channel) -> ChannelToken:
        """
        Obtain a fresh access token for a channel.

        Raises:
            AuthError: Negotiation failed or was denied
        """
        path = f"/api/channels/{quote(channel.name, safe='')}/access_token"
        try:
            data = self.client.get_json(path)
        except (TransportError, ApiError, ResolutionError) as e:
            raise AuthError(
                f"Could not obtain access token for channel {channel.name}: {e.message}",
                original_error=e,
            ) from e

        token = data.get("token") if isinstance(data, dict) else None
        sig = data.get("sig") if isinstance(data, dict) else None
        if not token or not sig:
            raise AuthError(f"Access token response for channel {channel.name} lacks token or signature")

        return ChannelToken(channel_name=channel.name, token=token, sig=sig)

    def check_live(self, channel: Channel) -> bool:
        """
        Query whether a channel is broadcasting and record it on the channel.

        Raises:
            ResolutionError: The status query failed or its reply has no stream field
        """
        data = self._get(f"/kraken/streams/{quote(channel.id, safe='')}", None, f"stream status of {channel.name}")
        if not isinstance(data, dict) or "stream" not in data:
            raise ResolutionError(f"Stream status reply for channel {channel.name} has no stream field")
        channel.live = data["stream"] is not None
        logger.debug(f"Channel {channel.name} live: {channel.live}")
        return channel.live

    def resolve_live_variants(self, channel: Channel) -> list[LiveStreamVariant]:
        """
        Resolve the playable variants of a channel's live broadcast.

        Returns:
            Variants in manifest order; empty if the channel is not live or
            the manifest has no tracks

        Raises:
            AuthError: Token negotiation failed
            ResolutionError: Live-status query or manifest fetch failed
            ParseError: Manifest is malformed
        """
        token = self.negotiate_token(channel)

        if not self.check_live(channel):
            logger.info(f"Channel {channel.name} is not live")
            return []

        response = self._fetch_manifest(channel, token)
        tracks = self.parser.parse(response.body, response.encoding)

        variants = [LiveStreamVariant.from_track(track.uri, track.title) for track in tracks]
        logger.info(
            f"Resolved {len(variants)} variant(s) for {channel.name}: "
            f"{', '.join(variant.title for variant in variants)}"
        )
        return variants

    def manifest_params(self, token: ChannelToken) -> dict[str, str]:
        """Query parameters of a manifest request, with a new cache-buster."""
        return {
            "player": self.player,
            "token": token.token,
            "sig": token.sig,
            "$allow_audio_only": "true",
            "allow_source": "true",
            "type": "any",
            "p": str(self._rng.randint(0, CACHE_BUSTER_MAX)),
        }

    def _fetch_manifest(self, channel: Channel, token: ChannelToken) -> HttpResponse:
        url = f"{self.usher_base_url}{quote(channel.name, safe='')}.m3u8"
        try:
            response = self.client.gateway.get(
                url,
                params=self.manifest_params(token),
                headers={"Accept": HLS_ACCEPT},
            )
        except TransportError as e:
            raise ResolutionError(
                f"Could not retrieve live streams for channel {channel.name}: {e.message}",
                original_error=e,
            ) from e

        if not response.ok:
            logger.warning(f"Manifest request for {channel.name} failed ({response.status_code})")
            raise ResolutionError(
                f"Manifest request for channel {channel.name} failed with status {response.status_code}",
                original_error=ApiError(
                    f"usher returned {response.status_code}",
                    status_code=response.status_code,
                    body=response.text,
                ),
            )
        return response

    def _get(self, path: str, params: Optional[dict[str, Any]], what: str) -> Any:
        try:
            return self.client.get_json(path, params)
        except (TransportError, ApiError) as e:
            raise ResolutionError(f"Could not fetch {what}: {e.message}", original_error=e) from e
