"""
Streaming platform data models.

Channels come from search or lookup calls, tokens are negotiated per
resolution, and variants are the playable entries of a live manifest.
"""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

from airtwitch.exceptions import ResolutionError

# Title used when a variant URI has too few path segments to infer one
FALLBACK_VARIANT_TITLE = "native"


@dataclass
class Channel:
    """
    A channel on the streaming platform.

    Attributes:
        id: Platform channel ID
        name: Login name, used for token and manifest requests
        display_name: Human-readable name
        status: Channel status text
        game: Current game, if set
        live: Live flag; None until a live-status check has run
    """

    id: str
    name: str
    display_name: str
    status: str = ""
    game: Optional[str] = None
    live: Optional[bool] = None

    @property
    def is_live(self) -> bool:
        return bool(self.live)

    @classmethod
    def from_api(cls, data: Any) -> "Channel":
        """
        Build a channel from a v5 API channel object.

        Raises:
            ResolutionError: If the object lacks an ID or name
        """
        if not isinstance(data, dict):
            raise ResolutionError(f"Unexpected channel payload: {data!r}")

        channel_id = data.get("_id")
        name = data.get("name")
        if channel_id is None or not name:
            raise ResolutionError(
                f"Channel information is incomplete (id: {channel_id}, name: {name})"
            )

        return cls(
            id=str(channel_id),
            name=name,
            display_name=data.get("display_name") or name,
            status=data.get("status") or "",
            game=data.get("game"),
        )

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class ChannelToken:
    """Access token and signature scoped to one channel."""

    channel_name: str
    token: str
    sig: str

    def __repr__(self) -> str:
        # Token values are credentials; keep them out of logs
        return f"ChannelToken(channel_name={self.channel_name!r})"


@dataclass(frozen=True)
class LiveStreamVariant:
    """One playable quality of a live broadcast."""

    title: str
    uri: str

    @classmethod
    def from_track(cls, uri: str, title: Optional[str] = None) -> "LiveStreamVariant":
        """Build a variant, inferring the title from the URI when none is declared."""
        return cls(title=title or infer_title(uri), uri=uri)

    def __str__(self) -> str:
        return self.title


def infer_title(uri: str) -> str:
    """
    Infer a variant title from its URI.

    The title is the path segment just before the file name, e.g.
    ``.../chunked/index.m3u8`` gives ``chunked``.
    """
    segments = [segment for segment in urlparse(uri).path.split("/") if segment]
    if len(segments) >= 2:
        return segments[-2]
    return FALLBACK_VARIANT_TITLE
