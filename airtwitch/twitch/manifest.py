"""
HLS manifest parsing.

Turns a variant manifest into an ordered list of tracks using the m3u8
library. Master playlists yield one track per ``#EXT-X-STREAM-INF`` entry;
media playlists yield one track per segment.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

import m3u8
from m3u8.parser import ParseError as M3U8ParseError

from airtwitch.exceptions import ParseError

logger = logging.getLogger(__name__)

M3U_HEADER = "#EXTM3U"
VARIANT_TAG = "#EXT-X-STREAM-INF"
SEGMENT_TAG = "#EXTINF"


@dataclass(frozen=True)
class ManifestTrack:
    """A track URI and the title the manifest declares for it, if any."""

    uri: str
    title: Optional[str] = None


class ManifestParser:
    """Parses manifest text into ManifestTracks."""

    def parse(self, body: Union[bytes, str], encoding: Optional[str] = "utf-8") -> list[ManifestTrack]:
        """
        Parse a manifest.

        Args:
            body: Raw manifest, as bytes or already decoded text
            encoding: Declared character encoding of ``body`` when bytes

        Returns:
            Tracks in manifest order; empty for a manifest without tracks

        Raises:
            ParseError: If the body cannot be decoded or is not a valid manifest
        """
        text = self._decode(body, encoding)

        first_line = next((line.strip() for line in text.splitlines() if line.strip()), "")
        if not first_line.startswith(M3U_HEADER):
            raise ParseError(f"Manifest does not start with {M3U_HEADER}: {first_line[:80]!r}")

        expected_variants, expected_segments = _check_structure(text)

        try:
            playlist = m3u8.loads(text)
        except (M3U8ParseError, ValueError, TypeError) as e:
            raise ParseError(f"Malformed manifest: {e}", original_error=e) from e

        parsed_variants = sum(1 for variant in playlist.playlists if variant.uri)
        parsed_segments = sum(1 for segment in playlist.segments if segment.uri)
        if (parsed_variants, parsed_segments) != (expected_variants, expected_segments):
            raise ParseError(
                f"Manifest declares {expected_variants} variant(s) and {expected_segments} segment(s), "
                f"parsed {parsed_variants} and {parsed_segments}"
            )

        if playlist.is_variant:
            tracks = [
                ManifestTrack(uri=variant.uri, title=_declared_video(variant))
                for variant in playlist.playlists
                if variant.uri
            ]
        else:
            tracks = [
                ManifestTrack(uri=segment.uri, title=segment.title or None)
                for segment in playlist.segments
                if segment.uri
            ]

        logger.debug(f"Parsed manifest with {len(tracks)} track(s)")
        return tracks

    @staticmethod
    def _decode(body: Union[bytes, str], encoding: Optional[str]) -> str:
        if isinstance(body, str):
            return body
        try:
            return body.decode(encoding or "utf-8")
        except (LookupError, UnicodeDecodeError) as e:
            raise ParseError(f"Cannot decode manifest as {encoding}: {e}", original_error=e) from e


def _declared_video(variant: m3u8.Playlist) -> Optional[str]:
    """The VIDEO rendition group of a variant, used as its declared title."""
    stream_info = getattr(variant, "stream_info", None)
    video = getattr(stream_info, "video", None)
    return video or None


def _check_structure(text: str) -> tuple[int, int]:
    """
    Check that every URI line belongs to a track tag and every track tag
    has a URI.

    Returns:
        Number of variant and segment tags in the manifest

    Raises:
        ParseError: On a stray line or a track tag without URI
    """
    variants = segments = 0
    pending: Optional[str] = None
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        if line.startswith("#"):
            if line.startswith(VARIANT_TAG + ":") or line.startswith(SEGMENT_TAG + ":"):
                if pending is not None:
                    raise ParseError(f"{pending} without URI before line {lineno}")
                pending = line.split(":", 1)[0]
                if pending == VARIANT_TAG:
                    variants += 1
                else:
                    segments += 1
            continue
        if pending is None:
            raise ParseError(f"Unexpected line {lineno} in manifest: {line[:80]!r}")
        pending = None

    if pending is not None:
        raise ParseError(f"Manifest ends with {pending} but no URI")
    return variants, segments
