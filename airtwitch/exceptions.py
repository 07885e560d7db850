"""
Error taxonomy for AirTwitch.

Every failure the core reports is one of these types. Callers get an
accurate, typed reason; presenting it to a user is their concern.
"""

from typing import Optional


class AirTwitchError(Exception):
    """Base class for all AirTwitch errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ConfigurationError(AirTwitchError):
    """Configuration is missing or invalid (fatal at startup)."""


class TransportError(AirTwitchError):
    """Network or connection failure while sending a request."""


class ApiError(AirTwitchError):
    """Non-2xx response from the streaming platform API."""

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.status_code = status_code
        self.body = body


class ResolutionError(AirTwitchError):
    """Channel or stream information could not be resolved."""


class AuthError(ResolutionError):
    """Channel access token negotiation was rejected."""


class ParseError(ResolutionError):
    """A variant manifest is structurally invalid."""


class PlaybackError(AirTwitchError):
    """A PLAY command could not be delivered to the device."""


class DeviceNotFoundError(AirTwitchError, IndexError):
    """No device is registered at the requested position."""
