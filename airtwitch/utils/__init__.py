"""Utility modules for AirTwitch"""

from .events import EventChannel
from .http_gateway import HttpGateway, HttpResponse

__all__ = [
    "EventChannel",
    "HttpGateway",
    "HttpResponse",
]
