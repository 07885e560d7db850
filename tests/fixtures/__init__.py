"""
Test Fixtures

Shared test data, mock responses, and factories.
"""

from .factories import (
    ChannelFactory,
    DeviceFactory,
    VariantFactory,
)

__all__ = [
    "ChannelFactory",
    "DeviceFactory",
    "VariantFactory",
]
