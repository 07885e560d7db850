"""
Resolved AirPlay receiver records.

A DeviceRecord is built once from a discovery resolution event and never
changes afterwards. Two records are the same device when their keys match,
whatever else differs.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from zeroconf import IPVersion

# Only this TXT property is kept; the others are ignored
MODEL_PROPERTY = "model"


@dataclass(frozen=True)
class DeviceRecord:
    """
    A network playback receiver advertised over multicast DNS.

    Attributes:
        key: Identity key (lower-cased qualified name)
        name: Display name (service instance name)
        qualified_name: Fully qualified service name
        ipv4_addresses: Advertised IPv4 addresses
        ipv6_addresses: Advertised IPv6 addresses
        port: Control port
        model: Model string from the TXT record, if any
    """

    key: str
    name: str = field(compare=False)
    qualified_name: str = field(compare=False)
    ipv4_addresses: tuple[str, ...] = field(default=(), compare=False)
    ipv6_addresses: tuple[str, ...] = field(default=(), compare=False)
    port: int = field(default=7000, compare=False)
    model: Optional[str] = field(default=None, compare=False)

    @classmethod
    def from_service_info(cls, info: Any, service_type: str) -> "DeviceRecord":
        """
        Build a record from a resolved ``zeroconf.ServiceInfo``.

        Args:
            info: Resolved service information
            service_type: Browsed service type, used to derive the instance name
        """
        qualified_name = info.name
        suffix = "." + service_type
        if qualified_name.endswith(suffix):
            name = qualified_name[: -len(suffix)]
        else:
            name = qualified_name.split(".", 1)[0]

        return cls(
            key=qualified_name.lower(),
            name=name,
            qualified_name=qualified_name,
            ipv4_addresses=tuple(info.parsed_addresses(IPVersion.V4Only)),
            ipv6_addresses=tuple(info.parsed_addresses(IPVersion.V6Only)),
            port=int(info.port),
            model=_decode_property(info.properties or {}, MODEL_PROPERTY),
        )

    @property
    def base_uri(self) -> Optional[str]:
        """Control endpoint base, from the first IPv4 address and port."""
        if not self.ipv4_addresses:
            return None
        return f"http://{self.ipv4_addresses[0]}:{self.port}"

    def __str__(self) -> str:
        parts = []
        if self.model:
            parts.append(self.model)
        parts.extend(self.ipv4_addresses)
        parts.extend(self.ipv6_addresses)
        parts.append(f"port {self.port}")
        return f"{self.qualified_name} ({', '.join(parts)})"


def _decode_property(properties: dict, name: str) -> Optional[str]:
    """Look up a TXT property by name; zeroconf keys and values are bytes."""
    raw = properties.get(name.encode("ascii"), properties.get(name))
    if raw is None:
        return None
    if isinstance(raw, (bytes, bytearray)):
        return raw.decode("utf-8", errors="replace")
    return str(raw)
