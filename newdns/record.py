"""A single DNS record."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .rtype import Type
from .tools import is_domain

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class ValidationError(ValueError):
    """Raised when a record, set or zone is invalid."""


def _parse_ip(address: str) -> Optional[IPAddress]:
    if "%" in address:
        return None
    try:
        return ipaddress.ip_address(address)
    except ValueError:
        return None


@dataclass
class Record:
    """A single DNS record."""

    #: The target address for A, AAAA, CNAME, MX, NS and SRV records.
    address: str = ""
    #: The priority for MX and SRV records.
    priority: int = 0
    #: The weight for SRV records.
    weight: int = 0
    #: The port for SRV records.
    port: int = 0
    #: The strings of TXT records.
    data: List[str] = field(default_factory=list)

    def validate(self, typ: Type) -> None:
        """Raise ValidationError if the record is not valid for the given type."""
        if typ == Type.A:
            ip = _parse_ip(self.address)
            if ip is None or (ip.version == 6 and ip.ipv4_mapped is None):
                raise ValidationError(f"invalid IPv4 address: {self.address}")

        if typ == Type.AAAA and _parse_ip(self.address) is None:
            raise ValidationError(f"invalid IPv6 address: {self.address}")

        if typ in (Type.CNAME, Type.MX, Type.NS, Type.SRV):
            if not is_domain(self.address, True):
                raise ValidationError(f"invalid domain name: {self.address}")

        if typ == Type.TXT:
            if not self.data:
                raise ValidationError("missing data")
            if any(len(item.encode("utf-8")) > 255 for item in self.data):
                raise ValidationError("data too long")

        if typ == Type.SRV:
            for label, value in (("priority", self.priority), ("weight", self.weight), ("port", self.port)):
                if not 0 <= value <= 65535:
                    raise ValidationError(f"invalid {label}: {value}")