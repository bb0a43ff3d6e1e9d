"""DNS record types."""

from __future__ import annotations

import enum

import dns.rdatatype


class Type(enum.IntEnum):
    """A DNS record type; any 16 bit type code can be represented."""

    #: IPv4 addresses.
    A = int(dns.rdatatype.A)
    #: IPv6 addresses.
    AAAA = int(dns.rdatatype.AAAA)
    #: Other DNS names.
    CNAME = int(dns.rdatatype.CNAME)
    #: Mail servers with their priorities.
    MX = int(dns.rdatatype.MX)
    #: Arbitrary text data.
    TXT = int(dns.rdatatype.TXT)
    #: Delegation to other name servers.
    NS = int(dns.rdatatype.NS)
    #: Locations of services.
    SRV = int(dns.rdatatype.SRV)

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, int) and 0 <= value <= 0xFFFF:
            member = int.__new__(cls, value)
            member._name_ = f"TYPE{value}"
            member._value_ = value
            return cls._value2member_map_.setdefault(value, member)
        return None

    def supported(self) -> bool:
        """Return whether zones may serve records of this type."""
        return self in _SUPPORTED


_SUPPORTED = frozenset({Type.A, Type.AAAA, Type.CNAME, Type.MX, Type.TXT, Type.NS, Type.SRV})