"""A small client for querying DNS servers."""

from __future__ import annotations

import ipaddress
import socket
from typing import Callable, Optional

import dns.message
import dns.query
import dns.rdataclass
import dns.rdatatype

from .run import _split_addr

_TIMEOUT = 1.0


def _resolve(host: str, port: int, family: int) -> str:
    if not host:
        return "::1" if family == socket.AF_INET6 else "127.0.0.1"
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        return socket.getaddrinfo(host.rstrip("."), port, family, socket.SOCK_STREAM)[0][4][0]


def query(
    proto: str,
    addr: str,
    name: str,
    typ: str,
    fn: Optional[Callable[[dns.message.Message], None]] = None,
) -> dns.message.Message:
    """Query the server at addr over proto for the name and type.

    The optional fn may change the request before it is sent. The id of
    the returned response is reset to zero to ease comparisons.
    """
    base = proto.rstrip("46")
    exchanges = {"udp": dns.query.udp, "tcp": dns.query.tcp, "tcp-tls": dns.query.tls}
    if base not in exchanges:
        raise ValueError(f"unsupported protocol: {proto}")
    family = {"4": socket.AF_INET, "6": socket.AF_INET6}.get(proto[-1:], 0)

    request = dns.message.make_query(name, dns.rdatatype.from_text(typ), dns.rdataclass.IN)
    request.flags = 0
    if fn is not None:
        fn(request)

    host, port = _split_addr(addr)
    response = exchanges[base](request, _resolve(host, port, family), timeout=_TIMEOUT, port=port)
    response.id = 0
    return response