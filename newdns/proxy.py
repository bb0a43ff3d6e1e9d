"""Forwarding requests to another DNS server."""

from __future__ import annotations

from typing import Optional

import dns.message
import dns.query

from .event import Event, Logger, emit
from .query import _resolve
from .run import Handler, ResponseWriter, _split_addr

_TIMEOUT = 2.0


def proxy(addr: str, logger: Optional[Logger] = None) -> Handler:
    """Return a handler that forwards requests to the DNS server at addr."""

    def handle(writer: ResponseWriter, request: dns.message.Message) -> None:
        emit(logger, Event.PROXY_REQUEST, request)
        try:
            host, port = _split_addr(addr)
            response = dns.query.udp(request, _resolve(host, port, 0), timeout=_TIMEOUT, port=port)
        except Exception as exc:  # every failure is reported to the logger
            emit(logger, Event.PROXY_ERROR, error=exc)
            writer.close()
            return

        emit(logger, Event.PROXY_RESPONSE, response)
        try:
            writer.write_msg(response)
        except Exception as exc:
            emit(logger, Event.NETWORK_ERROR, error=exc)
            writer.close()

    return handle