"""A primitive recursive resolver built on top of another handler."""

from __future__ import annotations

import contextlib
from typing import Iterable, List, Optional

import dns.flags
import dns.message
import dns.rdataclass
import dns.rdatatype
import dns.rrset

from .run import Handler, ResponseWriter


class _CaptureWriter(ResponseWriter):
    """Keeps the single message a handler writes instead of sending it."""

    def __init__(self) -> None:
        super().__init__("tcp", ("0.0.0.0", 0))

    def write_msg(self, msg: dns.message.Message) -> None:
        if self.messages:
            raise RuntimeError("message already set")
        self.messages.append(msg)

    def close(self) -> None:
        pass

    @property
    def message(self) -> Optional[dns.message.Message]:
        return self.messages[0] if self.messages else None


def _ask(handler: Handler, request: dns.message.Message) -> Optional[dns.message.Message]:
    writer = _CaptureWriter()
    handler(writer, request)
    return writer.message


def _resolve(handler: Handler, rrsets: Iterable[dns.rrset.RRset]) -> List[dns.rrset.RRset]:
    rrsets = list(rrsets)
    result = list(rrsets)
    for rrset in rrsets:
        if rrset.rdtype != dns.rdatatype.CNAME:
            continue
        for rdata in rrset:
            inner = dns.message.make_query(rdata.target, dns.rdatatype.A, dns.rdataclass.IN)
            inner.flags = 0
            inner.id = 0
            reply = _ask(handler, inner)
            if reply is not None:
                result.extend(_resolve(handler, reply.answer))
    return result


def resolver(handler: Handler) -> Handler:
    """Return a handler that follows CNAME answers of the given handler.

    Requests without the recursion desired flag are passed on unchanged.
    """

    def handle(writer: ResponseWriter, request: dns.message.Message) -> None:
        if not request.flags & dns.flags.RD:
            handler(writer, request)
            return

        response = dns.message.make_response(request, recursion_available=True)
        response.use_edns(False)
        response.flags |= request.flags & dns.flags.CD

        reply = _ask(handler, request)
        if reply is None:
            with contextlib.suppress(Exception):
                writer.write_msg(response)
            return

        response.answer.extend(_resolve(handler, reply.answer))

        try:
            writer.write_msg(response)
        except Exception:
            writer.close()

    return handle