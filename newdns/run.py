"""Running handlers behind UDP and TCP listeners."""

from __future__ import annotations

import enum
import functools
import queue
import socket
import socketserver
import struct
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

import dns.exception
import dns.flags
import dns.message
import dns.name
import dns.opcode
import dns.rcode
import dns.rdatatype

from .event import Event, Logger, emit

_HEADER_SIZE = 12
_TCP_IDLE_TIMEOUT = 8.0


class AcceptAction(enum.Enum):
    """What to do with an incoming message, decided from its header."""

    ACCEPT = "accept"
    REJECT = "reject"
    IGNORE = "ignore"
    REJECT_NOT_IMPLEMENTED = "reject-not-implemented"


class ResponseWriter:
    """Sends responses back to the client of a request.

    Without a send function written messages are kept in ``messages``.
    """

    def __init__(
        self,
        network: str = "tcp",
        remote_addr: Tuple[Any, ...] = ("0.0.0.0", 0),
        send: Optional[Callable[[bytes], Any]] = None,
        closer: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.network = network
        self.remote_addr = remote_addr
        self.messages: List[dns.message.Message] = []
        self.closed = False
        self._send = send
        self._closer = closer

    def write_msg(self, msg: dns.message.Message) -> None:
        """Send the message to the client."""
        if self.closed:
            raise ConnectionError("connection closed")
        if self._send is None:
            self.messages.append(msg)
        else:
            self._send(msg.to_wire())

    def close(self) -> None:
        """Close the connection to the client."""
        if not self.closed:
            self.closed = True
            if self._closer is not None:
                self._closer()


Handler = Callable[[ResponseWriter, dns.message.Message], None]
AcceptFunc = Callable[[bytes], AcceptAction]


class ServeMux:
    """Dispatches requests to the handler of the most specific zone."""

    def __init__(self) -> None:
        self._zones: Dict[dns.name.Name, Handler] = {}

    def handle(self, pattern: str, handler: Handler) -> None:
        """Register a handler for a zone."""
        if not pattern:
            raise ValueError("empty pattern")
        self._zones[dns.name.from_text(pattern)] = handler

    def _match(self, name: dns.name.Name, qtype: int) -> Optional[Handler]:
        found: Optional[Handler] = None
        while True:
            handler = self._zones.get(name)
            if handler is not None:
                # DS records live in the parent zone, so keep looking upwards
                if qtype != dns.rdatatype.DS or name == dns.name.root:
                    return handler
                found = handler
            if name == dns.name.root:
                return found
            name = name.parent()

    def __call__(self, writer: ResponseWriter, request: dns.message.Message) -> None:
        handler = None
        if request.question:
            handler = self._match(request.question[0].name, request.question[0].rdtype)
        if handler is None:
            response = dns.message.make_response(request)
            response.use_edns(False)
            response.set_rcode(dns.rcode.REFUSED)
            writer.write_msg(response)
            return
        handler(writer, request)


def accept(logger: Optional[Logger] = None) -> AcceptFunc:
    """Return an accept function that only admits normal queries."""

    def check(header: bytes) -> AcceptAction:
        _, bits, qdcount = struct.unpack_from("!3H", header)
        if bits & (1 << 15):
            reason = "not a request"
        elif (bits >> 11) & 0xF != dns.opcode.QUERY:
            reason = "not a query"
        elif qdcount != 1:
            reason = f"invalid question count: {qdcount}"
        else:
            return AcceptAction.ACCEPT
        emit(logger, Event.IGNORED, reason=reason)
        return AcceptAction.IGNORE

    return check


def _header_reply(header: bytes, rcode: int) -> dns.message.Message:
    ident, bits = struct.unpack_from("!2H", header)
    reply = dns.message.Message(id=ident)
    reply.flags = dns.flags.QR | (bits & 0x7800) | (bits & dns.flags.RD)
    reply.set_rcode(rcode)
    return reply


_REJECT_CODES = {
    AcceptAction.REJECT: dns.rcode.FORMERR,
    AcceptAction.REJECT_NOT_IMPLEMENTED: dns.rcode.NOTIMP,
}


def _dispatch(
    wire: bytes,
    writer: ResponseWriter,
    handler: Handler,
    accept_func: Optional[AcceptFunc],
) -> None:
    if len(wire) < _HEADER_SIZE:
        return
    header = wire[:_HEADER_SIZE]
    action = accept_func(header) if accept_func is not None else AcceptAction.ACCEPT
    if action is AcceptAction.IGNORE:
        return
    if action in _REJECT_CODES:
        writer.write_msg(_header_reply(header, _REJECT_CODES[action]))
        return
    try:
        request = dns.message.from_wire(wire)
    except (dns.exception.DNSException, ValueError):
        writer.write_msg(_header_reply(header, dns.rcode.FORMERR))
        return
    handler(writer, request)


def _split_addr(addr: str) -> Tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid address: {addr}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


def _recv_exactly(conn: socket.socket, size: int) -> Optional[bytes]:
    data = bytearray()
    while len(data) < size:
        chunk = conn.recv(size - len(data))
        if not chunk:
            return None
        data.extend(chunk)
    return bytes(data)


class _UDPRequestHandler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        wire, sock = self.request
        client = self.client_address
        writer = ResponseWriter("udp", client, send=lambda data: sock.sendto(data, client))
        self.server.dispatch(wire, writer)


class _TCPRequestHandler(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        conn: socket.socket = self.request
        conn.settimeout(_TCP_IDLE_TIMEOUT)

        def shutdown() -> None:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass

        writer = ResponseWriter(
            "tcp",
            self.client_address,
            send=lambda data: conn.sendall(struct.pack("!H", len(data)) + data),
            closer=shutdown,
        )
        while not writer.closed:
            try:
                prefix = _recv_exactly(conn, 2)
                wire = prefix and _recv_exactly(conn, struct.unpack("!H", prefix)[0])
            except OSError:
                return
            if wire is None or prefix is None:
                return
            self.server.dispatch(wire, writer)


def _make_server(base: type, handler: type, address, family, dispatch) -> socketserver.BaseServer:
    server_class = type(
        "_Server",
        (base,),
        {
            "daemon_threads": True,
            "block_on_close": False,
            "allow_reuse_address": base is socketserver.ThreadingTCPServer,
            "max_packet_size": 65535,
            "address_family": family,
        },
    )
    server = server_class(address, handler)
    server.dispatch = dispatch
    return server


def run(
    addr: str,
    handler: Handler,
    accept: Optional[AcceptFunc] = None,
    close: Optional[threading.Event] = None,
) -> None:
    """Serve the handler over UDP and TCP on the address until close is set.

    Raises the first error of a listener; returns once close is set.
    """
    host, port = _split_addr(addr)
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    dispatch = functools.partial(_dispatch, handler=handler, accept_func=accept)
    stop = close if close is not None else threading.Event()

    udp = _make_server(socketserver.ThreadingUDPServer, _UDPRequestHandler, (host, port), family, dispatch)
    try:
        tcp = _make_server(socketserver.ThreadingTCPServer, _TCPRequestHandler, (host, port), family, dispatch)
    except BaseException:
        udp.server_close()
        raise

    errors: "queue.Queue[BaseException]" = queue.Queue()

    def serve(server: socketserver.BaseServer) -> None:
        try:
            server.serve_forever(poll_interval=0.1)
        except BaseException as exc:  # reported to the caller of run
            errors.put(exc)

    for server in (udp, tcp):
        threading.Thread(target=serve, args=(server,), daemon=True).start()

    error: Optional[BaseException] = None
    while error is None and not stop.wait(0.05):
        try:
            error = errors.get_nowait()
        except queue.Empty:
            pass

    for server in (udp, tcp):
        server.shutdown()
        server.server_close()

    if error is not None:
        raise error