"""An authoritative DNS server backed by zone callbacks."""

from __future__ import annotations

import dataclasses
import ipaddress
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import dns.flags
import dns.message
import dns.name
import dns.rcode
import dns.rdata
import dns.rdataclass
import dns.rdatatype
import dns.rdtypes.ANY.CNAME
import dns.rdtypes.ANY.MX
import dns.rdtypes.ANY.NS
import dns.rdtypes.ANY.SOA
import dns.rdtypes.ANY.TXT
import dns.rdtypes.IN.A
import dns.rdtypes.IN.AAAA
import dns.rdtypes.IN.SRV
import dns.rrset

from .event import Event, Logger, emit
from .proxy import proxy
from .record import Record, ValidationError
from .recordset import Set as RecordSet
from .rtype import Type
from .run import ResponseWriter, ServeMux, accept
from .run import run as serve
from .tools import email_to_domain, in_zone, normalize_domain, to_seconds, transfer_case
from .zone import Zone

_IN = dns.rdataclass.IN
_DEFAULT_BUFFER_SIZE = 1220
_DEFAULT_UDP_SIZE = 512


@dataclass
class Config:
    """Configuration of a DNS server."""

    #: The buffer size announced when a client uses EDNS; defaults to 1220.
    buffer_size: int = _DEFAULT_BUFFER_SIZE
    #: The zones handled by the server; defaults to ["."].
    zones: List[str] = field(default_factory=list)
    #: Returns the zone for a name, or None; the zone must not be altered later.
    handler: Optional[Callable[[str], Optional[Zone]]] = None
    #: The server requests for other zones are forwarded to, if any.
    fallback: str = ""
    #: Called with events about the processing of requests.
    logger: Optional[Logger] = None


def _name(text: str) -> dns.name.Name:
    return dns.name.from_text(text)


def _rdata(typ: Type, record: Record) -> Optional[dns.rdata.Rdata]:
    if typ == Type.A:
        ip = ipaddress.ip_address(record.address)
        if ip.version == 6:
            ip = ip.ipv4_mapped
        return dns.rdtypes.IN.A.A(_IN, dns.rdatatype.A, str(ip))
    if typ == Type.AAAA:
        ip = ipaddress.ip_address(record.address)
        if ip.version == 4:
            ip = ipaddress.IPv6Address(f"::ffff:{ip}")
        return dns.rdtypes.IN.AAAA.AAAA(_IN, dns.rdatatype.AAAA, str(ip))
    if typ == Type.CNAME:
        return dns.rdtypes.ANY.CNAME.CNAME(_IN, dns.rdatatype.CNAME, _name(record.address))
    if typ == Type.MX:
        return dns.rdtypes.ANY.MX.MX(_IN, dns.rdatatype.MX, record.priority, _name(record.address))
    if typ == Type.TXT:
        return dns.rdtypes.ANY.TXT.TXT(_IN, dns.rdatatype.TXT, list(record.data))
    if typ == Type.NS:
        return dns.rdtypes.ANY.NS.NS(_IN, dns.rdatatype.NS, _name(record.address))
    if typ == Type.SRV:
        return dns.rdtypes.IN.SRV.SRV(
            _IN,
            dns.rdatatype.SRV,
            record.priority,
            record.weight,
            record.port,
            _name(record.address),
        )
    return None


def _soa_rrset(zone: Zone) -> dns.rrset.RRset:
    rrset = dns.rrset.RRset(_name(zone.name), _IN, dns.rdatatype.SOA)
    soa = dns.rdtypes.ANY.SOA.SOA(
        _IN,
        dns.rdatatype.SOA,
        _name(zone.master_name_server),
        _name(email_to_domain(zone.admin_email)),
        1,
        to_seconds(zone.refresh),
        to_seconds(zone.retry),
        to_seconds(zone.expire),
        to_seconds(zone.min_ttl),
    )
    rrset.add(soa, to_seconds(zone.soa_ttl))
    return rrset


def _ns_rrset(owner: str, zone: Zone) -> dns.rrset.RRset:
    rrset = dns.rrset.RRset(_name(owner), _IN, dns.rdatatype.NS)
    ttl = to_seconds(zone.ns_ttl)
    for server in zone.all_name_servers:
        rrset.add(dns.rdtypes.ANY.NS.NS(_IN, dns.rdatatype.NS, _name(server)), ttl)
    return rrset


class Server:
    """An authoritative DNS server serving zones over UDP and TCP."""

    def __init__(self, config: Config) -> None:
        config = dataclasses.replace(config, zones=list(config.zones))
        if config.buffer_size <= 0:
            config.buffer_size = _DEFAULT_BUFFER_SIZE
        if not config.zones:
            config.zones = ["."]
        if config.fallback and "." in config.zones:
            raise ValueError('fallback conflicts with the match all pattern "." (default)')
        self.config = config
        self._close = threading.Event()

    def run(self, addr: str) -> None:
        """Serve on the address over UDP and TCP until closed.

        Raises the first error of a listener.
        """
        mux = ServeMux()
        for zone in self.config.zones:
            mux.handle(zone, self)
        if self.config.fallback:
            mux.handle(".", proxy(self.config.fallback, self.config.logger))
        serve(addr, mux, accept(self.config.logger), self._close)

    def close(self) -> None:
        """Stop a running server."""
        self._close.set()

    def __call__(self, writer: ResponseWriter, request: dns.message.Message) -> None:
        self.serve_dns(writer, request)

    def serve_dns(self, writer: ResponseWriter, request: dns.message.Message) -> None:
        """Answer a single request."""
        logger = self.config.logger
        question = request.question[0]

        if question.rdclass != _IN:
            emit(
                logger,
                Event.IGNORED,
                reason=f"unsupported class: {dns.rdataclass.to_text(question.rdclass)}",
            )
            return

        emit(logger, Event.REQUEST, request)
        try:
            self._answer(writer, request, question)
        finally:
            emit(logger, Event.FINISH)

    def _prepare(self, request: dns.message.Message) -> dns.message.Message:
        response = dns.message.make_response(request)
        response.use_edns(False)
        response.flags |= request.flags & dns.flags.CD
        response.flags |= dns.flags.AA
        return response

    def _answer(
        self,
        writer: ResponseWriter,
        request: dns.message.Message,
        question: dns.rrset.RRset,
    ) -> None:
        logger = self.config.logger
        response = self._prepare(request)

        if request.edns >= 0:
            response.use_edns(0, payload=self.config.buffer_size)
            if request.edns != 0:
                emit(logger, Event.REFUSED, reason=f"unsupported EDNS version: {request.edns}")
                self._write_error(writer, request, response, None, dns.rcode.BADVERS)
                return

        if question.rdtype == dns.rdatatype.ANY:
            emit(logger, Event.REFUSED, reason="unsupported type: ANY")
            self._write_error(writer, request, response, None, dns.rcode.NOTIMP)
            return

        qname = question.name.to_text()
        name = normalize_domain(qname, lower=True)

        try:
            zone = self.config.handler(name) if self.config.handler is not None else None
        except Exception as exc:
            error = RuntimeError(f"server handler error: {exc}")
            error.__cause__ = exc
            emit(logger, Event.BACKEND_ERROR, error=error)
            self._write_error(writer, request, response, None, dns.rcode.SERVFAIL)
            return

        if zone is None:
            emit(logger, Event.REFUSED, reason="no zone")
            response.flags &= ~dns.flags.AA
            self._write_error(writer, request, response, None, dns.rcode.REFUSED)
            return

        try:
            zone.validate()
        except ValidationError as exc:
            emit(logger, Event.BACKEND_ERROR, error=exc)
            self._write_error(writer, request, response, None, dns.rcode.SERVFAIL)
            return

        if question.rdtype == dns.rdatatype.SOA and name == zone.name:
            response.answer.append(_soa_rrset(zone))
            response.authority.append(_ns_rrset(zone.name, zone))
            self._write_message(writer, request, response)
            return

        if question.rdtype == dns.rdatatype.NS and name == zone.name:
            response.answer.append(_ns_rrset(zone.name, zone))
            self._write_message(writer, request, response)
            return

        typ = Type(int(question.rdtype))

        try:
            answer, exists = zone.lookup(name, typ)
        except (ValidationError, LookupError) as exc:
            emit(logger, Event.BACKEND_ERROR, error=exc)
            self._write_error(writer, request, response, None, dns.rcode.SERVFAIL)
            return

        if not answer:
            code = dns.rcode.NOERROR if exists else dns.rcode.NXDOMAIN
            self._write_error(writer, request, response, zone, code)
            return

        extra: List[RecordSet] = []
        for record_set in answer:
            if record_set.type not in (Type.MX, Type.SRV):
                continue
            for record in record_set.records:
                if not in_zone(zone.name, record.address):
                    continue
                try:
                    found, _ = zone.lookup(record.address, Type.A, Type.AAAA)
                except (ValidationError, LookupError) as exc:
                    emit(logger, Event.BACKEND_ERROR, error=exc)
                    self._write_error(writer, request, response, None, dns.rcode.SERVFAIL)
                    return
                extra.extend(found)

        response.answer.extend(self._convert(qname, zone, s) for s in answer)
        response.additional.extend(self._convert(qname, zone, s) for s in extra)
        response.authority.append(_ns_rrset(transfer_case(qname, zone.name), zone))

        if typ == Type.NS:
            response.authority = response.answer
            response.answer = []
            # delegations to other servers are not authoritative
            response.flags &= ~dns.flags.AA

        self._write_message(writer, request, response)

    def _convert(self, qname: str, zone: Zone, record_set: RecordSet) -> dns.rrset.RRset:
        typ = Type(int(record_set.type))
        owner = _name(transfer_case(qname, record_set.name))
        ttl = max(to_seconds(record_set.ttl), to_seconds(zone.min_ttl))
        rrset = dns.rrset.RRset(owner, _IN, int(typ))
        for record in record_set.records:
            rdata = _rdata(typ, record)
            if rdata is not None:
                rrset.add(rdata, ttl)
        return rrset

    def _write_error(
        self,
        writer: ResponseWriter,
        request: dns.message.Message,
        response: dns.message.Message,
        zone: Optional[Zone],
        code: int,
    ) -> None:
        response.set_rcode(code)
        if zone is not None:
            response.authority.append(_soa_rrset(zone))
        self._write_message(writer, request, response)

    def _write_message(
        self,
        writer: ResponseWriter,
        request: dns.message.Message,
        response: dns.message.Message,
    ) -> None:
        buffer = request.payload if request.edns >= 0 else _DEFAULT_UDP_SIZE

        if writer.network == "udp" and len(response.to_wire()) > buffer:
            response.flags |= dns.flags.TC
            response.answer = []
            response.authority = []
            response.additional = []

        try:
            writer.write_msg(response)
        except Exception as exc:
            emit(self.config.logger, Event.NETWORK_ERROR, error=exc)
            writer.close()
            return

        emit(self.config.logger, Event.RESPONSE, response)