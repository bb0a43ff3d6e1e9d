# newdns

`newdns` is a small framework for writing authoritative DNS servers in
Python. Each zone is a `Zone` holding a callback that returns record sets
for a name; the server handles the protocol side: SOA and NS answers,
in-zone CNAME chasing, additional A/AAAA records for in-zone MX and SRV
targets, EDNS (version 0 only), case preservation of the queried name,
negative answers with the zone's SOA, and truncation of UDP responses that
exceed the client's buffer.

## Installation

```
pip install newdns
```

The only runtime dependency is `dnspython`.

## Concepts

- `newdns.record.Record` holds one record: an `address` (A, AAAA, CNAME,
  MX, NS, SRV), a `priority` (MX, SRV), a `weight` and `port` (SRV) or
  `data`, a list of strings (TXT). `Record.validate(typ)` raises
  `ValidationError` for invalid content.
- `newdns.recordset.Set` groups the records of one fully qualified `name`
  and one `type`, with a `ttl` (a `timedelta`, five minutes when left at
  zero). `Set.validate()` checks the set and fills in the default TTL.
- `newdns.zone.Zone` describes an authoritative zone: `name`,
  `master_name_server`, `all_name_servers`, `admin_email` (default
  `hostmaster@<name>`), the timers `refresh`, `retry`, `expire`,
  `soa_ttl`, `ns_ttl` and `min_ttl` (as `timedelta` or seconds), and a
  `handler` that receives a name relative to the zone (`""` for the apex)
  and returns a list of `Set` objects. `Zone.lookup(name, *types)` returns
  the matching sets and whether other sets exist for the name.
- `newdns.rtype.Type` is the record type enum. Zones may serve `A`,
  `AAAA`, `CNAME`, `MX`, `TXT`, `NS` and `SRV`; queries for other types
  get an empty answer, and `ANY` queries are answered with NOTIMP.
- `newdns.server.Server` is configured with a `Config` whose `handler`
  picks the `Zone` for a queried name (or returns `None`, answered with
  REFUSED). `Config.buffer_size` is the EDNS buffer size announced to
  clients (default 1220).

## Example

```python
from newdns.record import Record
from newdns.recordset import Set
from newdns.rtype import Type
from newdns.server import Config, Server
from newdns.tools import in_zone
from newdns.zone import Zone


def records(name):
    if name == "":
        return [Set(name="example.com.", type=Type.A, records=[Record(address="1.2.3.4")])]
    if name == "foo":
        return [Set(name="foo.example.com.", type=Type.CNAME,
                    records=[Record(address="bar.example.com.")])]
    return []


zone = Zone(
    name="example.com.",
    master_name_server="ns1.example.com.",
    all_name_servers=["ns1.example.com.", "ns2.example.com."],
    handler=records,
)

server = Server(Config(handler=lambda name: zone if in_zone("example.com.", name) else None))
server.run(":1337")
```

`Server.run(addr)` serves UDP and TCP on the address until
`Server.close()` is called, and raises the first error of a listener.

Queries for zones the server does not own can be forwarded to another DNS
server by setting `Config.fallback` (for example `"1.1.1.1:53"`) together
with an explicit list of `Config.zones`. Combining a fallback with the
default zone list `["."]` raises `ValueError`.

## Helpers

- `newdns.query.query(proto, addr, name, typ, fn=None)` sends one query
  over `"udp"`, `"tcp"` or `"tcp-tls"` (optionally suffixed with `4` or `6`)
  with a one second timeout and returns the response with its id reset to
  zero. `fn` may modify the request before it is sent.
- `newdns.proxy.proxy(addr, logger=None)` returns a handler that forwards
  requests over UDP to another server.
- `newdns.resolver.resolver(handler)` wraps a handler so that, when
  recursion is desired, CNAME answers are followed by asking the same
  handler for the targets' A records.
- `newdns.run` holds the serving machinery: `run(addr, handler, accept,
  close)` serves any handler over UDP and TCP until the `threading.Event`
  `close` is set, `accept(logger)` admits only plain queries with exactly
  one question, `ServeMux` dispatches requests by zone, and
  `ResponseWriter` sends responses to the client.
- `newdns.tools` offers domain helpers: `is_domain`, `in_zone`,
  `trim_zone`, `normalize_domain`, `split_domain`, `transfer_case`,
  `email_to_domain` and `to_seconds`.

## Logging

Pass a `logger` callable in `Config`; it is called as
`logger(event, msg, error, reason)` with a `newdns.event.Event`:
`IGNORED`, `REQUEST`, `REFUSED`, `BACKEND_ERROR`, `NETWORK_ERROR`,
`RESPONSE`, `FINISH`, `PROXY_REQUEST`, `PROXY_RESPONSE` or `PROXY_ERROR`.

## Trying it out

A demonstration server for `example.com.` that prints every event can be
started with:

```
newdns-example
```

It listens on port 1337 by default (change it with `--addr HOST:PORT`)
and can then be queried with:

```
dig example.com @0.0.0.0 -p 1337
dig foo.example.com @0.0.0.0 -p 1337
```

## What it does not do

Records come only from the zone callbacks: there is no zone file parser
and no storage. Responses are not signed (no DNSSEC), zone transfers are
not offered, and the resolver is deliberately primitive: it only follows
CNAME records through the wrapped handler.

## Running the tests

```
pip install -e ".[test]"
pytest
```