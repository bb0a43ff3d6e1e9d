"""A small demonstration server for the "example.com." zone."""

from __future__ import annotations

import argparse
from typing import List, Optional, Sequence

from .record import Record
from .recordset import Set
from .rtype import Type
from .server import Config, Server
from .tools import in_zone
from .zone import Zone

DEFAULT_ADDR = ":1337"


def _sets(name: str) -> Optional[List[Set]]:
    if name == "":
        return [
            Set(name="example.com.", type=Type.A, records=[Record(address="1.2.3.4")]),
            Set(name="example.com.", type=Type.AAAA, records=[Record(address="1:2:3:4::")]),
        ]
    if name == "foo":
        return [
            Set(
                name="foo.example.com.",
                type=Type.CNAME,
                records=[Record(address="bar.example.com.")],
            )
        ]
    return None


def build_zone() -> Zone:
    """Return the demonstration zone."""
    return Zone(
        name="example.com.",
        master_name_server="ns1.hostmaster.com.",
        all_name_servers=[
            "ns1.hostmaster.com.",
            "ns2.hostmaster.com.",
            "ns3.hostmaster.com.",
        ],
        handler=_sets,
    )


def _log(event, msg, error, reason) -> None:
    print(event, error, reason)


def build_server() -> Server:
    """Return a server answering for the demonstration zone and printing events."""
    zone = build_zone()

    def handler(name: str) -> Optional[Zone]:
        return zone if in_zone("example.com.", name) else None

    return Server(Config(handler=handler, logger=_log))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the demonstration server until interrupted."""
    parser = argparse.ArgumentParser(description="Serve the example.com. zone.")
    parser.add_argument("--addr", default=DEFAULT_ADDR, help="address to listen on")
    args = parser.parse_args(argv)

    server = build_server()
    port = args.addr.rpartition(":")[2]
    print(f"Query apex: dig example.com @0.0.0.0 -p {port}")
    print(f"Query other: dig foo.example.com @0.0.0.0 -p {port}")

    try:
        server.run(args.addr)
    except KeyboardInterrupt:
        server.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())