"""Authoritative DNS zones."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .record import ValidationError
from .recordset import Set
from .rtype import Type
from .tools import email_to_domain, in_zone, is_domain, normalize_domain, trim_zone

Duration = Union[timedelta, int, float]
ZoneHandler = Callable[[str], Optional[Iterable[Set]]]

DEFAULT_REFRESH = timedelta(hours=6)
DEFAULT_RETRY = timedelta(hours=1)
DEFAULT_EXPIRE = timedelta(hours=72)
DEFAULT_SOA_TTL = timedelta(minutes=15)
DEFAULT_NS_TTL = timedelta(hours=48)
DEFAULT_MIN_TTL = timedelta(minutes=5)


def _duration(value: Duration) -> timedelta:
    """Accept a timedelta or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    return timedelta(seconds=value)


def _format_seconds(value: timedelta) -> str:
    seconds = value.total_seconds()
    return str(int(seconds)) if seconds.is_integer() else str(seconds)


@dataclass
class Zone:
    """A single authoritative DNS zone.

    Durations may be given as timedelta or as a number of seconds; validate()
    turns them into timedelta and fills in the documented defaults.
    """

    #: The FQDN of the zone, e.g. "example.com.".
    name: str = ""
    #: The FQDN of the master name server responsible for this zone.
    master_name_server: str = ""
    #: The FQDNs of all authoritative name servers for this zone.
    all_name_servers: List[str] = field(default_factory=list)
    #: The administrator's e-mail address; defaults to "hostmaster@<name>".
    admin_email: str = ""
    #: The refresh interval; defaults to 6h.
    refresh: Duration = timedelta(0)
    #: The retry interval; defaults to 1h.
    retry: Duration = timedelta(0)
    #: The expiration interval; defaults to 72h.
    expire: Duration = timedelta(0)
    #: The TTL of the SOA record; defaults to 15m.
    soa_ttl: Duration = timedelta(0)
    #: The TTL of NS records; defaults to 48h.
    ns_ttl: Duration = timedelta(0)
    #: The minimum TTL of all records; defaults to 5m.
    min_ttl: Duration = timedelta(0)
    #: Returns the sets for a name relative to the zone ("" is the apex).
    handler: Optional[ZoneHandler] = None

    def validate(self) -> None:
        """Raise ValidationError if the zone is invalid and fill in defaults."""
        if not is_domain(self.name, True):
            raise ValidationError(f"name not fully qualified: {self.name}")

        if not is_domain(self.master_name_server, True):
            raise ValidationError(f"master server not full qualified: {self.master_name_server}")

        if not self.all_name_servers:
            raise ValidationError("missing name servers")

        for server in self.all_name_servers:
            if not is_domain(server, True):
                raise ValidationError(f"name server not fully qualified: {server}")

        if self.master_name_server not in self.all_name_servers:
            raise ValidationError(
                f"master name server not listed as name server: {self.master_name_server}"
            )

        if not self.admin_email:
            self.admin_email = f"hostmaster@{self.name}"

        try:
            converted = email_to_domain(self.admin_email)
        except ValueError:
            converted = ""
        if not is_domain(converted, True):
            raise ValidationError(
                f"admin email cannot be converted to a domain name: {self.admin_email}"
            )

        self.refresh = _duration(self.refresh) or DEFAULT_REFRESH
        self.retry = _duration(self.retry) or DEFAULT_RETRY
        self.expire = _duration(self.expire) or DEFAULT_EXPIRE
        self.soa_ttl = _duration(self.soa_ttl) or DEFAULT_SOA_TTL
        self.ns_ttl = _duration(self.ns_ttl) or DEFAULT_NS_TTL
        self.min_ttl = _duration(self.min_ttl) or DEFAULT_MIN_TTL

        if self.retry >= self.refresh:
            raise ValidationError(f"retry must be less than refresh: {_format_seconds(self.retry)}")

        if self.expire < self.refresh + self.retry:
            raise ValidationError(
                "expire must be bigger than the sum of refresh and retry: "
                f"{_format_seconds(self.expire)}"
            )

    def _sets_for(self, name: str) -> List[Set]:
        if self.handler is None:
            return []
        try:
            sets = self.handler(trim_zone(self.name, name))
        except Exception as exc:
            raise LookupError(f"zone handler error: {exc}") from exc
        return list(sets or [])

    def lookup(self, name: str, *args: Union[Type, int]) -> Tuple[List[Set], bool]:
        """Look up the sets of the given types for a name in the zone.

        Returns the matching sets (CNAME sets leading to them included) and,
        when nothing matched, whether other sets exist for the name. Raises
        ValidationError for invalid names or sets and LookupError if the
        zone handler fails.
        """
        needle = {int(typ) for typ in args}

        if not is_domain(name, True):
            raise ValidationError(f"invalid name: {name}")

        name = normalize_domain(name, lower=True)

        if not in_zone(self.name, name):
            raise ValidationError(f"name does not belong to zone: {name}")

        result: List[Set] = []
        first = True
        while True:
            sets = self._sets_for(name)

            if first and not sets:
                return [], False
            first = False

            for record_set in sets:
                try:
                    record_set.validate()
                except ValidationError as exc:
                    raise ValidationError(f"invalid set: {exc}") from exc

                if not in_zone(self.name, record_set.name):
                    raise ValidationError(f"set does not belong to zone: {record_set.name}")

            counters = Counter(int(record_set.type) for record_set in sets)
            if any(count > 1 for count in counters.values()):
                raise ValidationError("multiple sets for same type")

            has_cname = counters[Type.CNAME] > 0

            if has_cname and name == self.name:
                raise ValidationError(f"invalid CNAME set at apex: {name}")

            if has_cname and len(sets) > 1:
                raise ValidationError(f"other sets with CNAME set: {name}")

            if has_cname and Type.CNAME not in needle:
                result.append(sets[0])
                address = normalize_domain(sets[0].records[0].address, lower=True)
                if in_zone(self.name, address):
                    name = address
                    continue
                return result, False

            match = next((s for s in sets if int(s.type) in needle), None)
            if match is not None:
                result.append(match)

            if not result:
                return [], True

            return result, False