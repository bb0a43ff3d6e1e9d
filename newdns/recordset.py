"""A set of records sharing a name and a type."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Union

from .record import Record, ValidationError
from .rtype import Type
from .tools import is_domain

DEFAULT_TTL = timedelta(minutes=5)


@dataclass
class Set:
    """A set of records of one type for one fully qualified name."""

    #: The FQDN of the set.
    name: str = ""
    #: The type of the records.
    type: Union[Type, int] = 0
    #: The records in the set.
    records: List[Record] = field(default_factory=list)
    #: The TTL of the set; zero means five minutes.
    ttl: timedelta = timedelta(0)

    def validate(self) -> None:
        """Raise ValidationError if the set is invalid and fill in defaults."""
        if not is_domain(self.name, True):
            raise ValidationError(f"invalid name: {self.name}")

        try:
            typ = Type(self.type)
        except ValueError:
            typ = None
        if typ is None or not typ.supported():
            raise ValidationError(f"unsupported type: {int(self.type)}")
        self.type = typ

        if not self.records:
            raise ValidationError("missing records")

        if typ == Type.CNAME and len(self.records) > 1:
            raise ValidationError("multiple CNAME records")

        for record in self.records:
            try:
                record.validate(typ)
            except ValidationError as exc:
                raise ValidationError(f"invalid record: {exc}") from exc

        if typ != Type.TXT:
            for current, following in zip(self.records, self.records[1:]):
                if current.address == following.address:
                    raise ValidationError(f"duplicate address: {current.address}")

        if not self.ttl:
            self.ttl = DEFAULT_TTL