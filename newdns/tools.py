"""Helpers for working with domain names."""

from __future__ import annotations

import math
from datetime import timedelta
from typing import List, Union

_MAX_NAME_LENGTH = 256
_MAX_LABEL_LENGTH = 63
_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


def _is_escaped(name: str, index: int) -> bool:
    """Return whether the character at index follows an odd run of backslashes."""
    before = name[:index]
    return (len(before) - len(before.rstrip("\\"))) % 2 == 1


def _is_fqdn(name: str) -> bool:
    return name.endswith(".") and not _is_escaped(name, len(name) - 1)


def _fqdn(name: str) -> str:
    return name if _is_fqdn(name) else name + "."


def _is_domain_name(name: str) -> bool:
    if not name:
        return False
    data = _fqdn(name).encode("utf-8")
    length = begin = i = 0
    was_dot = False
    while i < len(data):
        char = data[i]
        if char == 0x5C:  # backslash, either \DDD or \X
            if length + 1 > _MAX_NAME_LENGTH:
                return False
            skip = 3 if data[i + 1:i + 4].isdigit() and len(data[i + 1:i + 4]) == 3 else 1
            i += skip
            begin += skip
            was_dot = False
        elif char == 0x2E:
            if (i == 0 and len(data) > 1) or was_dot:
                return False
            was_dot = True
            if i - begin > _MAX_LABEL_LENGTH:
                return False
            length += 1 + i - begin
            if length > _MAX_NAME_LENGTH:
                return False
            begin = i + 1
        else:
            was_dot = False
        i += 1
    return True


def _label_offsets(name: str) -> List[int]:
    """Return the start offsets of the labels of a non-empty name."""
    if name == ".":
        return []
    return [0] + [
        i + 1 for i in range(len(name) - 1) if name[i] == "." and not _is_escaped(name, i)
    ]


def _segments(name: str) -> List[str]:
    """Return the labels of the name, each with its trailing dot if any."""
    offsets = _label_offsets(name)
    return [name[start:stop] for start, stop in zip(offsets, offsets[1:] + [len(name)])]


def _split_labels(name: str) -> List[str]:
    return [segment[:-1] if _is_fqdn(segment) else segment for segment in _segments(name)]


def _common_labels(first: str, second: str) -> int:
    if first == "." or second == ".":
        return 0
    shared = 0
    for left, right in zip(reversed(_segments(first)), reversed(_segments(second))):
        if left.translate(_ASCII_LOWER) != right.translate(_ASCII_LOWER):
            break
        shared += 1
    return shared


def is_domain(name: str, fqdn: bool = False) -> bool:
    """Return whether the name is a valid domain and, if requested, fully qualified."""
    return _is_domain_name(name) and (not fqdn or _is_fqdn(name))


def in_zone(zone: str, name: str) -> bool:
    """Return whether the name belongs to the zone; invalid domains never do."""
    if not is_domain(zone) or not is_domain(name):
        return False
    return _common_labels(zone, name) == len(_label_offsets(zone))


def trim_zone(zone: str, name: str) -> str:
    """Remove the zone from the end of the name."""
    if not in_zone(zone, name):
        return name
    labels = _split_labels(name)
    return ".".join(labels[: len(labels) - len(_label_offsets(zone))])


def normalize_domain(
    name: str,
    lower: bool = False,
    make_fqdn: bool = False,
    remove_fqdn: bool = False,
) -> str:
    """Strip surrounding space and optionally lowercase and (un)qualify the name."""
    name = name.strip()
    if lower:
        name = name.lower()
    if make_fqdn:
        name = _fqdn(name)
    if remove_fqdn and _is_fqdn(name):
        name = name[:-1]
    return name


def split_domain(name: str, hierarchical: bool = False) -> List[str]:
    """Split a domain in its labels, or in the chain of parents up to the root."""
    name = normalize_domain(name, remove_fqdn=True)
    if not name:
        return []
    if not hierarchical:
        return _split_labels(name)
    return [name[offset:] for offset in _label_offsets(name)]


def transfer_case(source: str, destination: str) -> str:
    """Take the letter case of the destination's part of the source name.

    For the source "foo.AAA.com." and destination "aaa.com" the result is
    "AAA.com". The source must be a child of or equal to the destination.
    """
    index = source.lower().find(destination.lower())
    return destination if index < 0 else source[index:]


def email_to_domain(email: str) -> str:
    """Convert an e-mail address into the domain form used in SOA records."""
    parts = email.split("@")
    if len(parts) < 2:
        raise ValueError(f"not an e-mail address: {email}")
    return _fqdn(parts[0].replace(".", "\\.") + "." + parts[1])


def to_seconds(duration: Union[timedelta, int, float]) -> int:
    """Return the duration in whole seconds, rounding up."""
    if isinstance(duration, timedelta):
        return -(-(duration // timedelta(microseconds=1)) // 1_000_000)
    return math.ceil(duration)