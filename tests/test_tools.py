from datetime import timedelta

import pytest

from newdns.tools import (
    email_to_domain,
    in_zone,
    is_domain,
    normalize_domain,
    split_domain,
    to_seconds,
    transfer_case,
    trim_zone,
)


@pytest.mark.parametrize(
    "name, fqdn, expected",
    [
        ("example.com", False, True),
        ("example.com", True, False),
        ("example.com.", True, True),
        (" example.com.", True, True),
        ("", False, False),
        ("x", False, True),
        (".", False, True),
    ],
)
def test_is_domain(name, fqdn, expected):
    assert is_domain(name, fqdn) is expected


def test_is_domain_rejects_malformed_names():
    assert is_domain("foo..example.com.", True) is False
    assert is_domain(".example.com.", True) is False
    assert is_domain("a" * 64 + ".com.", True) is False
    assert is_domain("a" * 63 + ".com.", True) is True


def test_is_domain_escaped_final_dot_is_not_fqdn():
    assert is_domain("foo\\.", True) is False
    assert is_domain("foo\\\\.", True) is True


@pytest.mark.parametrize(
    "zone, name, expected",
    [
        ("example.com.", "foo.example.com.", True),
        ("example.com", "foo.example.com", True),
        ("example.com", "example.com", True),
        (".", "com", True),
        (".", ".", True),
        ("", ".", False),
        ("", "", False),
        ("foo.example.com", "example.com", False),
    ],
)
def test_in_zone(zone, name, expected):
    assert in_zone(zone, name) is expected


def test_in_zone_ignores_case():
    assert in_zone("example.com.", "Foo.EXAMPLE.com.") is True


@pytest.mark.parametrize(
    "zone, name, expected",
    [
        ("example.com.", "foo.example.com.", "foo"),
        ("example.com", "foo.example.com", "foo"),
        ("example.com", "example.com", ""),
        ("foo.example.com", "example.com", "example.com"),
    ],
)
def test_trim_zone(zone, name, expected):
    assert trim_zone(zone, name) == expected


@pytest.mark.parametrize(
    "name, lower, make_fqdn, remove_fqdn, expected",
    [
        ("", False, False, False, ""),
        ("", False, True, False, "."),
        (" foo", False, False, False, "foo"),
        ("foo ", False, False, False, "foo"),
        (" fOO ", True, False, False, "foo"),
        (" fOO ", True, True, False, "foo."),
        (" fOO. ", True, False, True, "foo"),
    ],
)
def test_normalize_domain(name, lower, make_fqdn, remove_fqdn, expected):
    assert normalize_domain(name, lower, make_fqdn, remove_fqdn) == expected


@pytest.mark.parametrize(
    "name, hierarchical, expected",
    [
        ("", False, []),
        (".", False, []),
        ("foo", False, ["foo"]),
        ("foo.bar", False, ["foo", "bar"]),
        ("", True, []),
        (".", True, []),
        ("foo", True, ["foo"]),
        ("foo.bar", True, ["foo.bar", "bar"]),
    ],
)
def test_split_domain(name, hierarchical, expected):
    assert split_domain(name, hierarchical) == expected


def test_split_domain_hierarchical_ends_with_last_label():
    parts = split_domain("a.b.c.example.com.", True)
    assert parts[0] == "a.b.c.example.com"
    assert parts[-1] == "com"
    assert all(longer.endswith(shorter) for longer, shorter in zip(parts, parts[1:]))


@pytest.mark.parametrize(
    "source, destination, expected",
    [
        ("example.com", "example.com", "example.com"),
        ("EXAmple.com", "example.com", "EXAmple.com"),
        ("FOO.com", "bar.com", "bar.com"),
        ("foo.EXAmple.com", "example.com", "EXAmple.com"),
        ("foo.EXAmple.com", "bar.example.com", "bar.example.com"),
    ],
)
def test_transfer_case(source, destination, expected):
    assert transfer_case(source, destination) == expected


def test_email_to_domain():
    assert email_to_domain("hostmaster@example.com") == "hostmaster.example.com."
    assert email_to_domain("hostmaster@example.com.") == "hostmaster.example.com."
    assert email_to_domain("first.last@example.com") == "first\\.last.example.com."


def test_email_to_domain_results_are_domains():
    assert is_domain(email_to_domain("first.last@example.com"), True) is True
    assert is_domain(email_to_domain("foo@bar..example.com"), True) is False


def test_email_to_domain_requires_at_sign():
    with pytest.raises(ValueError):
        email_to_domain("example.com")


def test_to_seconds():
    assert to_seconds(timedelta(minutes=5)) == 300
    assert to_seconds(timedelta(minutes=15)) == 900
    assert to_seconds(timedelta(hours=48)) == 172800
    assert to_seconds(timedelta(milliseconds=1)) == 1
    assert to_seconds(timedelta(0)) == 0