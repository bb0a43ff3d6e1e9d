import pytest

from newdns.record import Record, ValidationError
from newdns.rtype import Type

LONG_TEXT = (
    "z4e6ycRMp6MP3WvWQMxIAOXglxANbj3oB0xD8BffktO4eo3VCR0s6TyGHKixvarOFJU0fqNkXeFOeI7sTXH5X0iXZukfLgnGTxLXNC7Kk"
    "VFwtVFsh1P0IUNXtNBlOVWrVbxkS62ezbLpENNkiBwbkCvcTjwF2kyI0curAt9JhhJFb3AAq0q1iHWlJLn1KSrev9PIsY3alndDKjYTPxAo"
    "jxzGKdK3A7rWLJ8Uzb3Z5OhLwP7jTKqbWVUocJRFLYpL"
)


@pytest.mark.parametrize(
    "typ, record, error",
    [
        (Type.A, Record(address="foo"), "invalid IPv4 address: foo"),
        (Type.AAAA, Record(address="foo"), "invalid IPv6 address: foo"),
        (Type.A, Record(address="1:2:3:4::"), "invalid IPv4 address: 1:2:3:4::"),
        (Type.CNAME, Record(address="---"), "invalid domain name: ---"),
        (Type.CNAME, Record(address="foo.com"), "invalid domain name: foo.com"),
        (Type.MX, Record(address="foo.com"), "invalid domain name: foo.com"),
        (Type.TXT, Record(data=[]), "missing data"),
        (Type.TXT, Record(data=[LONG_TEXT]), "data too long"),
        (Type.NS, Record(address="foo.com"), "invalid domain name: foo.com"),
        (Type.SRV, Record(address="foo.com"), "invalid domain name: foo.com"),
        (Type.SRV, Record(address="foo.com.", priority=-1, weight=0, port=0), "invalid priority: -1"),
        (Type.SRV, Record(address="foo.com.", priority=0, weight=-1, port=0), "invalid weight: -1"),
        (Type.SRV, Record(address="foo.com.", priority=0, weight=0, port=-1), "invalid port: -1"),
    ],
)
def test_invalid_records(typ, record, error):
    with pytest.raises(ValidationError) as info:
        record.validate(typ)
    assert str(info.value) == error


@pytest.mark.parametrize(
    "typ, record",
    [
        (Type.A, Record(address="1.2.3.4")),
        (Type.AAAA, Record(address="1:2:3:4::")),
        (Type.CNAME, Record(address="foo.com.")),
        (Type.MX, Record(address="foo.com.")),
        (Type.TXT, Record(data=["foo"])),
        (Type.NS, Record(address="foo.com.")),
        (Type.SRV, Record(address="foo.com.", priority=0, weight=0, port=0)),
    ],
)
def test_valid_records(typ, record):
    assert record.validate(typ) is None


def test_txt_length_limit_is_255():
    assert Record(data=["a" * 255]).validate(Type.TXT) is None
    with pytest.raises(ValidationError, match="data too long"):
        Record(data=["ok", "a" * 256]).validate(Type.TXT)


def test_txt_limit_counts_long_source_text():
    assert Record(data=[LONG_TEXT[:-1]]).validate(Type.TXT) is None


def test_srv_upper_bounds():
    assert Record(address="foo.com.", priority=65535, weight=65535, port=65535).validate(Type.SRV) is None
    with pytest.raises(ValidationError) as info:
        Record(address="foo.com.", port=65536).validate(Type.SRV)
    assert str(info.value) == "invalid port: 65536"


def test_ipv4_mapped_address_is_accepted_for_a():
    assert Record(address="::ffff:1.2.3.4").validate(Type.A) is None


def test_scoped_ipv6_address_is_rejected():
    with pytest.raises(ValidationError):
        Record(address="fe80::1%eth0").validate(Type.AAAA)


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        Record(address="foo").validate(Type.A)