import dns.flags
import dns.message
import dns.rcode
import dns.rdatatype
import pytest

from newdns.example import build_server, build_zone, main
from newdns.rtype import Type
from newdns.run import ResponseWriter


def test_zone_is_valid_and_gets_defaults():
    zone = build_zone()
    zone.validate()
    assert zone.admin_email == "hostmaster@example.com."
    assert zone.master_name_server in zone.all_name_servers


def test_zone_apex_lookup():
    zone = build_zone()
    zone.validate()
    sets, exists = zone.lookup("example.com.", Type.A)
    assert exists is False
    assert [r.address for r in sets[0].records] == ["1.2.3.4"]
    sets, _ = zone.lookup("example.com.", Type.AAAA)
    assert [r.address for r in sets[0].records] == ["1:2:3:4::"]


def test_zone_cname_lookup():
    zone = build_zone()
    zone.validate()
    sets, exists = zone.lookup("foo.example.com.", Type.A)
    assert exists is False
    assert len(sets) == 1
    assert sets[0].type == Type.CNAME
    assert sets[0].records[0].address == "bar.example.com."


def test_zone_missing_name():
    zone = build_zone()
    zone.validate()
    assert zone.lookup("missing.example.com.", Type.A) == ([], False)


def test_server_answers_apex(capsys):
    writer = ResponseWriter()
    build_server()(writer, dns.message.make_query("example.com.", "A"))
    response = writer.messages[0]
    assert response.flags & dns.flags.AA
    assert response.answer[0].rdtype == dns.rdatatype.A
    assert response.answer[0][0].address == "1.2.3.4"
    assert "Request" in capsys.readouterr().out


def test_server_refuses_other_zones():
    writer = ResponseWriter()
    build_server()(writer, dns.message.make_query("foo.example.org.", "A"))
    response = writer.messages[0]
    assert response.rcode() == dns.rcode.REFUSED
    assert not response.flags & dns.flags.AA


def test_main_rejects_invalid_address(capsys):
    with pytest.raises(ValueError):
        main(["--addr", "nope"])
    assert "dig example.com" in capsys.readouterr().out