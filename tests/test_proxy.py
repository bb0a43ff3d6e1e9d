import socket
import threading
import time

import dns.message
import dns.rrset
import pytest

from newdns.event import Event
from newdns.proxy import proxy
from newdns.query import query
from newdns.run import ResponseWriter, run


def _free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def _upstream(writer, request):
    response = dns.message.make_response(request)
    response.answer.append(
        dns.rrset.from_text(request.question[0].name, 60, "IN", "A", "10.0.0.1")
    )
    writer.write_msg(response)


@pytest.fixture
def upstream_addr():
    addr = f"127.0.0.1:{_free_port()}"
    stop = threading.Event()
    thread = threading.Thread(target=run, args=(addr, _upstream, None, stop), daemon=True)
    thread.start()
    for _ in range(100):
        try:
            query("tcp", addr, "example.com.", "A")
            break
        except Exception:
            time.sleep(0.05)
    yield addr
    stop.set()
    thread.join(5)


def _recorder():
    events = []

    def logger(event, msg, error, reason):
        events.append((event, msg, error))

    return events, logger


def _request():
    request = dns.message.make_query("example.com.", "A")
    return dns.message.from_wire(request.to_wire())


def test_proxy_forwards_request(upstream_addr):
    events, logger = _recorder()
    request = _request()
    writer = ResponseWriter()

    proxy(upstream_addr, logger)(writer, request)

    assert len(writer.messages) == 1
    response = writer.messages[0]
    assert response.id == request.id
    rows = [(r.name.to_text(), r.ttl, rd.to_text()) for r in response.answer for rd in r]
    assert rows == [("example.com.", 60, "10.0.0.1")]
    assert [event for event, _, _ in events] == [Event.PROXY_REQUEST, Event.PROXY_RESPONSE]
    assert events[0][1] is request
    assert events[1][1] is response


def test_proxy_without_logger(upstream_addr):
    writer = ResponseWriter()
    proxy(upstream_addr)(writer, _request())
    assert len(writer.messages) == 1
    assert writer.closed is False


def test_proxy_error_closes_writer():
    events, logger = _recorder()
    writer = ResponseWriter()

    proxy("nowhere", logger)(writer, _request())

    assert writer.messages == []
    assert writer.closed is True
    assert [event for event, _, _ in events] == [Event.PROXY_REQUEST, Event.PROXY_ERROR]
    assert isinstance(events[1][2], ValueError)


def test_proxy_network_error(upstream_addr):
    events, logger = _recorder()
    writer = ResponseWriter()
    writer.close()
    request = _request()

    proxy(upstream_addr, logger)(writer, request)

    assert writer.messages == []
    assert writer.closed is True
    assert [event for event, _, _ in events] == [
        Event.PROXY_REQUEST,
        Event.PROXY_RESPONSE,
        Event.NETWORK_ERROR,
    ]
    assert events[0][1] is request
    assert events[1][1].id == request.id
    rows = [(r.name.to_text(), r.ttl, rd.to_text()) for r in events[1][1].answer for rd in r]
    assert rows == [("example.com.", 60, "10.0.0.1")]
    assert isinstance(events[2][2], ConnectionError)