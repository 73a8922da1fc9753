import asyncio

import httpx
from pytest import fixture, mark, raises
from ranges import Range

from range_readers.http_utils import TransportError
from range_readers.transport import HttpTransport

from .data import EXAMPLE_BYTES, EXAMPLE_FILE_LENGTH, EXAMPLE_URL
from .share import FakeRangeServer, make_client


@fixture
def server():
    return FakeRangeServer()


@fixture
def transport(server):
    return HttpTransport(client=make_client(server))


def test_probe_size(server, transport):
    size = asyncio.run(transport.probe_size(EXAMPLE_URL))
    assert size == EXAMPLE_FILE_LENGTH
    (head,) = server.heads
    assert "range" not in head.headers
    assert head.headers["if-modified-since"] == "Sat, 01 Jan 1970 00:00:00 GMT"


def test_get_range(server, transport):
    data = asyncio.run(transport.get_range(EXAMPLE_URL, Range(100, 200)))
    assert data == EXAMPLE_BYTES[100:200]
    (get,) = server.gets
    assert get.headers["range"] == "bytes=100-199"
    assert get.headers["if-modified-since"] == "Sat, 01 Jan 1970 00:00:00 GMT"


def test_get_range_ignored_by_server(server, transport):
    server.ignore_ranges = True
    data = asyncio.run(transport.get_range(EXAMPLE_URL, Range(1024, 2048)))
    assert data == EXAMPLE_BYTES[1024:2048]


@mark.parametrize("status", [404, 416, 500])
def test_error_status(transport, server, status):
    server.status_override = status
    with raises(TransportError, match=f"got HTTP {status}") as exc_info:
        asyncio.run(transport.get_range(EXAMPLE_URL, Range(0, 10)))
    assert exc_info.value.status_code == status
    assert exc_info.value.response.status_code == status


def test_network_error():
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    transport = HttpTransport(client=client)
    with raises(TransportError, match="HEAD .* failed") as exc_info:
        asyncio.run(transport.probe_size(EXAMPLE_URL))
    assert exc_info.value.status_code is None


def test_unreadable_content_length():
    def respond(request):
        return httpx.Response(200, headers={"content-length": "lots"})

    transport = HttpTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(respond)))
    with raises(TransportError, match="invalid literal"):
        asyncio.run(transport.probe_size(EXAMPLE_URL))


def test_sync_client_rejected():
    with raises(TypeError, match="is not async"):
        HttpTransport(client=httpx.Client())


def test_non_client_rejected():
    with raises(TypeError, match="is not a HTTPX client"):
        HttpTransport(client="not a client")


def test_owned_client_closed():
    transport = HttpTransport()
    asyncio.run(transport.aclose())
    assert transport.client.is_closed


def test_injected_client_left_open(transport):
    asyncio.run(transport.aclose())
    assert transport.client.is_closed is False


def test_redirect_followed(server):
    def handler(request):
        if request.url.host == "cdn.example.com":
            return server.handler(request)
        target = str(request.url).replace("example.com", "cdn.example.com")
        return httpx.Response(302, headers={"location": target})

    transport = HttpTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    assert asyncio.run(transport.probe_size(EXAMPLE_URL)) == EXAMPLE_FILE_LENGTH


@mark.parametrize(
    "headers,error_msg",
    [
        ({"content-range": "bytes 0-99/5000"}, "got content-range 'bytes 0-99/5000'"),
        ({}, "GET response was missing 'content-range' header"),
    ],
)
def test_partial_content_wrong_window(headers, error_msg):
    def respond(request):
        return httpx.Response(206, content=EXAMPLE_BYTES[:100], headers=headers)

    transport = HttpTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(respond)))
    with raises(TransportError, match=error_msg):
        asyncio.run(transport.get_range(EXAMPLE_URL, Range(100, 200)))
