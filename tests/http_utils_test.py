from pytest import mark, raises
from ranges import Range

from range_readers.http_utils import (
    CACHE_BYPASS_HEADERS,
    byte_range_from_range_obj,
    detect_header_value,
    range_header,
    request_headers,
)


@mark.parametrize("start", [0])
@mark.parametrize("stop,expected", [(1, "0-0"), (11, "0-10"), (1024, "0-1023")])
def test_byte_range_to_string(start, stop, expected):
    rng = Range(start, stop)
    assert byte_range_from_range_obj(rng) == expected


def test_range_header_dict():
    assert range_header(Range(512, 1536)) == {"range": "bytes=512-1535"}


def test_request_headers_bypass_cache():
    assert request_headers() == CACHE_BYPASS_HEADERS
    headers = request_headers(Range(0, 2))
    assert headers["range"] == "bytes=0-1"
    assert headers["if-modified-since"] == "Sat, 01 Jan 1970 00:00:00 GMT"


@mark.parametrize("key", ["Content-Length", "content-length"])
def test_detect_header_value(key):
    assert detect_header_value({key: "42"}, "content-length") == "42"


def test_detect_header_missing():
    with raises(KeyError, match="HEAD response was missing 'content-length' header"):
        detect_header_value({}, "content-length", source="HEAD response")
