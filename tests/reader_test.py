import asyncio
import codecs

from pytest import fixture, mark, raises

from range_readers import (
    ArrayFileReader,
    LoadCallbacks,
    ReaderState,
    RemoteFileReader,
    UnsupportedLocatorError,
    open_reader,
    select_reader_class,
)
from range_readers.reader import DecodedString


def make_reader(data: bytes) -> ArrayFileReader:
    reader = ArrayFileReader(data)
    asyncio.run(reader.initialize())
    return reader


@fixture
def id3_reader():
    # ID3v2.4 header: "ID3", version 4.0, flags 0x80, syncsafe size 0x00 0x00 0x02 0x01
    return make_reader(b"ID3\x04\x00\x80\x00\x00\x02\x01")


def test_array_reader_initialize(id3_reader):
    assert id3_reader.state is ReaderState.READY
    assert id3_reader.size == 10


def test_array_reader_size_unknown_before_init():
    assert ArrayFileReader(b"abc").size is None


def test_array_reader_load_range(id3_reader):
    called = []
    asyncio.run(id3_reader.load_range((0, 3), LoadCallbacks(lambda: called.append(1))))
    assert called == [1]


def test_array_reader_out_of_bounds(id3_reader):
    with raises(IndexError, match="Offset 10 out of bounds"):
        id3_reader.get_byte_at(10)


def test_array_reader_rejects_str():
    with raises(TypeError):
        ArrayFileReader("abc")


def test_string_at(id3_reader):
    assert id3_reader.get_string_at(0, 3) == "ID3"


def test_bit_set(id3_reader):
    assert id3_reader.is_bit_set_at(5, 7) is True
    assert id3_reader.is_bit_set_at(5, 6) is False


def test_synchsafe_integer(id3_reader):
    assert id3_reader.get_synchsafe_integer32_at(6) == (2 << 7) | 1


@mark.parametrize(
    "method,data,big_endian,expected",
    [
        ("get_short_at", b"\x01\x02", True, 0x0102),
        ("get_short_at", b"\x01\x02", False, 0x0201),
        ("get_short_at", b"\xff\xff", True, -1),
        ("get_integer24_at", b"\x01\x02\x03", True, 0x010203),
        ("get_integer24_at", b"\xff\xff\xff", False, 0xFFFFFF),
        ("get_long_at", b"\x00\x00\x01\x00", True, 256),
        ("get_long_at", b"\x00\x00\x01\x00", False, 0x00010000),
        ("get_long_at", b"\xfe\xff\xff\xff", False, -2),
    ],
)
def test_integers(method, data, big_endian, expected):
    reader = make_reader(data)
    assert getattr(reader, method)(0, big_endian=big_endian) == expected


@mark.parametrize(
    "data,charset,expected",
    [
        (b"Title\x00junk", "iso-8859-1", DecodedString("Title", 6)),
        (b"Caf\xe9", None, DecodedString("Café", 4)),
        (codecs.BOM_UTF8 + "Café".encode() + b"\x00", "utf-8", DecodedString("Café", 9)),
        (codecs.BOM_UTF16_LE + "Hi".encode("utf-16le") + b"\x00\x00", "utf-16", DecodedString("Hi", 8)),
        (codecs.BOM_UTF16_BE + "Hi".encode("utf-16be"), "utf-16", DecodedString("Hi", 6)),
        ("Hi".encode("utf-16be") + b"\x00\x00xx", "utf-16", DecodedString("Hi", 6)),
        ("Hi".encode("utf-16le") + b"\x00\x00", "utf-16le", DecodedString("Hi", 6)),
    ],
)
def test_string_with_charset(data, charset, expected):
    reader = make_reader(data)
    decoded = reader.get_string_with_charset_at(0, len(data), charset)
    assert decoded == expected
    assert str(decoded) == expected.text


def test_unsupported_charset():
    with raises(ValueError, match="Unsupported charset"):
        make_reader(b"abc").get_string_with_charset_at(0, 3, "koi8-r")


@mark.parametrize(
    "locator,expected",
    [
        ("https://example.com/a.mp3", RemoteFileReader),
        (b"ID3", ArrayFileReader),
        (bytearray(b"ID3"), ArrayFileReader),
    ],
)
def test_select_reader_class(locator, expected):
    assert select_reader_class(locator) is expected


@mark.parametrize("locator", ["/tmp/a.mp3", 42])
def test_select_reader_class_none_match(locator):
    with raises(UnsupportedLocatorError, match="No reader for"):
        select_reader_class(locator)


def test_select_reader_order():
    """The first variant to accept the locator is chosen"""
    readers = (ArrayFileReader, RemoteFileReader)
    assert select_reader_class(b"x", readers=readers) is ArrayFileReader


def test_open_reader():
    reader = open_reader(b"ID3")
    assert isinstance(reader, ArrayFileReader)
    assert reader.state is ReaderState.UNINITIALIZED
