r""":mod:`range_readers.reader` exposes the abstract base class
:class:`MediaFileReader`, the interface through which tag parsers read a file
whatever its source (an in-memory buffer, a URL, ...).

Each variant implements a capability predicate
(:meth:`~MediaFileReader.can_read_file`), size discovery (``_init``),
:meth:`~MediaFileReader.load_range` and :meth:`~MediaFileReader.get_byte_at`.
Everything else (multi-byte integers, strings) is built on
:meth:`~MediaFileReader.get_byte_at` here, so it only works on loaded ranges.
"""

from __future__ import annotations

import codecs
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, NamedTuple

from ranges import Range

from .callbacks import LoadCallbacks, deliver
from .http_utils import TransportError
from .log_utils import log

__all__ = [
    "ReaderState",
    "UnsupportedLocatorError",
    "DecodedString",
    "MediaFileReader",
]


class ReaderState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class UnsupportedLocatorError(ValueError):
    """No reader variant can handle the given locator."""


class DecodedString(NamedTuple):
    text: str
    bytes_read: int  # including any terminator

    def __str__(self) -> str:
        return self.text


class MediaFileReader(ABC):
    """
    A randomly addressable view of a file, populated by loading ranges.

    Readers begin :attr:`~ReaderState.UNINITIALIZED`; :meth:`initialize` discovers
    the file size and moves the reader to :attr:`~ReaderState.READY`, or to
    :attr:`~ReaderState.FAILED` (from which it cannot recover) if that fails.
    """

    _size: int | None = None
    state: ReaderState = ReaderState.UNINITIALIZED

    @classmethod
    @abstractmethod
    def can_read_file(cls, locator: Any) -> bool:
        """Whether this variant can read ``locator`` (no I/O is performed)."""
        ...

    @abstractmethod
    async def _init(self) -> None:
        """Discover the file size and store it on ``_size``."""
        ...

    @abstractmethod
    async def load_range(
        self,
        byte_range: Range | tuple[int, int],
        callbacks: LoadCallbacks | None = None,
    ) -> None:
        ...

    @abstractmethod
    def get_byte_at(self, offset: int) -> int:
        ...

    @property
    def size(self) -> int | None:
        """The size of the file in bytes, or ``None`` until it is initialised."""
        return self._size

    @property
    def is_ready(self) -> bool:
        return self.state is ReaderState.READY

    async def initialize(self, callbacks: LoadCallbacks | None = None) -> None:
        """
        Discover the size of the file (once: a ready reader completes immediately).

        Args:
          callbacks : (:class:`~range_readers.callbacks.LoadCallbacks` | ``None``)
                      If given, the outcome is reported to these instead of raised
        """
        if self.state is ReaderState.FAILED:
            raise ValueError(f"{self!r} failed to initialise: create a new reader")
        if self.state is ReaderState.INITIALIZING:
            raise ValueError(f"{self!r} is already being initialised")
        await deliver(self._initialize(), callbacks)

    async def _initialize(self) -> None:
        if self.state is ReaderState.READY:
            return
        self.state = ReaderState.INITIALIZING
        try:
            await self._init()
        except TransportError:
            self._size = None
            self.state = ReaderState.FAILED
            log.debug(f"Failed to initialise {self!r}")
            raise
        except BaseException:
            self.state = ReaderState.UNINITIALIZED
            raise
        self.state = ReaderState.READY

    def check_ready(self) -> None:
        if not self.is_ready:
            raise ValueError(
                f"Reader must be initialised before loading ranges ({self.state=})"
            )

    def get_bytes_at(self, offset: int, length: int) -> bytes:
        return bytes(self.get_byte_at(offset + i) for i in range(length))

    def is_bit_set_at(self, offset: int, bit: int) -> bool:
        return (self.get_byte_at(offset) & (1 << bit)) != 0

    def _get_uint_at(self, offset: int, length: int, big_endian: bool) -> int:
        byteorder = "big" if big_endian else "little"
        return int.from_bytes(self.get_bytes_at(offset, length), byteorder)

    def get_short_at(self, offset: int, big_endian: bool = False) -> int:
        "Signed 16-bit integer"
        value = self._get_uint_at(offset, 2, big_endian)
        return value - 0x10000 if value > 0x7FFF else value

    def get_integer24_at(self, offset: int, big_endian: bool = False) -> int:
        "Unsigned 24-bit integer"
        return self._get_uint_at(offset, 3, big_endian)

    def get_long_at(self, offset: int, big_endian: bool = False) -> int:
        "Signed 32-bit integer"
        value = self._get_uint_at(offset, 4, big_endian)
        return value - 0x100000000 if value > 0x7FFFFFFF else value

    def get_synchsafe_integer32_at(self, offset: int) -> int:
        """
        A 28-bit integer stored in 4 bytes with the top bit of each byte unset, as
        used for ID3v2 tag sizes.
        """
        value = 0
        for byte in self.get_bytes_at(offset, 4):
            value = (value << 7) | (byte & 0x7F)
        return value

    def get_string_at(self, offset: int, length: int) -> str:
        "Each byte read as a character code (i.e. decoded as ISO-8859-1)"
        return self.get_bytes_at(offset, length).decode("iso-8859-1")

    def get_string_with_charset_at(
        self, offset: int, length: int, charset: str | None = None
    ) -> DecodedString:
        """
        Decode up to ``length`` bytes at ``offset``, stopping at the NUL terminator
        (which counts towards :attr:`DecodedString.bytes_read`).

        Args:
          charset : ``"utf-16"`` (endianness from the byte order mark, big endian if
                    there is none), ``"utf-16be"``, ``"utf-16le"``, ``"utf-8"``, or
                    ``"iso-8859-1"`` (the default)
        """
        data = self.get_bytes_at(offset, length)
        charset = (charset or "iso-8859-1").lower()
        if charset in ("utf-16", "utf-16be", "utf-16le"):
            return _decode_utf16(data, charset)
        if charset in ("utf-8", "utf8"):
            bom = len(codecs.BOM_UTF8) if data.startswith(codecs.BOM_UTF8) else 0
            text, read = _until_terminator(data[bom:], width=1)
            return DecodedString(text.decode("utf-8", errors="replace"), bom + read)
        if charset not in ("iso-8859-1", "latin-1", "latin1"):
            raise ValueError(f"Unsupported {charset=}")
        text, read = _until_terminator(data, width=1)
        return DecodedString(text.decode("iso-8859-1"), read)


def _until_terminator(data: bytes, width: int) -> tuple[bytes, int]:
    """
    Split off the content before the first NUL code unit of ``width`` bytes, also
    returning the number of bytes consumed including that terminator.
    """
    for i in range(0, len(data) - width + 1, width):
        if data[i : i + width] == b"\x00" * width:
            return data[:i], i + width
    usable = len(data) - len(data) % width
    return data[:usable], len(data)


def _decode_utf16(data: bytes, charset: str) -> DecodedString:
    bom = 0
    if charset == "utf-16":
        if data.startswith(codecs.BOM_UTF16_LE):
            charset, bom = "utf-16le", 2
        else:
            if data.startswith(codecs.BOM_UTF16_BE):
                bom = 2
            charset = "utf-16be"
    text, read = _until_terminator(data[bom:], width=2)
    return DecodedString(text.decode(charset, errors="replace"), bom + read)
