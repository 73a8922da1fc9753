r""":mod:`range_readers.remote` exposes :class:`RemoteFileReader`, the reader
for a file reachable over HTTP(S) on a server supporting range requests.

    >>> import asyncio
    >>> from range_readers import RemoteFileReader
    >>> async def read_id3_header(url):
    ...     async with RemoteFileReader(url) as reader:
    ...         await reader.initialize()
    ...         await reader.load_range((0, 9))
    ...         return reader.get_string_at(0, 3), reader.get_synchsafe_integer32_at(6)
    >>> asyncio.run(read_id3_header("https://example.com/song.mp3")) # doctest: +SKIP
    ('ID3', 35267)

The reader owns a :class:`~range_readers.byte_store.ByteRangeStore` and a
:class:`~range_readers.fetcher.ChunkedRangeFetcher`, neither shared with any other
reader.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from ranges import Range

from .byte_store import ByteRangeStore
from .callbacks import LoadCallbacks, deliver
from .fetcher import CHUNK_SIZE, ChunkedRangeFetcher
from .reader import MediaFileReader, UnsupportedLocatorError
from .transport import HttpTransport

__all__ = ["RemoteFileReader"]

URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


class RemoteFileReader(MediaFileReader):
    """
    Read a remote file by loading only the ranges asked for (rounded up to whole
    chunks of ``chunk_size`` bytes).
    """

    def __init__(
        self,
        url: str,
        client=None,  # don't hint httpx.AsyncClient (Sphinx gives error)
        transport: HttpTransport | None = None,
        chunk_size: int = CHUNK_SIZE,
        timeout_s: float = 30.0,
    ):
        """
        Args:
          url        : (:class:`str`) The URL of the file to be read
          client     : (:class:`httpx.AsyncClient` | ``None``) The HTTPX client to
                       send requests with (ignored if a ``transport`` is given). If
                       neither is given, a fresh client is created and closed by
                       :meth:`aclose`.
          transport  : (:class:`~range_readers.transport.HttpTransport` | ``None``)
                       The transport to send requests through
          chunk_size : (:class:`int`) Requests are made in multiples of this size
          timeout_s  : (:class:`float`) Timeout for a client created here
        """
        if not self.can_read_file(url):
            raise UnsupportedLocatorError(f"{url!r} is not a HTTP(S) URL")
        self.url = url
        if transport is None:
            transport = HttpTransport(client=client, timeout_s=timeout_s)
        self.transport = transport
        self.store = ByteRangeStore()
        self.fetcher = ChunkedRangeFetcher(
            url=url, store=self.store, transport=transport, chunk_size=chunk_size
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} ⠶ '{self.name}' from {self.domain}"

    @classmethod
    def can_read_file(cls, locator: Any) -> bool:
        return isinstance(locator, str) and URL_PATTERN.match(locator) is not None

    @property
    def name(self) -> str:
        return Path(urlparse(self.url).path).name

    @property
    def domain(self) -> str:
        return urlparse(self.url).netloc

    @property
    def requests_made(self) -> int:
        return self.fetcher.requests_made

    @property
    def bytes_fetched(self) -> int:
        return self.fetcher.bytes_fetched

    async def _init(self) -> None:
        self._size = await self.transport.probe_size(self.url)
        self.fetcher.total_bytes = self._size

    async def load_range(
        self,
        byte_range: Range | tuple[int, int],
        callbacks: LoadCallbacks | None = None,
    ) -> None:
        """
        Load ``byte_range`` (a half-open :class:`~ranges.Range` or an inclusive
        integer tuple) so that its bytes can be read with :meth:`get_byte_at`.
        """
        self.check_ready()
        await deliver(self.fetcher.ensure_range(byte_range), callbacks)

    def get_byte_at(self, offset: int) -> int:
        """
        Raises :exc:`~range_readers.byte_store.RangeNotCachedError` unless a range
        containing ``offset`` was loaded first.
        """
        return self.store.get_byte_at(offset)

    def get_bytes_at(self, offset: int, length: int) -> bytes:
        return self.store.get_bytes_at(offset, length)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
