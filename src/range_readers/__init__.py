r"""
:mod:`range_readers` gives random access to the bytes of a remote file over HTTP
without downloading all of it, for metadata extractors (such as audio tag
parsers) which read small, scattered pieces of a file: a header, some frames, a
footer.

Servers with support for `HTTP range requests
<https://developer.mozilla.org/en-US/docs/Web/HTTP/Range_requests>`_
can provide partial content requests. A
:class:`~range_readers.remote.RemoteFileReader` is initialised by providing:

- a URL (the file to be read)
- (optionally) a client (:class:`httpx.AsyncClient`), or else a fresh one
  is created
- (optionally) a chunk size, the multiple of which every request is rounded up
  to (1024 bytes by default)

After :meth:`~range_readers.reader.MediaFileReader.initialize` has discovered the
file size (via a HEAD request), ranges are loaded with
:meth:`~range_readers.reader.MediaFileReader.load_range` and read byte by byte
with :meth:`~range_readers.reader.MediaFileReader.get_byte_at`:

    >>> from range_readers import RemoteFileReader
    >>> r = RemoteFileReader(url="https://example.com/song.mp3") # doctest: +SKIP
    >>> await r.initialize() # doctest: +SKIP
    >>> await r.load_range((0, 9)) # doctest: +SKIP
    >>> r.store # doctest: +SKIP
    ByteRangeStore ⠶ RangeSet{Range[0, 1024)}
    >>> r.get_string_at(0, 3) # doctest: +SKIP
    'ID3'

A range which is already loaded is not requested again. Byte ranges are given
either as a :class:`~ranges.Range` from the `python-ranges
<https://python-ranges.readthedocs.io/en/latest/>`_ library (a half-open
interval ``[start, stop)``) or as a tuple of two integers, read as the
inclusive interval ``[start, end]``.

Both operations are coroutines which raise a
:class:`~range_readers.http_utils.TransportError` on failure, or which report to
a pair of :class:`~range_readers.callbacks.LoadCallbacks` if given one.
"""

# Get classes into package namespace but exclude from __all__ so Sphinx can access types

from . import async_utils, http_utils, range_utils
from .array_reader import ArrayFileReader
from .byte_store import ByteRangeStore, RangeNotCachedError
from .callbacks import LoadCallbacks
from .fetcher import CHUNK_SIZE, ChunkedRangeFetcher
from .http_utils import TransportError
from .reader import MediaFileReader, ReaderState, UnsupportedLocatorError
from .remote import RemoteFileReader
from .selection import open_reader, select_reader_class
from .transport import HttpTransport

__all__ = [
    "array_reader",
    "async_utils",
    "byte_store",
    "callbacks",
    "fetcher",
    "http_utils",
    "range_utils",
    "reader",
    "remote",
    "selection",
    "transport",
]

__version__ = "0.1.0"
__author__ = "range-readers contributors"
__license__ = "MIT"
__description__ = "Random access to remote files via HTTP range requests."
