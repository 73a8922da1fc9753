r""":mod:`range_readers.fetcher` exposes :class:`ChunkedRangeFetcher`, which turns
a requested byte range into at most one range request.

A request is only sent when some of the range is not already cached, and it is
widened to a whole number of chunks first: the round trip costs far more than the
extra bytes, and nearby reads (as made by tag parsers walking a header) are then
likely to be cache hits.
"""

from __future__ import annotations

import asyncio

from ranges import Range

from .byte_store import ByteRangeStore
from .callbacks import LoadCallbacks, deliver
from .log_utils import log
from .range_utils import align_range, range_min, range_termini, validate_range
from .transport import HttpTransport

__all__ = ["CHUNK_SIZE", "ChunkedRangeFetcher"]

CHUNK_SIZE = 1024


class ChunkedRangeFetcher:
    """
    Fill a :class:`~range_readers.byte_store.ByteRangeStore` from the file at ``url``
    in multiples of ``chunk_size`` bytes.

    Concurrent calls to :meth:`ensure_range` for overlapping ranges are not merged:
    each sends its own request, and the later response overwrites the overlap (with
    identical bytes, for a file which does not change).
    """

    total_bytes: int | None = None
    """The size of the file if known, used to clip fetches at the end of the file"""

    def __init__(
        self,
        url: str,
        store: ByteRangeStore,
        transport: HttpTransport,
        chunk_size: int = CHUNK_SIZE,
    ):
        if chunk_size < 1:
            raise ValueError(f"{chunk_size=} must be positive")
        self.url = url
        self.store = store
        self.transport = transport
        self.chunk_size = chunk_size
        self.requests_made = 0
        self.bytes_fetched = 0

    def aligned_range(self, byte_range: Range | tuple[int, int]) -> Range:
        """The range that would be requested to load ``byte_range``"""
        rng = validate_range(byte_range)
        return align_range(rng, chunk_size=self.chunk_size, total_bytes=self.total_bytes)

    async def ensure_range(
        self,
        byte_range: Range | tuple[int, int],
        callbacks: LoadCallbacks | None = None,
    ) -> None:
        """
        Make sure every byte of ``byte_range`` is cached, sending a single request for
        the chunk-aligned range if it is not. The store is only written to once the
        request has succeeded, so a failure leaves it as it was.

        Completion is asynchronous even on a cache hit (control returns to the event
        loop once before completing).

        Args:
          byte_range : (:class:`~ranges.Range` | ``tuple[int,int]``) The range to load,
                       as a half-open :class:`~ranges.Range` or an inclusive tuple
          callbacks  : (:class:`~range_readers.callbacks.LoadCallbacks` | ``None``)
                       If given, the outcome is reported to these instead of raised
        """
        await deliver(self._ensure_range(byte_range), callbacks)

    async def _ensure_range(self, byte_range: Range | tuple[int, int]) -> None:
        rng = validate_range(byte_range)
        start, end = range_termini(rng)
        if self.store.has_range(start, end):
            log.debug(f"Cache hit for [{start}, {end}] of {self.url}")
            await asyncio.sleep(0)
            return
        aligned = self.aligned_range(rng)
        log.debug(f"Fetching {aligned} of {self.url} to load [{start}, {end}]")
        self.requests_made += 1
        data = await self.transport.get_range(self.url, aligned)
        self.store.add_data(range_min(aligned), data)
        self.bytes_fetched += len(data)
