r""":mod:`range_readers.byte_store` exposes a class
:class:`~range_readers.byte_store.ByteRangeStore`, the in-memory record of which
byte intervals of a remote file have been fetched so far, along with their bytes.

Intervals are coalesced on insertion: the store never holds two intervals that
overlap or adjoin, so a range is cached exactly when a single stored interval
contains it.

    >>> store = ByteRangeStore()
    >>> store.add_data(0, b"abc")
    >>> store.add_data(3, b"def")
    >>> store.cached_ranges
    RangeSet{Range[0, 6)}
    >>> store.get_byte_at(4)
    101
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass

from ranges import Range, RangeSet

__all__ = ["RangeNotCachedError", "CachedInterval", "ByteRangeStore"]


class RangeNotCachedError(LookupError):
    """
    A byte was read from an offset that no successful load has covered. Callers must
    load a range (and wait for it to complete) before reading bytes from it.
    """


@dataclass
class CachedInterval:
    """A contiguous run of cached bytes, beginning at the file position ``start``."""

    start: int
    data: bytearray

    @property
    def end(self) -> int:
        "The inclusive end position"
        return self.start + len(self.data) - 1

    @property
    def range(self) -> Range:
        return Range(self.start, self.start + len(self.data))

    def __contains__(self, offset: int) -> bool:
        return self.start <= offset <= self.end


class ByteRangeStore:
    """
    Cached byte intervals of a single logical file, kept sorted by start position.

    When a new interval overlaps bytes already held, the new bytes overwrite the old
    ones for the overlapped positions only ("last write wins"); bytes outside the
    overlap are kept as they were.
    """

    _intervals: list[CachedInterval]
    _starts: list[int]  # start positions of `_intervals`, for bisection

    def __init__(self):
        self._intervals = []
        self._starts = []

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} ⠶ {self.cached_ranges}"

    def __len__(self) -> int:
        "The number of (coalesced) cached intervals"
        return len(self._intervals)

    @property
    def cached_ranges(self) -> RangeSet:
        """
        The positions covered so far, as a :class:`~ranges.RangeSet` of half-open
        :class:`~ranges.Range` intervals.
        """
        covered = RangeSet()
        for interval in self._intervals:
            covered.add(interval.range)
        return covered

    @property
    def bytes_cached(self) -> int:
        return sum(len(interval.data) for interval in self._intervals)

    def interval_containing(self, offset: int) -> CachedInterval | None:
        """
        Look up the cached interval which contains ``offset`` (or ``None`` if it is
        not cached), by bisecting on the sorted interval start positions.
        """
        i = bisect_right(self._starts, offset) - 1
        if i >= 0 and offset in self._intervals[i]:
            return self._intervals[i]
        return None

    def has_range(self, start: int, end: int) -> bool:
        """
        Whether every position in the inclusive interval ``[start, end]`` is cached.

        Args:
          start : first position (inclusive)
          end   : last position (inclusive)
        """
        if end < start:
            raise ValueError(f"Invalid range [{start}, {end}]")
        interval = self.interval_containing(start)
        return interval is not None and Range(start, end + 1) in interval.range

    def add_data(self, start: int, data: bytes) -> None:
        """
        Cache ``data`` as the bytes at positions ``[start, start + len(data) - 1]``,
        merging it with every stored interval that it overlaps or adjoins.

        Args:
          start : the file position of the first byte of ``data``
          data  : the bytes to store
        """
        if start < 0:
            raise ValueError(f"Cannot store bytes at negative position {start}")
        if not data:
            return
        end = start + len(data) - 1
        touching = [
            iv for iv in self._intervals if iv.start <= end + 1 and iv.end >= start - 1
        ]
        merged_start = min([start] + [iv.start for iv in touching])
        merged_end = max([end] + [iv.end for iv in touching])
        merged = bytearray(merged_end - merged_start + 1)
        for iv in touching:
            merged[iv.start - merged_start : iv.end - merged_start + 1] = iv.data
        merged[start - merged_start : end - merged_start + 1] = data
        untouched = [iv for iv in self._intervals if not any(iv is t for t in touching)]
        untouched.append(CachedInterval(start=merged_start, data=merged))
        self._intervals = sorted(untouched, key=lambda iv: iv.start)
        self._starts = [iv.start for iv in self._intervals]

    def get_byte_at(self, offset: int) -> int:
        """
        The byte (as an integer from 0 to 255) at file position ``offset``.

        Raises :exc:`RangeNotCachedError` if ``offset`` has not been cached.
        """
        interval = self.interval_containing(offset)
        if interval is None:
            raise RangeNotCachedError(f"Offset {offset} has not been loaded")
        return interval.data[offset - interval.start]

    def get_bytes_at(self, offset: int, length: int) -> bytes:
        """
        The ``length`` bytes beginning at file position ``offset``, which must all be
        cached (else :exc:`RangeNotCachedError` is raised).
        """
        if length <= 0:
            return b""
        interval = self.interval_containing(offset)
        if interval is None or offset + length - 1 > interval.end:
            raise RangeNotCachedError(
                f"Range [{offset}, {offset + length - 1}] has not been loaded"
            )
        pos = offset - interval.start
        return bytes(interval.data[pos : pos + length])
