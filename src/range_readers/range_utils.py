r"""Helpers for the :class:`~ranges.Range` objects used throughout the library.

Ranges are stored internally as half-open :class:`~ranges.Range` intervals
``[start, stop)`` (the python-ranges default), but the media-reader contract
describes byte ranges as inclusive ``[start, end]`` pairs, so integer tuples
passed to :func:`validate_range` are read that way:

    >>> from range_readers.range_utils import validate_range
    >>> validate_range((0, 9))
    Range[0, 10)
"""

from __future__ import annotations

__all__ = [
    "range_termini",
    "range_len",
    "range_min",
    "range_max",
    "validate_range",
    "align_range",
]

from ranges import Range


def range_termini(rng: Range) -> tuple[int, int]:
    """Get the inclusive start and end positions ``[start,end]``
    from a :class:`ranges.Range`. These are referred to as the
    'termini'. Ranges are always ascending.

    Args:
      rng : A :class:`~ranges.Range` (which by default will be
            half-closed, i.e. not inclusive of the end position).
    """
    if rng.isempty():
        raise ValueError("Empty range has no termini")
    # If range is not empty then can compare regardless of if interval is closed/open
    start = rng.start if rng.include_start else rng.start + 1
    end = rng.end if rng.include_end else rng.end - 1
    return start, end


def range_len(rng: Range) -> int:
    """Get the number of positions covered by a :class:`~ranges.Range`
    (``0`` for the empty range).

    Args:
      rng : A :class:`~ranges.Range`
    """
    if rng.isempty():
        return 0
    rmin, rmax = range_termini(rng)
    return rmax - rmin + 1


def range_min(rng: Range) -> int:
    """Get the minimum (or start terminus) of a :class:`~ranges.Range`.

    Args:
      rng : A :class:`~ranges.Range`
    """
    if rng.isempty():
        raise ValueError("Empty range has no minimum")
    return range_termini(rng)[0]


def range_max(rng: Range) -> int:
    """Get the maximum (or end terminus) of a :class:`~ranges.Range`.

    Args:
      rng : A :class:`~ranges.Range`
    """
    if rng.isempty():
        raise ValueError("Empty range has no maximum")
    return range_termini(rng)[1]


def validate_range(
    byte_range: Range | tuple[int, int], allow_empty: bool = False
) -> Range:
    """Validate ``byte_range`` and convert to a half-closed (i.e.
    not inclusive of the end position) ``[start,end)`` :class:`~ranges.Range`
    if given as an inclusive integer tuple ``(start, end)``.

    Args:
      byte_range  : Either a :class:`tuple` of two :class:`int` positions
                    ``(start, end)``, both of which are included in the range;
                    or a :class:`~ranges.Range`.
      allow_empty : Whether to accept an empty range (default: ``False``).
    """
    complain_about_types = (
        f"{byte_range=} must be a Range from the python-ranges"
        " package or an integer 2-tuple"
    )
    if isinstance(byte_range, tuple):
        if len(byte_range) != 2:
            raise TypeError(complain_about_types)
        if not all(map(lambda x: isinstance(x, int), byte_range)):
            raise TypeError(complain_about_types)
        start, end = byte_range
        if start < 0 or end < start:
            raise ValueError(f"Invalid byte range {byte_range}: need 0 <= start <= end")
        byte_range = Range(start, end + 1)
    elif not isinstance(byte_range, Range):
        raise TypeError(complain_about_types)
    elif not all(map(lambda o: isinstance(o, int), [byte_range.start, byte_range.end])):
        raise TypeError("Ranges must be discrete: use integers for start and end")
    elif byte_range.start < 0:
        raise ValueError(f"{byte_range} starts before the beginning of the file")
    if not allow_empty and byte_range.isempty():
        raise ValueError("Range is empty")
    return byte_range


def align_range(rng: Range, chunk_size: int, total_bytes: int | None = None) -> Range:
    """Round ``rng`` up to the smallest multiple of ``chunk_size`` bytes, keeping its
    start position. If ``total_bytes`` is known, the result is clipped so as not to
    run past the end of the file.

        >>> align_range(Range(0, 10), chunk_size=1024)
        Range[0, 1024)
        >>> align_range(Range(1000, 1030), chunk_size=1024, total_bytes=1500)
        Range[1000, 1500)

    Args:
      rng         : The (non-empty) range requested.
      chunk_size  : The positive chunk size to quantise to.
      total_bytes : The length of the file, or ``None`` if not known.
    """
    if chunk_size < 1:
        raise ValueError(f"{chunk_size=} must be positive")
    start = range_min(rng)
    aligned_len = -(-range_len(rng) // chunk_size) * chunk_size
    stop = start + aligned_len
    if total_bytes is not None:
        if start >= total_bytes:
            raise ValueError(f"{rng} starts beyond the end of the file ({total_bytes=})")
        stop = min(stop, total_bytes)
    return Range(start, stop)
