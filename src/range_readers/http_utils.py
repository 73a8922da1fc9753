r"""When preparing a HTTP GET request, the HTTP `range request
<https://developer.mozilla.org/en-US/docs/Web/HTTP/Range_requests>`_
header must be provided as a :class:`dict`, for example:

.. code-block:: python

    {"range": "bytes=0-1"}

would request the two bytes at positions ``0`` and ``1`` (i.e. the inclusive
interval ``[0,1]``).

Every request also carries :data:`CACHE_BYPASS_HEADERS`, an ``If-Modified-Since``
date at the Unix epoch, so that a local HTTP cache revalidates rather than
silently serving a stale copy of a remote file that is read repeatedly.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ranges import Range

from .range_utils import range_termini

__all__ = [
    "CACHE_BYPASS_HEADERS",
    "byte_range_from_range_obj",
    "range_header",
    "request_headers",
    "TransportError",
    "detect_header_value",
]

CACHE_BYPASS_HEADERS = {"if-modified-since": "Sat, 01 Jan 1970 00:00:00 GMT"}


def byte_range_from_range_obj(rng: Range) -> str:
    """Prepare the byte range substring for a HTTP `range request
    <https://developer.mozilla.org/en-US/docs/Web/HTTP/Range_requests>`_.

    For example:

      >>> from range_readers.http_utils import byte_range_from_range_obj
      >>> byte_range_from_range_obj(Range(0,2))
      '0-1'

    Args:
      rng : range of the bytes to be requested (0-based, must not be empty)

    Returns:
      A hyphen-separated string of the inclusive start and end positions.
    """
    start_byte, end_byte = range_termini(rng)
    return f"{start_byte}-{end_byte}"


def range_header(rng: Range) -> dict[str, str]:
    """
    Prepare a :class:`dict` to pass as a ``httpx`` request header
    with a single key ``range`` whose value is the byte range.

      >>> from range_readers.http_utils import range_header
      >>> range_header(Range(0,2))
      {'range': 'bytes=0-1'}

    Args:
      rng : range of the bytes to be requested (0-based)
    """
    byte_range = byte_range_from_range_obj(rng)
    return {"range": f"bytes={byte_range}"}


def request_headers(rng: Range | None = None) -> dict[str, str]:
    """
    The headers sent with every request: the cache bypass header, plus the
    range header if a ``rng`` is given (for a GET rather than a HEAD request).
    """
    headers = dict(CACHE_BYPASS_HEADERS)
    if rng is not None:
        headers.update(range_header(rng))
    return headers


class TransportError(Exception):
    """
    A request failed: either the server answered with a status other than
    200 (OK) or 206 (Partial Content), or the exchange itself failed (in which case
    :attr:`status_code` is ``None``).
    """

    def __init__(self, detail: str, *, request=None, response=None):
        super().__init__(detail)
        self.detail = detail
        self.request = request
        self.response = response

    @property
    def status_code(self) -> int | None:
        return None if self.response is None else self.response.status_code


def detect_header_value(headers: dict, key: str, source: str = "Response"):
    """
    Detect a title case, lower case, or capitalised version of the given string.
    """
    variants = key.title(), key.lower(), key.capitalize()
    try:
        return next(headers.get(k) for k in variants if k in headers)
    except StopIteration:
        raise KeyError(f"{source} was missing '{key}' header")
