r""":mod:`range_readers.transport` exposes :class:`HttpTransport`, the only
component that talks to the network: a size probe (HTTP HEAD) and a range fetch
(HTTP GET with a ``range`` header), both sent through a ``httpx.AsyncClient``.

The client is injected rather than chosen here, so tests (or applications with
their own connection pooling, proxies or timeouts) supply one, for example built
on a ``httpx.MockTransport``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

MYPY = False  # when using mypy will be overrided as True
if MYPY or not TYPE_CHECKING:  # pragma: no cover
    import httpx  # avoid importing to Sphinx type checker

from ranges import Range

from .http_utils import TransportError, detect_header_value, request_headers
from .log_utils import log
from .range_utils import range_len, range_termini

__all__ = ["HttpTransport", "SUCCESS_STATUSES"]

SUCCESS_STATUSES = (200, 206)  # OK, Partial Content


class HttpTransport:
    """
    Send HEAD and ranged GET requests for a URL, turning any failure into a
    :class:`~range_readers.http_utils.TransportError`. No request is retried.
    """

    def __init__(self, client=None, timeout_s: float = 30.0):
        """
        Args:
          client    : (:class:`httpx.AsyncClient` | ``None``) The client to send
                      requests with. If ``None``, a fresh one is created, which this
                      transport then closes in :meth:`aclose`.
          timeout_s : (:class:`float`) Timeout for a client created here.
        """
        self.set_client(client=client, timeout_s=timeout_s)

    def set_client(self, client, timeout_s: float) -> None:
        """
        Check client type explicitly, as only the asynchronous HTTPX client fits the
        asynchronous reader contract.
        """
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=httpx.Timeout(timeout=timeout_s))
        elif isinstance(client, httpx.Client):
            raise TypeError(f"{client=} is not async (`httpx.AsyncClient`)")
        elif not isinstance(client, httpx.AsyncClient):
            raise TypeError(f"{client=} is not a HTTPX client")
        self.client = client

    async def send(self, method: str, url: str, rng: Range | None = None):
        """
        Send a request (with the cache bypass header, and a range header if ``rng`` is
        given), returning the ``httpx.Response`` if its status is 200 or 206.
        """
        request = self.client.build_request(
            method=method, url=url, headers=request_headers(rng)
        )
        try:
            response = await self.client.send(request, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc!r}", request=request)
        if response.status_code not in SUCCESS_STATUSES:
            raise TransportError(
                f"{method} {url} got HTTP {response.status_code}",
                request=request,
                response=response,
            )
        return response

    async def probe_size(self, url: str) -> int:
        """
        Send a HEAD request and read the total size of the file at ``url`` from the
        ``content-length`` header of the response.
        """
        response = await self.send(method="HEAD", url=url)
        try:
            total_length = detect_header_value(
                headers=response.headers, key="content-length", source="HEAD response"
            )
            size = int(total_length)
        except (KeyError, ValueError) as exc:
            raise TransportError(str(exc), request=response.request, response=response)
        log.debug(f"Probed {url}: {size} bytes")
        return size

    async def get_range(self, url: str, rng: Range) -> bytes:
        """
        Fetch the bytes in ``rng`` from ``url``. A server which ignores the range
        header replies 200 with the entire file, in which case the requested window
        is cut out of it so the bytes returned always begin at the start of ``rng``.
        """
        response = await self.send(method="GET", url=url, rng=rng)
        data = response.content
        if response.status_code == 200:
            start, end = range_termini(rng)
            log.warning(
                f"Server ignored range request for {url} and sent {len(data)} bytes"
            )
            data = data[start : end + 1]
        else:
            self.check_content_range(response, rng)
            if len(data) > range_len(rng):
                data = data[: range_len(rng)]
        return data

    def check_content_range(self, response, rng: Range) -> None:
        """
        Validate that a partial content response begins where ``rng`` does, by its
        ``content-range`` header (e.g. ``bytes 0-1023/5000``).
        """
        try:
            content_range = detect_header_value(
                headers=response.headers, key="content-range", source="GET response"
            )
            start = int(content_range.split()[-1].split("-")[0])
        except (KeyError, ValueError) as exc:
            raise TransportError(str(exc), request=response.request, response=response)
        if start != range_termini(rng)[0]:
            raise TransportError(
                f"Requested {rng} but got content-range '{content_range}'",
                request=response.request,
                response=response,
            )

    async def aclose(self) -> None:
        """Close the client if it was created by this transport."""
        if self._owns_client and not self.client.is_closed:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
