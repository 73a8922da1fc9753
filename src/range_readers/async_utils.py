from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable, Iterator

from aiostream import stream
from ranges import Range, RangeSet

MYPY = False  # when using mypy will be overrided as True
if MYPY or not TYPE_CHECKING:  # pragma: no cover
    import httpx  # avoid importing to Sphinx type checker

from tqdm.asyncio import tqdm_asyncio

from .fetcher import CHUNK_SIZE
from .http_utils import TransportError
from .log_utils import log, set_up_logging
from .remote import RemoteFileReader
from .transport import HttpTransport

__all__ = ["AsyncFetcher"]


class AsyncFetcher:
    def __init__(
        self,
        urls: list[str],
        byte_range: Range | tuple[int, int] = (0, CHUNK_SIZE - 1),
        callback: Callable | None = None,
        verbose: bool = False,
        show_progress_bar: bool = True,
        timeout_s: float = 5.0,
        client=None,
        chunk_size: int = CHUNK_SIZE,
        task_limit: int = 20,
    ):
        """
        Initialise a :class:`~range_readers.remote.RemoteFileReader` for each of the
        ``urls`` and load ``byte_range`` on it, several files at a time.

        Args:
          byte_range : The range to load from every file (an inclusive integer tuple
                       or a half-open :class:`~ranges.Range`), by default the first
                       chunk.
          callback   : A function to be passed 3 values: the AsyncFetcher which is
                       calling it, the loaded RemoteFileReader, and its URL.
          task_limit : The most files to be fetching from at once.
        """
        if urls == []:
            raise ValueError("The list of URLs to fetch cannot be empty")
        self.url_list = urls
        self.byte_range = byte_range
        self.callback = callback
        self.n = len(urls)
        self.verbose = verbose
        self.show_progress_bar = show_progress_bar and not self.verbose
        self.client = client
        self.timeout = httpx.Timeout(timeout=timeout_s)
        self.chunk_size = chunk_size
        self.task_limit = task_limit
        self.completed = RangeSet()
        self.errors: dict[str, Exception] = {}
        set_up_logging(quiet=not verbose)

    def make_calls(self):
        """
        The method called to run the event loop to fetch URLs, after initialisation
        and/or repeatedly upon exiting the loop (i.e. it can resume after errors).
        """
        urls = self.filtered_url_list
        if not urls:
            return
        if self.show_progress_bar:
            self.set_up_progress_bar()
        try:
            asyncio.run(self.async_fetch_urlset(urls=iter(urls)))
        finally:
            if self.show_progress_bar:
                self.pbar.close()

    def complete_row(self, row_index: int):
        """
        Add the range corresponding to the range at row ``row_index`` to the
        :attr:`~range_readers.async_utils.AsyncFetcher.completed`
        :class:`~ranges.RangeSet`, meaning it will be omitted on any further call to
        :meth:`~range_readers.async_utils.AsyncFetcher.make_calls`. This is done once
        the URL at that row has been processed, successfully or not.
        """
        row_range = Range(row_index, row_index + 1)
        self.completed.add(row_range)

    @property
    def filtered_url_list(self) -> list[str]:
        if self.completed.isempty():
            urls = self.url_list
        else:
            urls = [u for (i, u) in enumerate(self.url_list) if i not in self.completed]
        return urls

    def set_up_progress_bar(self):
        n_already_fetched = self.n - len(self.filtered_url_list)
        self.pbar = tqdm_asyncio(total=self.n)
        if n_already_fetched:
            self.pbar.update(n_already_fetched)
            self.pbar.refresh()

    async def fetch(self, transport: HttpTransport, url: str):
        """
        Initialise a reader for ``url`` and load the range, returning the reader (or
        ``None`` if the URL could not be read, in which case the error is recorded on
        :attr:`~range_readers.async_utils.AsyncFetcher.errors`).
        """
        try:
            reader = RemoteFileReader(
                url=url, transport=transport, chunk_size=self.chunk_size
            )
            await reader.initialize()
            await reader.load_range(self.byte_range)
        except (TransportError, ValueError) as exc:
            log.warning(f"Failed to fetch {url}: {exc}")
            self.errors[url] = exc
            reader = None
        return url, reader

    async def process_reader(self, fetched: tuple[str, RemoteFileReader | None]):
        """
        Call the callback (if set on the
        :attr:`~range_readers.async_utils.AsyncFetcher.callback` attribute) for a
        successfully loaded reader, then mark its URL complete.
        """
        url, reader = fetched
        if reader is not None and self.callback is not None:
            await self.callback(self, reader, url)
        if self.verbose:
            log.debug(f"Processed URL in async callback: {url}")
        if self.show_progress_bar:
            self.pbar.update()
        self.complete_row(row_index=self.url_list.index(url))

    async def async_fetch_urlset(self, urls: Iterator[str]) -> None:
        """
        If the :attr:`~range_readers.async_utils.AsyncFetcher.client` is ``None``,
        create one in a contextmanager block (i.e. close it immediately after use),
        otherwise use the one provided, not in a contextmanager block (i.e. leave it
        up to the user to close the client).
        """
        if self.client is None:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                await self.fetch_and_process(urls=urls, client=client)
        else:
            if self.client.is_closed:
                msg = (
                    "Cannot use a closed client to fetch.\n\nDid you attempt to retry "
                    " after using the client in a contextmanager block (which implicitly"
                    " closes after exiting the block) perhaps?"
                )
                raise ValueError(msg)
            await self.fetch_and_process(urls=urls, client=self.client)

    async def fetch_and_process(self, urls: Iterator[str], client) -> None:
        transport = HttpTransport(client=client)
        ws = stream.repeat(transport)
        xs = stream.zip(ws, stream.iterate(urls))
        ys = stream.starmap(xs, self.fetch, ordered=False, task_limit=self.task_limit)
        zs = stream.map(ys, self.process_reader)
        async with zs.stream() as streamer:
            async for _ in streamer:
                pass
