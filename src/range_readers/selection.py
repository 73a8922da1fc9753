"""Pick the reader variant for a locator: the first whose predicate accepts it."""

from __future__ import annotations

from typing import Any, Sequence, Type

from .array_reader import ArrayFileReader
from .reader import MediaFileReader, UnsupportedLocatorError
from .remote import RemoteFileReader

__all__ = ["DEFAULT_READERS", "select_reader_class", "open_reader"]

DEFAULT_READERS: tuple[Type[MediaFileReader], ...] = (
    RemoteFileReader,
    ArrayFileReader,
)


def select_reader_class(
    locator: Any, readers: Sequence[Type[MediaFileReader]] = DEFAULT_READERS
) -> Type[MediaFileReader]:
    for reader_cls in readers:
        if reader_cls.can_read_file(locator):
            return reader_cls
    raise UnsupportedLocatorError(f"No reader for {locator!r}")


def open_reader(
    locator: Any, readers: Sequence[Type[MediaFileReader]] = DEFAULT_READERS, **kwargs
) -> MediaFileReader:
    """
    Create (but do not initialise) a reader for ``locator``. Any kwargs are passed
    through to the reader class constructor.
    """
    reader_cls = select_reader_class(locator, readers=readers)
    return reader_cls(locator, **kwargs)
