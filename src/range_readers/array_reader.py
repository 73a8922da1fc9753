from __future__ import annotations

import asyncio
from typing import Any

from ranges import Range

from .callbacks import LoadCallbacks, deliver
from .range_utils import validate_range
from .reader import MediaFileReader

__all__ = ["ArrayFileReader"]


class ArrayFileReader(MediaFileReader):
    """
    A reader over bytes already in memory: there is nothing to load, so
    :meth:`load_range` just completes.
    """

    def __init__(self, array: bytes | bytearray | memoryview):
        if not self.can_read_file(array):
            raise TypeError(f"{type(array).__name__} is not a bytes-like object")
        self._array = bytes(array)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} ⠶ {len(self._array)} bytes"

    @classmethod
    def can_read_file(cls, locator: Any) -> bool:
        return isinstance(locator, (bytes, bytearray, memoryview))

    async def _init(self) -> None:
        self._size = len(self._array)

    async def load_range(
        self,
        byte_range: Range | tuple[int, int],
        callbacks: LoadCallbacks | None = None,
    ) -> None:
        validate_range(byte_range)
        await deliver(asyncio.sleep(0), callbacks)

    def get_byte_at(self, offset: int) -> int:
        if not 0 <= offset < len(self._array):
            raise IndexError(f"Offset {offset} out of bounds")
        return self._array[offset]
