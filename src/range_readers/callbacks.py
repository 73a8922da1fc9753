r"""The media-reader contract reports completion through a pair of callbacks,
``on_success`` and ``on_error``. Here the operations are coroutines which raise on
failure, and :func:`deliver` adapts one of them to the callback style: exactly
one of the two callbacks is called, exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from .http_utils import TransportError

__all__ = ["LoadCallbacks", "deliver"]


@dataclass
class LoadCallbacks:
    """
    Args:
      on_success : called with no arguments once the operation has succeeded
      on_error   : called with the :class:`~range_readers.http_utils.TransportError`
                   if the operation failed. If ``None``, the error is raised instead.
    """

    on_success: Callable[[], Any]
    on_error: Callable[[TransportError], Any] | None = None


async def deliver(operation: Awaitable, callbacks: LoadCallbacks | None) -> None:
    """
    Await ``operation`` and report the outcome to ``callbacks`` (or, if there are no
    callbacks, let any error propagate). Errors raised by ``on_success`` itself are
    not passed to ``on_error``.
    """
    if callbacks is None:
        await operation
        return
    try:
        await operation
    except TransportError as exc:
        if callbacks.on_error is None:
            raise
        callbacks.on_error(exc)
        return
    callbacks.on_success()
