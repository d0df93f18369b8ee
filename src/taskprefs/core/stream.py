# src/taskprefs/core/stream.py

from __future__ import annotations

"""
Minimal asyncio streams.

StateStream holds the latest value and fans every emission out to its subscribers.
combine_latest joins two async iterators and re-emits on every update of either side.

Everything here runs on one event loop: emit() must be called from the loop thread.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
A = TypeVar("A")
B = TypeVar("B")
R = TypeVar("R")


class _Sentinel:
    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


_MISSING: Any = _Sentinel("MISSING")
_CLOSED: Any = _Sentinel("CLOSED")


class StateStream(Generic[T]):
    """
    Latest-value broadcast.

    - subscribe() yields the current value first (if any), then every emit() in order.
    - subscribers are not conflated: each one gets its own unbounded queue.
    - close() ends every active subscription.
    """

    def __init__(self, initial: T = _MISSING) -> None:
        self._value: T = initial
        self._subscribers: set[asyncio.Queue[Any]] = set()
        self._closed = False

    @property
    def has_value(self) -> bool:
        return self._value is not _MISSING

    @property
    def value(self) -> T:
        if self._value is _MISSING:
            raise LookupError("StateStream has no value yet")
        return self._value

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, value: T) -> None:
        if self._closed:
            raise RuntimeError("emit() on a closed StateStream")
        self._value = value
        for queue in list(self._subscribers):
            queue.put_nowait(value)

    def close(self) -> None:
        self._closed = True
        for queue in list(self._subscribers):
            queue.put_nowait(_CLOSED)

    async def subscribe(self) -> AsyncIterator[T]:
        queue: asyncio.Queue[Any] = asyncio.Queue()
        if self._closed:
            return
        if self._value is not _MISSING:
            queue.put_nowait(self._value)
        self._subscribers.add(queue)
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            self._subscribers.discard(queue)


async def combine_latest(
    first: AsyncIterator[A],
    second: AsyncIterator[B],
    combine: Callable[[A, B], R],
) -> AsyncIterator[R]:
    """
    Every time either source emits, yield combine(latest_first, latest_second).

    Nothing is yielded until both sources produced at least one value.
    Finishes when both sources finish; an error in either source is re-raised here.
    """
    queue: asyncio.Queue[tuple[int, Any, BaseException | None]] = asyncio.Queue()

    async def pump(index: int, source: AsyncIterator[Any]) -> None:
        try:
            async for value in source:
                await queue.put((index, value, None))
        except Exception as e:
            await queue.put((index, _MISSING, e))
            return
        await queue.put((index, _CLOSED, None))

    pumps = [
        asyncio.create_task(pump(0, first)),
        asyncio.create_task(pump(1, second)),
    ]
    latest: list[Any] = [_MISSING, _MISSING]
    finished = 0
    try:
        while finished < len(pumps):
            index, value, error = await queue.get()
            if error is not None:
                raise error
            if value is _CLOSED:
                finished += 1
                continue
            latest[index] = value
            if any(v is _MISSING for v in latest):
                continue
            yield combine(latest[0], latest[1])
    finally:
        for task in pumps:
            task.cancel()
        await asyncio.gather(*pumps, return_exceptions=True)
