# SPDX-FileCopyrightText: 2023 Alexander Sosedkin <monk@unboiled.info>
# SPDX-License-Identifier: GPL-3.0

"""Event-emitting wrappers around asyncio-style byte streams.

asyncio streams and aiofiles objects report failures by raising,
and report completion by returning.
The wrappers here turn that into events that anyone can listen to:

* Readable: ``'error'``, ``'end'``
* Writable: ``'error'``, ``'finish'``, ``'close'``

Both sync and async methods of the wrapped objects are supported,
so ``asyncio.StreamReader``/``asyncio.StreamWriter``,
aiofiles files and plain ``io`` objects all work.
"""

import asyncio
import collections
import inspect
import logging
import typing

logger = logging.getLogger(__name__)

Listener = typing.Callable[..., object]

DEFAULT_CHUNK_SIZE = 64 * 1024


class ByteSource(typing.Protocol):
    def read(self, size: int = -1) -> typing.Any: ...  # noqa: ANN401


class ByteSink(typing.Protocol):
    def write(self, data: bytes) -> typing.Any: ...  # noqa: ANN401
    def close(self) -> typing.Any: ...  # noqa: ANN401


async def _call(
    obj: object,
    method: str,
    *a: typing.Any,  # noqa: ANN401
) -> typing.Any:  # noqa: ANN401
    r = getattr(obj, method)(*a)
    if inspect.isawaitable(r):
        r = await r
    return r


class _Emitter:
    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = (
            collections.defaultdict(list)
        )

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        with_event = self._listeners.get(event, [])
        if listener in with_event:
            with_event.remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, *a: typing.Any) -> bool:  # noqa: ANN401
        """Call listeners of an event, return whether there were any.

        An unhandled ``'error'`` is raised.
        """
        listeners = list(self._listeners.get(event, ()))
        if event == 'error' and not listeners:
            raise a[0]
        for listener in listeners:
            listener(*a)
        return bool(listeners)


class Writable(_Emitter):
    """Writable side of a pipe."""

    def __init__(self, stream: ByteSink) -> None:
        super().__init__()
        self.stream = stream
        self.ended = False
        self.closed = False

    async def write(self, chunk: bytes) -> bool:
        """Write and drain a chunk, emit ``'error'`` on failure."""
        try:
            await _call(self.stream, 'write', chunk)
            if hasattr(self.stream, 'drain'):
                await _call(self.stream, 'drain')
        except Exception as e:  # noqa: BLE001
            self.emit('error', e)
            return False
        return True

    async def end(self) -> None:
        """Flush, emit ``'finish'``, then close."""
        if self.ended or self.closed:
            return
        self.ended = True
        try:
            if hasattr(self.stream, 'flush'):
                await _call(self.stream, 'flush')
        except Exception as e:  # noqa: BLE001
            self.emit('error', e)
            return
        self.emit('finish')
        await self.close()

    async def close(self) -> None:
        """Close the underlying stream once, emit ``'close'``."""
        if self.closed:
            return
        self.closed = True
        try:
            await _call(self.stream, 'close')
            if hasattr(self.stream, 'wait_closed'):
                await _call(self.stream, 'wait_closed')
        except Exception as e:  # noqa: BLE001
            self.emit('error', e)
            return
        self.emit('close')


class Readable(_Emitter):
    """Readable side of a pipe."""

    def __init__(self, stream: ByteSource) -> None:
        super().__init__()
        self.stream = stream

    async def read(self, size: int = DEFAULT_CHUNK_SIZE) -> bytes | None:
        """Read a chunk; ``b''`` at EOF, ``None`` after emitting an error."""
        try:
            chunk = await _call(self.stream, 'read', size)
        except Exception as e:  # noqa: BLE001
            self.emit('error', e)
            return None
        return typing.cast(bytes, chunk)

    async def _transfer(
        self,
        destination: Writable,
        end: bool,  # noqa: FBT001
        chunk_size: int,
    ) -> None:
        while chunk := await self.read(chunk_size):
            if not await destination.write(chunk):
                return
        if chunk is None:
            return  # read failed, reported already
        logger.debug('%r reached EOF', self.stream)
        self.emit('end')
        if end:
            await destination.end()

    def pipe(
        self,
        destination: Writable,
        *,
        end: bool = True,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> 'asyncio.Task[None]':
        """Start copying everything to destination in a background task.

        Ends (flushes and closes) destination on EOF unless ``end=False``.
        Failures are reported with ``'error'`` events
        of the endpoint that failed, the transfer stops on the first one.
        """
        return asyncio.create_task(
            self._transfer(destination, end, chunk_size),
        )


__all__ = [
    'DEFAULT_CHUNK_SIZE',
    'ByteSink',
    'ByteSource',
    'Readable',
    'Writable',
]
