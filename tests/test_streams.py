# SPDX-FileCopyrightText: 2023 Alexander Sosedkin <monk@unboiled.info>
# SPDX-License-Identifier: GPL-3.0

"""Test the event-emitting stream wrappers."""

import io
import pathlib

import aiofiles
import pytest

from aio_fileutils import Readable, Writable


class _Sink:
    def __init__(self) -> None:
        self.log: list[str] = []

    def write(self, data: bytes) -> None:
        self.log.append(f'write {data.decode()}')

    def flush(self) -> None:
        self.log.append('flush')

    async def drain(self) -> None:
        self.log.append('drain')

    def close(self) -> None:
        self.log.append('close')

    async def wait_closed(self) -> None:
        self.log.append('wait_closed')


class _BadClose(_Sink):
    def close(self) -> None:
        msg = 'cannot close'
        raise OSError(msg)


def test_unhandled_error_raises() -> None:
    """Test that an error nobody listens to is raised."""
    w = Writable(_Sink())
    err = OSError('x')
    with pytest.raises(OSError) as ei:
        w.emit('error', err)
    assert ei.value is err
    assert not w.emit('finish')


def test_on_off() -> None:
    """Test adding and removing listeners."""
    r = Readable(io.BytesIO())
    calls: list[int] = []

    def listener(n: int) -> None:
        calls.append(n)

    r.on('data', listener)
    assert r.listener_count('data') == 1
    assert r.emit('data', 1)
    r.off('data', listener)
    r.off('data', listener)  # already gone
    r.off('nothing', listener)
    assert r.listener_count('data') == 0
    assert not r.emit('data', 2)
    assert calls == [1]


async def test_transfer_events() -> None:
    """Test the order of operations and events during a transfer."""
    sink = _Sink()
    r, w = Readable(io.BytesIO(b'abcde')), Writable(sink)
    events: list[str] = []
    r.on('end', lambda: events.append('end'))
    w.on('finish', lambda: events.append('finish'))
    w.on('close', lambda: events.append('close'))
    await r.pipe(w, chunk_size=2)
    assert events == ['end', 'finish', 'close']
    assert sink.log == [
        'write ab',
        'drain',
        'write cd',
        'drain',
        'write e',
        'drain',
        'flush',
        'close',
        'wait_closed',
    ]
    assert w.ended
    assert w.closed


async def test_close_once() -> None:
    """Test that closing twice closes once."""
    sink = _Sink()
    w = Writable(sink)
    closes: list[None] = []
    w.on('close', lambda: closes.append(None))
    await w.close()
    await w.close()
    await w.end()  # already closed, nothing to flush
    assert closes == [None]
    assert sink.log == ['close', 'wait_closed']
    assert not w.ended


async def test_end_after_close_real_file(tmp_path: pathlib.Path) -> None:
    """Test that ending a closed aiofiles file does not flush it."""
    w = Writable(await aiofiles.open(tmp_path / 'f', 'wb'))
    finishes: list[None] = []
    w.on('finish', lambda: finishes.append(None))
    await w.close()
    await w.end()
    assert finishes == []


async def test_close_error() -> None:
    """Test that a failing close is reported as an error, not 'close'."""
    w = Writable(_BadClose())
    events: list[object] = []
    w.on('error', events.append)
    w.on('close', lambda: events.append('close'))
    await w.close()
    assert len(events) == 1
    assert isinstance(events[0], OSError)
