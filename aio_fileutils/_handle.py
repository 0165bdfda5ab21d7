# SPDX-FileCopyrightText: 2023 Alexander Sosedkin <monk@unboiled.info>
# SPDX-License-Identifier: GPL-3.0

"""File handles with verified writes and best-effort cleanup."""

import contextlib
import errno
import logging
import os
import pathlib
import types
import typing

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

Data = bytes | bytearray | memoryview | str


class WriteShortfallError(OSError):
    """Fewer bytes were written than requested."""

    def __init__(
        self,
        path: str | os.PathLike[str] | None,
        requested: int,
        written: int | None,
    ) -> None:
        self.path = path
        self.requested = requested
        self.written = written
        super().__init__(
            errno.EIO,
            f'short write to {path}: '
            f'requested {requested} bytes, written {written}',
        )

    def __reduce__(self) -> tuple[typing.Any, ...]:
        return (type(self), (self.path, self.requested, self.written))


class _AsyncFile(typing.Protocol):
    async def read(self, size: int = -1) -> typing.Any: ...  # protocol
    async def write(self, data: typing.Any) -> int: ...  # protocol
    async def seek(self, offset: int, whence: int = 0) -> int: ...  # protocol
    async def tell(self) -> int: ...  # protocol
    async def flush(self) -> None: ...  # protocol
    async def close(self) -> None: ...  # protocol

    @property
    def closed(self) -> bool: ...  # protocol


class FileHandle:
    """An open asynchronous file plus a few safety helpers.

    Wraps the object returned by ``aiofiles.open``, available as ``file``.
    """

    def __init__(
        self,
        file: _AsyncFile,
        path: str | os.PathLike[str] | None = None,
    ) -> None:
        self.file = file
        self.path = path

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.path!r}>'

    @property
    def closed(self) -> bool:
        return self.file.closed

    async def read(self, size: int = -1) -> typing.Any:
        return await self.file.read(size)

    async def write(self, data: Data) -> int:
        return await self.file.write(data)

    async def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return await self.file.seek(offset, whence)

    async def tell(self) -> int:
        return await self.file.tell()

    async def flush(self) -> None:
        await self.file.flush()

    async def close(self) -> None:
        await self.file.close()

    async def write_verified(
        self,
        data: Data,
        offset: int = 0,
        length: int | None = None,
        position: int | None = None,
    ) -> int:
        """Write ``data[offset:offset + length]``, insist on all of it.

        Seeks to ``position`` first if one is given.
        Raises WriteShortfallError if the file reports
        a different number of bytes written than requested.
        """
        if length is None:
            length = len(data) - offset
        if offset < 0 or length < 0 or offset + length > len(data):
            msg = (
                f'offset {offset} and length {length} '
                f'out of range for {len(data)} bytes of data'
            )
            raise ValueError(msg)
        chunk = (
            data[offset : offset + length]
            if isinstance(data, str)
            else memoryview(data)[offset : offset + length]
        )
        if position is not None:
            await self.file.seek(position)
        written = await self.file.write(chunk)
        if written != length:
            raise WriteShortfallError(self.path, length, written)
        return written

    async def close_ignore(self) -> None:
        """Close, ignoring any error."""
        with contextlib.suppress(Exception):
            await self.file.close()

    async def close_log(self, log: logging.Logger | None = None) -> None:
        """Close, logging an error instead of raising it."""
        try:
            await self.file.close()
        except Exception:  # noqa: BLE001
            (log or logger).warning(
                'error closing %s',
                self.path,
                exc_info=True,
            )

    async def __aenter__(self) -> typing.Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        await self.close()


async def open_file(
    path: str | os.PathLike[str],
    mode: str = 'r',
    **kwargs: typing.Any,  # noqa: ANN401
) -> FileHandle:
    """Open a file with aiofiles, return a FileHandle wrapping it."""
    f = await aiofiles.open(path, mode, **kwargs)
    return FileHandle(typing.cast(_AsyncFile, f), path)


async def unlink_ignore(path: str | os.PathLike[str]) -> None:
    """Remove a file if possible, never raise."""
    try:
        await aiofiles.os.remove(pathlib.Path(path))
    except OSError as e:
        logger.debug('not removing %s: %s', path, e)


__all__ = [
    'FileHandle',
    'WriteShortfallError',
    'open_file',
    'unlink_ignore',
]
