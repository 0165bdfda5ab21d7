# SPDX-FileCopyrightText: 2023 Alexander Sosedkin <monk@unboiled.info>
# SPDX-License-Identifier: GPL-3.0

"""Pipe a readable stream into a writable one as a single awaitable."""

import asyncio
import dataclasses
import logging
import typing

from aio_fileutils._streams import (
    DEFAULT_CHUNK_SIZE,
    ByteSink,
    ByteSource,
    Readable,
    Writable,
)

if typing.TYPE_CHECKING:
    ResolveOn = typing.Literal['finish', 'close']

_RESOLVE_ON = frozenset({'finish', 'close'})

logger = logging.getLogger(__name__)

# transfers outliving their pipe call, until they are done
_background: set['asyncio.Task[None]'] = set()


def _transfer_done(task: 'asyncio.Task[None]') -> None:
    _background.discard(task)
    if task.cancelled():
        return
    e = task.exception()
    if e is not None:
        logger.warning(
            'transfer failed after pipe returned',
            exc_info=(type(e), e, e.__traceback__),
        )


@dataclasses.dataclass(frozen=True)
class PipeOptions:
    """Options for pipe.

    ``resolve_on`` picks the destination event that means success:
    ``'close'`` (default) or ``'finish'``.
    The rest is passed to ``Readable.pipe`` as is:
    ``end`` (end the destination on EOF, default True)
    and ``chunk_size`` (default 64 KiB).
    """

    resolve_on: 'ResolveOn' = 'close'
    end: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.resolve_on not in _RESOLVE_ON:
            msg = f'cannot resolve on {self.resolve_on!r}'
            raise ValueError(msg)
        if self.chunk_size <= 0:
            msg = f'chunk_size must be positive, got {self.chunk_size}'
            raise ValueError(msg)

    @classmethod
    def merge(
        cls,
        options: 'PipeOptions | None' = None,
        **overrides: typing.Any,  # noqa: ANN401
    ) -> 'PipeOptions':
        """Apply keyword overrides on top of options or the defaults."""
        return dataclasses.replace(options or cls(), **overrides)

    def pipe_kwargs(self) -> dict[str, typing.Any]:
        kwa = dataclasses.asdict(self)
        del kwa['resolve_on']
        return kwa


async def pipe(
    source: Readable | ByteSource,
    destination: Writable | ByteSink,
    options: PipeOptions | None = None,
    **overrides: typing.Any,  # noqa: ANN401
) -> None:
    """Copy source to destination, return once destination is done.

    Raises the first error either of the two streams reports.
    Raw streams are wrapped into Readable/Writable;
    pass a Writable yourself when piping with ``end=False``
    to be able to close it later.
    There's no timeout, use ``asyncio.timeout`` for that.
    """
    opts = PipeOptions.merge(options, **overrides)
    src = source if isinstance(source, Readable) else Readable(source)
    dst = (
        destination
        if isinstance(destination, Writable)
        else Writable(destination)
    )

    settled: asyncio.Future[None] = asyncio.get_running_loop().create_future()

    def detach() -> None:
        src.off('error', on_error)
        dst.off('error', on_error)
        dst.off(opts.resolve_on, on_done)

    def on_error(e: BaseException) -> None:
        detach()
        if not settled.done():
            settled.set_exception(e)

    def on_done() -> None:
        detach()
        if not settled.done():
            settled.set_result(None)

    src.on('error', on_error)
    dst.on('error', on_error)
    dst.on(opts.resolve_on, on_done)

    transfer = src.pipe(dst, **opts.pipe_kwargs())
    _background.add(transfer)
    transfer.add_done_callback(_transfer_done)
    try:
        await settled
    except BaseException:
        # stop pumping into a failed destination or from a failed source
        transfer.cancel()
        detach()
        raise


__all__ = ['PipeOptions', 'pipe']
