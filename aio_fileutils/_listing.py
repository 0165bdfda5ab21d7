# SPDX-FileCopyrightText: 2023 Alexander Sosedkin <monk@unboiled.info>
# SPDX-License-Identifier: GPL-3.0

"""Directory listing and walking."""

import asyncio
import dataclasses
import enum
import inspect
import os
import pathlib
import typing

if typing.TYPE_CHECKING:
    EntryFilter = typing.Literal['files', 'dirs', 'both']

T = typing.TypeVar('T')

WalkCallback = typing.Callable[
    [pathlib.Path, str],
    T | None | typing.Awaitable[T | None],
]


class EntryKind(enum.Enum):
    FILE = 'file'
    DIRECTORY = 'directory'
    OTHER = 'other'


@dataclasses.dataclass(frozen=True)
class DirectoryEntry:
    """A single directory entry: a name and what it is."""

    name: str
    kind: EntryKind

    @classmethod
    def from_dir_entry(cls, entry: os.DirEntry[str]) -> 'DirectoryEntry':
        # symlinks are not followed, a link to a file is not a file
        if entry.is_file(follow_symlinks=False):
            kind = EntryKind.FILE
        elif entry.is_dir(follow_symlinks=False):
            kind = EntryKind.DIRECTORY
        else:
            kind = EntryKind.OTHER
        return cls(entry.name, kind)


# the whole enumeration runs in one executor job,
# iterating aiofiles.os.scandir would block the loop per entry
def _scan(path: pathlib.Path) -> list[DirectoryEntry]:
    with os.scandir(path) as it:
        return [DirectoryEntry.from_dir_entry(e) for e in it]


async def list_entries(path: str | os.PathLike[str]) -> list[DirectoryEntry]:
    """List immediate entries of a directory in enumeration order."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _scan, pathlib.Path(path))


_FILTERS: dict[str, frozenset[EntryKind]] = {
    'files': frozenset({EntryKind.FILE}),
    'dirs': frozenset({EntryKind.DIRECTORY}),
    'both': frozenset(EntryKind),
}


async def read_directory(
    path: str | os.PathLike[str],
    type: 'EntryFilter' = 'files',  # noqa: A002
) -> list[pathlib.Path]:
    """Return full paths of directory entries, filtered by type.

    ``type`` is one of ``'files'`` (default), ``'dirs'`` or ``'both'``;
    ``'both'`` does no filtering at all.
    """
    try:
        kinds = _FILTERS[type]
    except KeyError:
        msg = f'unknown entry type filter {type!r}'
        raise ValueError(msg) from None
    path = pathlib.Path(path)
    return [
        path / entry.name
        for entry in await list_entries(path)
        if entry.kind in kinds
    ]


async def walk(
    root: str | os.PathLike[str],
    callback: WalkCallback[T] | None = None,
    results: list[typing.Any] | None = None,
) -> list[typing.Any]:
    """Crawl a directory tree, accumulating per-file results.

    All files of a directory are processed, one at a time, before
    descending into its subdirectories, which are then walked one after
    another. ``callback(full_path, name)`` may be a coroutine function;
    its result is appended to ``results`` unless it is ``None``.
    Without a callback the full paths themselves are collected.

    ``results`` is appended to in place and returned,
    which allows merging several walks into one list.
    """
    if results is None:
        results = []
    root = pathlib.Path(root)
    subdirs = []
    for entry in await list_entries(root):
        full_path = root / entry.name
        if entry.kind is EntryKind.FILE:
            if callback is None:
                results.append(full_path)
                continue
            r = callback(full_path, entry.name)
            if inspect.isawaitable(r):
                r = await r
            if r is not None:
                results.append(r)
        elif entry.kind is EntryKind.DIRECTORY:
            # save this until we're done with files
            subdirs.append(full_path)
    for d in subdirs:
        await walk(d, callback, results)
    return results


__all__ = [
    'DirectoryEntry',
    'EntryKind',
    'list_entries',
    'read_directory',
    'walk',
]
