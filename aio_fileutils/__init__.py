# SPDX-FileCopyrightText: 2023 Alexander Sosedkin <monk@unboiled.info>
# SPDX-License-Identifier: GPL-3.0

"""Small asyncio helpers for files, directories and streams."""

from aio_fileutils._handle import (
    FileHandle,
    WriteShortfallError,
    open_file,
    unlink_ignore,
)
from aio_fileutils._listing import (
    DirectoryEntry,
    EntryKind,
    list_entries,
    read_directory,
    walk,
)
from aio_fileutils._pipe import PipeOptions, pipe
from aio_fileutils._streams import Readable, Writable

__all__ = [
    'DirectoryEntry',
    'EntryKind',
    'FileHandle',
    'PipeOptions',
    'Readable',
    'WriteShortfallError',
    'Writable',
    'list_entries',
    'open_file',
    'pipe',
    'read_directory',
    'unlink_ignore',
    'walk',
]
