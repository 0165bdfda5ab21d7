# SPDX-FileCopyrightText: 2023 Alexander Sosedkin <monk@unboiled.info>
# SPDX-License-Identifier: GPL-3.0

"""Provide directory tree fixtures.

``tree`` is a real one under tmp_path,
``fake_tree`` replaces directory enumeration
so that the order of entries is under the test's control.
"""

import os
import pathlib
import typing

import pytest

import aio_fileutils._listing
from aio_fileutils import DirectoryEntry, EntryKind

# a nested dict is a directory, a str is a file with that content
Layout = dict[str, typing.Any]

TREE: Layout = {
    'f1': 'one',
    'f2': 'two',
    'd': {
        'f3': 'three',
        'e': {'f5': 'five'},
    },
    'g': {'f4': 'four'},
}


def make_tree(root: pathlib.Path, layout: Layout) -> None:
    """Create files and directories described by layout."""
    root.mkdir(exist_ok=True)
    for name, content in layout.items():
        if isinstance(content, dict):
            make_tree(root / name, content)
        else:
            (root / name).write_text(content)


@pytest.fixture()
def tree(tmp_path: pathlib.Path) -> pathlib.Path:
    """Return the root of a real directory tree laid out like TREE."""
    root = tmp_path / 'root'
    make_tree(root, TREE)
    return root


@pytest.fixture()
def fake_tree(
    monkeypatch: pytest.MonkeyPatch,
) -> typing.Callable[[Layout], pathlib.Path]:
    """Make walk and read_directory see a layout, in its order."""

    def install(layout: Layout) -> pathlib.Path:
        root = pathlib.Path('/fake')

        async def list_entries(
            path: str | os.PathLike[str],
        ) -> list[DirectoryEntry]:
            node: typing.Any = layout
            for part in pathlib.Path(path).relative_to(root).parts:
                node = node[part]
            if not isinstance(node, dict):
                raise NotADirectoryError(path)
            return [
                DirectoryEntry(
                    name,
                    EntryKind.DIRECTORY
                    if isinstance(sub, dict)
                    else EntryKind.OTHER
                    if sub is None
                    else EntryKind.FILE,
                )
                for name, sub in node.items()
            ]

        monkeypatch.setattr(
            aio_fileutils._listing,
            'list_entries',
            list_entries,
        )
        return root

    return install
