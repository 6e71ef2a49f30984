# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Glob-filtered directory listing with cycle-safe recursion.

Entries are classified by what they resolve to, so a link to a file is
listed as a file and a link to a directory as a directory. Dangling links
are neither.

Without ``recursive`` the walk goes only as deep as the pattern has
segments and only into directories matching the pattern so far. With
``recursive`` every directory is visited depth-first and the pattern is
matched against the whole relative path, so ``dir/*`` keeps only the direct
children of ``dir``. The default pattern ``*`` is the exception: it keeps
every entry whose own name is not hidden, at any depth.
"""

from __future__ import annotations

import os
from collections.abc import Sequence

from . import _host as host
from ._path import RECURSIVE_WILDCARD, SEPARATOR, glob_match, pattern_depth
from ._types import FileKind
from .dbc import require
from .errors import NotFoundError
from .runtime.logging import StructuredLogger, get_logger

__all__ = ["DEFAULT_PATTERN", "list_entries"]

DEFAULT_PATTERN = "*"

logger: StructuredLogger = get_logger(__name__, context={"component": "listing"})

type _Identity = tuple[int, int]


def _root_is_absolute(root: str, *_: object, **__: object) -> bool:
    return os.path.isabs(root)


@require(_root_is_absolute)
def list_entries(
    root: str, pattern: str, *, kind: FileKind, recursive: bool
) -> list[str]:
    """Relative paths of entries of ``kind`` under ``root`` matching ``pattern``.

    Args:
        root: Absolute path of the directory to list.
        pattern: Glob pattern, relative to ``root``.
        kind: ``FileKind.FILE`` or ``FileKind.DIRECTORY``.
        recursive: Walk every subdirectory instead of following the pattern.

    Raises:
        ValueError: ``pattern`` is empty or absolute, or ``kind`` is not
            listable.
        NotFoundError: ``root`` does not exist.
        NotDirectoryError: ``root`` is not a directory.
        InvalidAccessError: A directory on the way cannot be read.
    """
    if not pattern or pattern.startswith(SEPARATOR):
        msg = f"Listing pattern must be a non-empty relative glob: {pattern!r}"
        raise ValueError(msg)
    if kind not in {FileKind.FILE, FileKind.DIRECTORY}:
        msg = f"Cannot list entries of kind {kind.value}."
        raise ValueError(msg)
    walk = _Walk(
        pattern=pattern,
        segments=tuple(pattern.split(SEPARATOR)),
        kind=kind,
        recursive=recursive,
        depth=None if recursive else pattern_depth(pattern),
        match_names=recursive and pattern == DEFAULT_PATTERN,
    )
    try:
        identity = _identity(root)
    except FileNotFoundError:
        raise NotFoundError(root) from None
    walk.visit(root, (), frozenset({identity}))
    return walk.results


def _identity(path: str) -> _Identity:
    info = os.stat(path)
    return info.st_dev, info.st_ino


class _Walk:
    __slots__ = (
        "depth",
        "kind",
        "match_names",
        "pattern",
        "recursive",
        "results",
        "segments",
    )

    def __init__(
        self,
        *,
        pattern: str,
        segments: tuple[str, ...],
        kind: FileKind,
        recursive: bool,
        depth: int | None,
        match_names: bool,
    ) -> None:
        self.pattern = pattern
        self.segments = segments
        self.kind = kind
        self.recursive = recursive
        self.depth = depth
        self.match_names = match_names
        self.results: list[str] = []

    def visit(
        self, directory: str, prefix: tuple[str, ...], ancestors: frozenset[_Identity]
    ) -> None:
        for name, entry in host.list_directory(directory):
            relative = (*prefix, name)
            if entry.resolved is self.kind and self._matches(name, relative):
                self.results.append(SEPARATOR.join(relative))
            if not entry.is_directory or not self._may_descend(relative):
                continue
            child = os.path.join(directory, name)
            identity = _identity(child)
            if identity in ancestors:
                logger.warning(
                    "Not descending into %s: directory cycle",
                    child,
                    event="listing.cycle",
                    context={"relative": SEPARATOR.join(relative)},
                )
                continue
            self.visit(child, relative, ancestors | {identity})

    def _matches(self, name: str, relative: Sequence[str]) -> bool:
        candidate = name if self.match_names else SEPARATOR.join(relative)
        return glob_match(candidate, self.pattern)

    def _may_descend(self, relative: Sequence[str]) -> bool:
        if self.recursive:
            return True
        if self.depth is not None and len(relative) >= self.depth:
            return False
        # Prune directories that cannot lead to a match.
        for name, segment in zip(relative, self.segments, strict=False):
            if segment == RECURSIVE_WILDCARD:
                return True
            if not glob_match(name, segment):
                return False
        return True
