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

"""Typed path values and the algebra over them.

``FilePath`` and ``DirectoryPath`` are immutable values: constructing one never
touches the disk. A path is either absolute, or relative to a ``base``
directory path. A relative path without an explicit base is relative to the
process's current working directory *at the time it is resolved*, so the
same relative value can resolve to different locations if the working
directory changes in between.

Example::

    dirpath = DirectoryPath.parse("dir/dir1")
    filepath = dirpath.append_file("file.txt")   # dir/dir1/file.txt
    filepath.parent() == dirpath                  # True
    dirpath.is_a_parent_of(filepath)              # True
    filepath.absolute_string                      # "/<cwd>/dir/dir1/file.txt"
"""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from itertools import chain
from typing import TYPE_CHECKING, Final, Self

from .dbc import ensure, invariant

if TYPE_CHECKING:
    from ._directory import Directory
    from ._file import EditableFile, File
    from ._types import IfExists

SEPARATOR: Final[str] = "/"
RECURSIVE_WILDCARD: Final[str] = "**"


def normalize_segments(
    parts: Iterable[str], *, absolute: bool
) -> tuple[str, ...]:
    """Normalize path components.

    Components containing separators are split, empty and ``.`` components
    are dropped, and ``..`` cancels the preceding component. Unmatched ``..``
    components are kept on relative paths and dropped at the root of
    absolute paths.

    Examples:
        >>> normalize_segments(["a", "", ".", "b", "..", "c"], absolute=True)
        ('a', 'c')
        >>> normalize_segments(["..", "a"], absolute=False)
        ('..', 'a')
        >>> normalize_segments(["..", "a"], absolute=True)
        ('a',)
    """
    result: list[str] = []
    for segment in chain.from_iterable(part.split(SEPARATOR) for part in parts):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if result and result[-1] != "..":
                _ = result.pop()
                continue
            if absolute:
                continue
        result.append(segment)
    return tuple(result)


def split_path(text: str) -> tuple[bool, tuple[str, ...]]:
    """Return ``(is_absolute, normalized_segments)`` for a path string."""

    absolute = text.startswith(SEPARATOR)
    return absolute, normalize_segments(text.split(SEPARATOR), absolute=absolute)


def _ambient_segments() -> tuple[str, ...]:
    return normalize_segments(os.getcwd().split(SEPARATOR), absolute=True)


def _child_segments(name: str) -> tuple[str, ...]:
    if not name:
        msg = "Child name must not be empty."
        raise ValueError(msg)
    absolute, segments = split_path(name)
    if absolute:
        msg = f"Child name must be relative: {name}"
        raise ValueError(msg)
    if not segments or ".." in segments:
        msg = f"Child name must stay below its parent: {name}"
        raise ValueError(msg)
    return segments


def _segments_are_normalized(path: _PathBase) -> tuple[bool, str]:
    normalized = normalize_segments(path.segments, absolute=not path.relative)
    if normalized != path.segments:
        return False, f"segments not normalized: {path.segments!r}"
    if not path.relative and path.base is not None:
        return False, "absolute path carries a base"
    return True, ""


@dataclass(slots=True, frozen=True, repr=False)
class _PathBase:
    """Shared algebra for file and directory paths.

    Attributes:
        segments: Normalized components, relative to ``base`` (or the working
            directory) when ``relative`` is true, else from the root.
        base: Directory the relative segments start from. None with
            ``relative=True`` means the working directory at resolution time.
        relative: False for absolute paths.
    """

    segments: tuple[str, ...] = ()
    base: DirectoryPath | None = None
    relative: bool = False

    def __post_init__(self) -> None:
        relative = self.relative or self.base is not None
        object.__setattr__(self, "relative", relative)
        object.__setattr__(
            self,
            "segments",
            normalize_segments(tuple(self.segments), absolute=not relative),
        )

    @classmethod
    def parse(
        cls, text: str | os.PathLike[str], *, base: DirectoryPath | None = None
    ) -> Self:
        """Build a path from a string.

        A leading separator makes the path absolute and ``base`` is ignored.
        Otherwise the path is relative to ``base``, or to the working
        directory at resolution time when ``base`` is None.
        """
        absolute, segments = split_path(os.fspath(text))
        if absolute:
            return cls(segments=segments)
        return cls(segments=segments, base=base, relative=True)

    @property
    def absolute(self) -> Self:
        """This path resolved to absolute form, following the base chain."""

        if not self.relative:
            return self
        if self.base is not None:
            start = self.base.absolute.segments
        else:
            start = _ambient_segments()
        return type(self)(
            segments=normalize_segments(start + self.segments, absolute=True)
        )

    @property
    def relative_string(self) -> str | None:
        """Path relative to its base, or None for absolute paths."""

        if not self.relative:
            return None
        return SEPARATOR.join(self.segments) or "."

    @property
    def absolute_string(self) -> str:
        return SEPARATOR + SEPARATOR.join(self.absolute.segments)

    @property
    def string(self) -> str:
        """``relative_string`` when relative, otherwise ``absolute_string``."""

        relative = self.relative_string
        return relative if relative is not None else self.absolute_string

    @property
    def name(self) -> str:
        """Last component; ``"/"`` for the root."""

        segments = self.segments
        if not segments or segments[-1] == "..":
            segments = self.absolute.segments
        return segments[-1] if segments else SEPARATOR

    @property
    def name_without_extension(self) -> str:
        name = self.name
        extension = self.extension
        if extension is None:
            return name
        return name[: -(len(extension) + 1)]

    @property
    def extension(self) -> str | None:
        """Text after the last dot of ``name``; None for dotfiles or no dot."""

        name = self.name
        index = name.rfind(".")
        if index <= 0 or index == len(name) - 1:
            return None
        return name[index + 1 :]

    @ensure(lambda self, result: result.is_a_parent_of(self) or not result.segments)
    def parent(self) -> DirectoryPath:
        """Directory containing this path; the root is its own parent."""

        if self.relative and self.segments and self.segments[-1] != "..":
            return DirectoryPath(
                segments=self.segments[:-1], base=self.base, relative=True
            )
        return DirectoryPath(segments=self.absolute.segments[:-1])

    def exists(self) -> bool:
        """True if something exists at this path, following symbolic links."""

        return os.path.exists(self.absolute_string)

    def __fspath__(self) -> str:
        return self.absolute_string

    def __str__(self) -> str:
        return self.string

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.string!r})"


def _file_path_names_something(path: FilePath) -> tuple[bool, str]:
    if not path.segments or path.segments[-1] == "..":
        return False, "file path must end in a name"
    return True, ""


@invariant(_segments_are_normalized, _file_path_names_something)
@dataclass(slots=True, frozen=True, repr=False)
class FilePath(_PathBase):
    """Path naming a file.

    A file path always ends in a name: it can never denote the root, the
    working directory, or a path with a trailing separator.
    """

    def __post_init__(self) -> None:
        _PathBase.__post_init__(self)
        if not self.segments or self.segments[-1] == "..":
            msg = f"A file path must end in a file name: {self.segments!r}"
            raise ValueError(msg)

    def open(self) -> File:
        """Open the file for reading."""

        from ._file import File

        return File.open(self)

    def create(self, if_exists: IfExists) -> File:
        """Create the file according to ``if_exists`` and open it for reading."""

        from ._file import File

        return File.create(self, if_exists)

    def edit(self) -> EditableFile:
        from ._file import EditableFile

        return EditableFile.open(self)


@invariant(_segments_are_normalized)
@dataclass(slots=True, frozen=True, repr=False)
class DirectoryPath(_PathBase):
    """Path naming a directory."""

    @classmethod
    def root(cls) -> DirectoryPath:
        return cls(segments=())

    @classmethod
    def home(cls) -> DirectoryPath:
        return cls.parse(os.path.expanduser("~"))

    @classmethod
    def current(cls) -> DirectoryPath:
        """Absolute path of the working directory right now."""

        return cls(segments=_ambient_segments())

    def open(self, *, writable: bool = False) -> Directory:
        from ._directory import Directory

        return Directory.open(self, writable=writable)

    def create(self, if_exists: IfExists) -> Directory:
        """Create the directory according to ``if_exists`` and open it writable."""

        from ._directory import Directory

        return Directory.create(self, if_exists)

    @ensure(lambda self, name, result: self.is_a_parent_of(result))
    def append_file(self, name: str) -> FilePath:
        """Child file path; ``name`` may contain separators but must be relative."""

        return FilePath(
            segments=self.segments + _child_segments(name),
            base=self.base,
            relative=self.relative,
        )

    @ensure(lambda self, name, result: self.is_a_parent_of(result))
    def append_directory(self, name: str) -> DirectoryPath:
        """Child directory path; ``name`` may contain separators but must be relative."""

        return DirectoryPath(
            segments=self.segments + _child_segments(name),
            base=self.base,
            relative=self.relative,
        )

    def is_a_parent_of(self, other: FilePath | DirectoryPath) -> bool:
        """True if ``other`` lies strictly below this directory."""

        mine = self.absolute.segments
        theirs = other.absolute.segments
        return len(mine) < len(theirs) and theirs[: len(mine)] == mine


type AnyPath = FilePath | DirectoryPath


def glob_match(path: str, pattern: str) -> bool:
    """Check a relative path against a glob pattern, segment by segment.

    ``*``, ``?`` and ``[...]`` never match across a separator, ``**`` matches
    any number of whole segments, and wildcards never match a leading dot.

    Examples::

        glob_match("dir/newerdir", "dir/*")       # True
        glob_match("dir/newerdir/x", "dir/*")     # False
        glob_match("dir/newerdir/x", "dir/**")    # True
        glob_match("file2.txt", "file?.*")        # True
        glob_match(".hidden", "*")                # False
    """
    return _match_segments(
        tuple(path.split(SEPARATOR)), tuple(pattern.split(SEPARATOR))
    )


def pattern_depth(pattern: str) -> int | None:
    """Number of segments a pattern spans, or None if it contains ``**``."""

    segments = pattern.split(SEPARATOR)
    if RECURSIVE_WILDCARD in segments:
        return None
    return len(segments)


def _match_segments(names: Sequence[str], patterns: Sequence[str]) -> bool:
    if not patterns:
        return not names
    head, rest = patterns[0], patterns[1:]
    if head == RECURSIVE_WILDCARD:
        for index in range(len(names) + 1):
            if _match_segments(names[index:], rest):
                return True
            # "**" never descends through hidden names.
            if index < len(names) and names[index].startswith("."):
                return False
        return False
    if not names:
        return False
    return _match_name(names[0], head) and _match_segments(names[1:], rest)


def _match_name(name: str, pattern: str) -> bool:
    if name.startswith(".") and not pattern.startswith("."):
        return False
    return fnmatch.fnmatchcase(name, pattern)


__all__ = [
    "RECURSIVE_WILDCARD",
    "SEPARATOR",
    "AnyPath",
    "DirectoryPath",
    "FilePath",
    "glob_match",
    "normalize_segments",
    "pattern_depth",
    "split_path",
]
