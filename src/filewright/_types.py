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

"""Entry classification and the creation conflict policy.

- ``FileType`` describes whatever currently occupies a path. It is computed
  on demand and never cached.
- ``IfExists`` is the policy every creation operation takes when something
  already occupies the target path.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Final, Literal, cast, get_args

IfExists = Literal["throw_error", "open", "replace"]

IF_EXISTS_OPTIONS: Final[tuple[str, ...]] = get_args(IfExists)


def validate_if_exists(value: str) -> IfExists:
    """Return ``value`` unchanged if it is a known policy.

    Raises:
        ValueError: For anything other than ``throw_error``, ``open`` or
            ``replace``.
    """
    if value not in IF_EXISTS_OPTIONS:
        msg = f"Unknown if_exists policy {value!r}; expected one of {IF_EXISTS_OPTIONS}."
        raise ValueError(msg)
    return cast(IfExists, value)


class FileKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMBOLIC_LINK = "symbolic_link"
    NONE = "none"


def _kind_of_mode(mode: int) -> FileKind:
    if stat.S_ISDIR(mode):
        return FileKind.DIRECTORY
    if stat.S_ISLNK(mode):
        return FileKind.SYMBOLIC_LINK
    # Sockets, fifos and devices are opened like files.
    return FileKind.FILE


@dataclass(slots=True, frozen=True)
class FileType:
    """What occupies a path right now.

    Attributes:
        kind: Kind of the entry itself, without following links.
        target: For ``SYMBOLIC_LINK`` only, the kind found after following
            every link in the chain (``NONE`` when the link dangles or loops).

    Example::

        entry = FileType.of("/tmp/link_to_dir")
        entry.kind          # FileKind.SYMBOLIC_LINK
        entry.is_directory  # True, links are looked through
    """

    kind: FileKind
    target: FileKind | None = None

    @classmethod
    def of(cls, path: str | os.PathLike[str]) -> FileType:
        """Classify ``path`` with ``lstat`` and, for links, ``stat``."""

        try:
            link_mode = os.lstat(path).st_mode
        except (FileNotFoundError, NotADirectoryError):
            return NONE
        kind = _kind_of_mode(link_mode)
        if kind is not FileKind.SYMBOLIC_LINK:
            return cls(kind=kind)
        try:
            target_mode = os.stat(path).st_mode
        except OSError:
            # Dangling link, or ELOOP for a cycle of links.
            return cls(kind=kind, target=FileKind.NONE)
        return cls(kind=kind, target=_kind_of_mode(target_mode))

    @property
    def resolved(self) -> FileKind:
        """Kind after following links."""

        if self.kind is FileKind.SYMBOLIC_LINK:
            return self.target or FileKind.NONE
        return self.kind

    @property
    def exists(self) -> bool:
        """True for any entry, dangling links included."""

        return self.kind is not FileKind.NONE

    @property
    def is_file(self) -> bool:
        return self.resolved is FileKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.resolved is FileKind.DIRECTORY

    @property
    def is_symbolic_link(self) -> bool:
        return self.kind is FileKind.SYMBOLIC_LINK


NONE: Final[FileType] = FileType(kind=FileKind.NONE)


__all__ = [
    "IF_EXISTS_OPTIONS",
    "NONE",
    "FileKind",
    "FileType",
    "IfExists",
    "validate_if_exists",
]
