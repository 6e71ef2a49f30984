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

"""File handles backed by native binary file objects.

``File`` is opened for reading; ``EditableFile`` is opened for reading and
writing, and every write-capable open is checked against the sandbox.
"""

from __future__ import annotations

import codecs
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, Self

from . import _host as host
from . import _links as links
from . import _streams as streams
from ._config import get_config
from ._lifecycle import (
    as_file_path,
    create_file_entry,
    open_file_handle,
    verify_deletable,
)
from ._path import FilePath
from ._types import IfExists
from .runtime.sandbox import (
    SandboxPolicy,
    verify_is_in_sandbox,
    verify_link_destination_in_sandbox,
)

__all__ = ["EditableFile", "File"]


def _default_encoding() -> str:
    return get_config().encoding


@dataclass(slots=True, eq=False)
class File:
    """Readable file handle.

    Use :meth:`open` or :meth:`create`; the constructor is internal.

    Example::

        with File.open("notes/todo.txt") as todo:
            for line in todo.lines():
                print(line)
    """

    _writing: ClassVar[bool] = False

    _path: FilePath
    _handle: BinaryIO
    _encoding: str = field(default_factory=_default_encoding)
    _decoder: codecs.IncrementalDecoder | None = field(default=None, init=False)
    _closed: bool = field(default=False, init=False)

    @classmethod
    def open(
        cls, path: FilePath | str, *, sandbox: SandboxPolicy | None = None
    ) -> Self:
        """Open an existing file.

        Raises:
            NotFoundError: Nothing exists at ``path``.
            IsDirectoryError: ``path`` is a directory.
            InvalidAccessError: The OS denied access.
            OutsideSandboxError: Opening for writing outside the sandbox.
        """
        file_path = as_file_path(path)
        if cls._writing:
            verify_is_in_sandbox(file_path, sandbox=sandbox)
            verify_link_destination_in_sandbox(file_path, sandbox=sandbox)
        handle = open_file_handle(file_path, writing=cls._writing)
        return cls(_path=file_path, _handle=handle)

    @classmethod
    def create(
        cls,
        path: FilePath | str,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> Self:
        """Create a file (and missing parent directories), then open it."""

        file_path = as_file_path(path)
        create_file_entry(file_path, if_exists, sandbox=sandbox)
        return cls.open(file_path, sandbox=sandbox)

    @classmethod
    def create_symbolic_link(
        cls,
        newlink: FilePath | str,
        target: File,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> File:
        """Create a link at ``newlink`` to ``target`` and open it like ``target``."""

        link_path = as_file_path(newlink)
        links.link_file(link_path, target.path, if_exists, sandbox=sandbox)
        return type(target).open(link_path, sandbox=sandbox)

    @property
    def path(self) -> FilePath:
        return self._path

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def encoding(self) -> str:
        """Codec used for text reads and writes."""

        return self._encoding

    @encoding.setter
    def encoding(self, value: str) -> None:
        _ = codecs.lookup(value)
        self._encoding = value
        self._decoder = None

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_closed(self) -> None:
        if self._closed:
            msg = "I/O operation on closed file"
            raise ValueError(msg)

    def read_some(self, size: int = streams.DEFAULT_CHUNK_SIZE) -> str | None:
        """Next piece of decoded text, or None once the file is exhausted."""

        self._check_closed()
        if self._decoder is None:
            self._decoder = streams.new_decoder(self._encoding)
        return streams.decode_some(self._handle, self._decoder, size)

    def read(self) -> str:
        """Remaining text from the current position to the end of file."""

        return "".join(iter(self.read_some, None))

    def lines(self) -> Iterator[str]:
        return streams.iter_lines(self)

    def write_to(self, target: streams.TextSink) -> None:
        """Copy the remaining text into anything with a ``write(str)`` method."""

        streams.copy_text(self, target)

    def delete(self, *, sandbox: SandboxPolicy | None = None) -> None:
        """Close the handle and remove the file from disk.

        A refused delete leaves the handle open.
        """
        verify_deletable(self._path, sandbox=sandbox)
        self.close()
        host.remove_entry(self._path.absolute_string)

    def close(self) -> None:
        if not self._closed:
            self._handle.close()
            self._closed = True

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._path.string!r})"


@dataclass(slots=True, eq=False, repr=False)
class EditableFile(File):
    """File handle opened for reading and writing.

    Writes always append at the end of the file and leave the read position
    where it was.
    """

    _writing: ClassVar[bool] = True

    def write(self, text: str) -> None:
        self._check_closed()
        _ = streams.append_text(self._handle, text, self._encoding)
