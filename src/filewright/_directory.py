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

"""Directory handles.

A :class:`Directory` holds an OS directory descriptor for as long as it is
open. Handles opened with ``writable=True`` (and every handle returned by
``create``) were checked against the sandbox when opened, and only they may
create entries inside themselves.

Example::

    project = Directory.create("build", "open")
    project.create_file("logs/run.txt", "replace").write("started\\n")
    project.files("**/*.txt", recursive=True)   # [FilePath('logs/run.txt')]
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from typing import Self, overload

from . import _host as host
from . import _links as links
from ._file import EditableFile, File
from ._lifecycle import (
    as_directory_path,
    create_directory_entry,
    open_directory_descriptor,
    verify_deletable,
)
from ._listing import DEFAULT_PATTERN, list_entries
from ._path import DirectoryPath, FilePath
from ._types import FileKind, IfExists
from .errors import InvalidAccessError, NotFoundError
from .runtime.logging import StructuredLogger, get_logger
from .runtime.sandbox import (
    SandboxPolicy,
    change_directory,
    verify_is_in_sandbox,
    verify_link_destination_in_sandbox,
)

__all__ = ["DEFAULT_TEMP_PREFIX", "Directory"]

DEFAULT_TEMP_PREFIX = "filewright-"

logger: StructuredLogger = get_logger(__name__, context={"component": "directory"})


@dataclass(slots=True, eq=False, repr=False)
class Directory:
    """Open directory handle.

    Use :meth:`open`, :meth:`create` or one of the well-known locations;
    the constructor is internal.
    """

    _path: DirectoryPath
    _fd: int
    _writable: bool = False
    _closed: bool = field(default=False, init=False)

    @classmethod
    def open(
        cls,
        path: DirectoryPath | str,
        *,
        writable: bool = False,
        sandbox: SandboxPolicy | None = None,
    ) -> Self:
        """Open an existing directory.

        Raises:
            NotFoundError: Nothing exists at ``path``.
            NotDirectoryError: Something other than a directory is there.
            OutsideSandboxError: ``writable`` was requested outside the
                sandbox.
        """
        directory_path = as_directory_path(path)
        if writable:
            verify_is_in_sandbox(directory_path, sandbox=sandbox)
            verify_link_destination_in_sandbox(directory_path, sandbox=sandbox)
        fd = open_directory_descriptor(directory_path)
        return cls(_path=directory_path, _fd=fd, _writable=writable)

    @classmethod
    def create(
        cls,
        path: DirectoryPath | str,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> Self:
        """Create a directory (and missing parents), then open it writable."""

        directory_path = as_directory_path(path)
        create_directory_entry(directory_path, if_exists, sandbox=sandbox)
        return cls.open(directory_path, writable=True, sandbox=sandbox)

    @classmethod
    def create_symbolic_link(
        cls,
        newlink: DirectoryPath | str,
        target: Directory,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> Directory:
        """Create a link at ``newlink`` to ``target`` and open it."""

        link_path = as_directory_path(newlink)
        links.link_directory(link_path, target.path, if_exists, sandbox=sandbox)
        return type(target).open(link_path, writable=target.writable, sandbox=sandbox)

    @classmethod
    def current(cls) -> Self:
        """The working directory, opened writable."""

        return cls.open(DirectoryPath.current(), writable=True)

    @staticmethod
    def set_current(directory: Directory | DirectoryPath | str) -> None:
        """Change the process working directory."""

        if isinstance(directory, Directory):
            directory = directory.path
        change_directory(directory)

    @classmethod
    def root(cls) -> Self:
        return cls.open(DirectoryPath.root())

    @classmethod
    def home(cls) -> Self:
        return cls.open(DirectoryPath.home())

    @classmethod
    def create_temp_directory(cls, prefix: str = DEFAULT_TEMP_PREFIX) -> Self:
        """Create a fresh, empty directory in the system temporary location.

        The new directory is opened writable without consulting the sandbox.
        """
        location = tempfile.mkdtemp(prefix=prefix)
        logger.debug(
            "Created temporary directory %s",
            location,
            event="directory.create_temp",
        )
        path = DirectoryPath.parse(location)
        return cls(_path=path, _fd=open_directory_descriptor(path), _writable=True)

    @property
    def path(self) -> DirectoryPath:
        return self._path

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def writable(self) -> bool:
        return self._writable

    @property
    def closed(self) -> bool:
        return self._closed

    def fileno(self) -> int:
        """OS descriptor of the open directory."""

        self._check_closed()
        return self._fd

    def _check_closed(self) -> None:
        if self._closed:
            msg = "I/O operation on closed directory"
            raise ValueError(msg)

    def _check_writable(self) -> None:
        self._check_closed()
        if not self._writable:
            raise InvalidAccessError(self._path.absolute_string, writing=True)

    def open_file(self, name: str) -> File:
        """Open the file ``name`` inside this directory for reading."""

        return File.open(self._path.append_file(name))

    def edit_file(
        self, name: str, *, sandbox: SandboxPolicy | None = None
    ) -> EditableFile:
        """Open the file ``name`` inside this directory for reading and writing."""

        self._check_writable()
        return EditableFile.open(self._path.append_file(name), sandbox=sandbox)

    def open_directory(
        self,
        name: str,
        *,
        writable: bool = False,
        sandbox: SandboxPolicy | None = None,
    ) -> Directory:
        if writable:
            self._check_writable()
        return Directory.open(
            self._path.append_directory(name), writable=writable, sandbox=sandbox
        )

    def create_file(
        self,
        name: str,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> EditableFile:
        """Create the file ``name`` inside this directory and open it for editing.

        Raises:
            InvalidAccessError: This handle is not writable.
        """
        self._check_writable()
        return EditableFile.create(
            self._path.append_file(name), if_exists, sandbox=sandbox
        )

    def create_directory(
        self,
        name: str,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> Directory:
        self._check_writable()
        return Directory.create(
            self._path.append_directory(name), if_exists, sandbox=sandbox
        )

    @overload
    def create_link(
        self,
        name: str,
        target: Directory,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> Directory: ...

    @overload
    def create_link(
        self,
        name: str,
        target: File,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> File: ...

    def create_link(
        self,
        name: str,
        target: Directory | File,
        if_exists: IfExists,
        *,
        sandbox: SandboxPolicy | None = None,
    ) -> Directory | File:
        """Create a symbolic link ``name`` inside this directory to ``target``.

        A directory target makes a directory link, a file target a file link.
        The returned handle has the same class as ``target``.
        """
        self._check_writable()
        if isinstance(target, Directory):
            return Directory.create_symbolic_link(
                self._path.append_directory(name), target, if_exists, sandbox=sandbox
            )
        return File.create_symbolic_link(
            self._path.append_file(name), target, if_exists, sandbox=sandbox
        )

    def files(
        self, pattern: str = DEFAULT_PATTERN, *, recursive: bool = False
    ) -> list[FilePath]:
        """Files below this directory matching ``pattern``.

        Results are relative to this directory's path, so ``str(result)``
        reads like ``"dir/file.txt"``. With ``recursive`` an explicit
        ``pattern`` is matched against that whole relative path.
        """
        self._check_closed()
        found = list_entries(
            self._path.absolute_string,
            pattern,
            kind=FileKind.FILE,
            recursive=recursive,
        )
        return [FilePath.parse(relative, base=self._path) for relative in found]

    def directories(
        self, pattern: str = DEFAULT_PATTERN, *, recursive: bool = False
    ) -> list[DirectoryPath]:
        """Directories below this directory matching ``pattern``."""

        self._check_closed()
        found = list_entries(
            self._path.absolute_string,
            pattern,
            kind=FileKind.DIRECTORY,
            recursive=recursive,
        )
        return [DirectoryPath.parse(relative, base=self._path) for relative in found]

    def contains(self, relative: str) -> bool:
        """True if something exists at ``relative`` inside this directory."""

        return self._path.append_directory(relative).exists()

    def verify_contains(self, relative: str) -> None:
        """Raise :class:`NotFoundError` unless ``relative`` exists inside."""

        if not self.contains(relative):
            raise NotFoundError(self._path.append_directory(relative).absolute_string)

    def delete(self, *, sandbox: SandboxPolicy | None = None) -> None:
        """Close the handle and remove the directory tree.

        A directory reached through a symbolic link loses only the link. A
        refused delete leaves the handle open.

        Raises:
            CurrentDirectoryError: This is the working directory or one of
                its ancestors.
        """
        verify_deletable(self._path, sandbox=sandbox)
        self.close()
        host.remove_entry(self._path.absolute_string)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            os.close(self._fd)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            self.close()

    def __repr__(self) -> str:
        mode = "writable" if self._writable else "readonly"
        return f"Directory({self._path.string!r}, {mode})"
