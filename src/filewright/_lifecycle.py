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

"""Open, create and delete entries on disk.

Creation follows one state machine for files and directories, keyed by the
path and its ``IfExists`` policy:

1. Nothing there: create missing ancestors (policy ``open``), verify the
   sandbox, create an empty entry.
2. Wrong kind there: ``IsDirectoryError`` / ``NotDirectoryError`` whatever
   the policy.
3. Right kind there: ``throw_error`` raises ``AlreadyExistsError``, ``open``
   leaves it untouched, ``replace`` verifies the sandbox, removes it and
   creates a fresh one.

Ancestors created before a later failure are left in place.
"""

from __future__ import annotations

import os
from typing import BinaryIO

from . import _host as host
from ._path import AnyPath, DirectoryPath, FilePath
from ._types import FileKind, IfExists, validate_if_exists
from .errors import (
    AlreadyExistsError,
    CurrentDirectoryError,
    InvalidAccessError,
    IsDirectoryError,
    NotDirectoryError,
    NotFoundError,
)
from .runtime.sandbox import SandboxPolicy, verify_is_in_sandbox

__all__ = [
    "as_directory_path",
    "as_file_path",
    "create_directory_entry",
    "create_file_entry",
    "delete_entry",
    "verify_deletable",
    "open_directory_descriptor",
    "open_file_handle",
]


def as_file_path(path: FilePath | str) -> FilePath:
    return path if isinstance(path, FilePath) else FilePath.parse(path)


def as_directory_path(path: DirectoryPath | str) -> DirectoryPath:
    return path if isinstance(path, DirectoryPath) else DirectoryPath.parse(path)


def create_file_entry(
    path: FilePath,
    if_exists: IfExists,
    *,
    sandbox: SandboxPolicy | None = None,
) -> None:
    """Make sure a file exists at ``path`` according to ``if_exists``."""

    policy = validate_if_exists(if_exists)
    location = path.absolute_string
    entry = host.stat(location)
    if entry.exists:
        if entry.is_directory:
            raise IsDirectoryError(location)
        if policy == "throw_error":
            raise AlreadyExistsError(location)
        if policy == "open":
            return
        verify_is_in_sandbox(path, sandbox=sandbox)
        host.remove_entry(location)
    else:
        _ensure_parent(path, sandbox=sandbox)
        verify_is_in_sandbox(path, sandbox=sandbox)
    host.create_file(location)


def create_directory_entry(
    path: DirectoryPath,
    if_exists: IfExists,
    *,
    sandbox: SandboxPolicy | None = None,
) -> None:
    """Make sure a directory exists at ``path`` according to ``if_exists``."""

    policy = validate_if_exists(if_exists)
    location = path.absolute_string
    entry = host.stat(location)
    if entry.exists:
        if not entry.is_directory:
            raise NotDirectoryError(location)
        if policy == "throw_error":
            raise AlreadyExistsError(location)
        if policy == "open":
            return
        delete_entry(path, sandbox=sandbox)
    else:
        _ensure_parent(path, sandbox=sandbox)
        verify_is_in_sandbox(path, sandbox=sandbox)
    host.create_directory(location)


def _ensure_parent(path: AnyPath, *, sandbox: SandboxPolicy | None) -> None:
    parent = path.parent()
    if parent.absolute.segments == path.absolute.segments:
        return
    if not host.stat(parent.absolute_string).exists:
        create_directory_entry(parent, "open", sandbox=sandbox)


def open_file_handle(path: FilePath, *, writing: bool) -> BinaryIO:
    """Open the file at ``path`` for reading, or reading and writing.

    Raises:
        NotFoundError: Nothing exists at ``path``.
        IsDirectoryError: A directory is there.
        InvalidAccessError: The OS refused access in the requested mode.
    """
    location = path.absolute_string
    try:
        return open(location, "r+b" if writing else "rb")
    except OSError as err:
        raise _access_error(location, writing=writing, directory=False) from err


def open_directory_descriptor(path: DirectoryPath) -> int:
    """Open the directory at ``path`` and return its OS descriptor."""

    location = path.absolute_string
    flags = os.O_RDONLY | getattr(os, "O_DIRECTORY", 0)
    try:
        return os.open(location, flags)
    except OSError as err:
        raise _access_error(location, writing=False, directory=True) from err


def _access_error(location: str, *, writing: bool, directory: bool) -> OSError:
    """Explain why opening ``location`` failed."""

    entry = host.stat(location)
    if entry.resolved is FileKind.NONE:
        return NotFoundError(location)
    if directory and not entry.is_directory:
        return NotDirectoryError(location)
    if not directory and entry.is_directory:
        return IsDirectoryError(location)
    return InvalidAccessError(location, writing=writing)


def delete_entry(path: AnyPath, *, sandbox: SandboxPolicy | None = None) -> None:
    """Remove whatever is at ``path``: a file, a link, or a directory tree.

    Raises:
        CurrentDirectoryError: ``path`` is the working directory or one of its
            ancestors.
        OutsideSandboxError: ``path`` is outside the sandbox.
        NotFoundError: Nothing exists at ``path``.
    """
    verify_deletable(path, sandbox=sandbox)
    host.remove_entry(path.absolute_string)


def verify_deletable(path: AnyPath, *, sandbox: SandboxPolicy | None = None) -> None:
    """Raise unless ``delete_entry`` would be allowed to remove ``path``.

    Nothing on disk is touched, so handles can run this before releasing
    their OS resources.
    """
    location = path.absolute_string
    if not host.stat(location).exists:
        raise NotFoundError(location)
    if not os.path.islink(location):
        _refuse_working_directory(location)
    verify_is_in_sandbox(path, sandbox=sandbox)


def _refuse_working_directory(location: str) -> None:
    cwd = DirectoryPath.current()
    for candidate in {location, os.path.realpath(location)}:
        directory = DirectoryPath.parse(candidate)
        if directory == cwd or directory.is_a_parent_of(cwd):
            raise CurrentDirectoryError(location)
