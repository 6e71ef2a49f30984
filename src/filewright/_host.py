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

"""Host operating system calls used by the rest of the package.

Every function takes an absolute path string and performs exactly one
filesystem operation. Path safety (sandboxing, kind checks, conflict
policies) is the caller's job; this module only translates OS failures
into the package's error types.
"""

from __future__ import annotations

import os
import shutil

from ._types import FileType
from .errors import (
    CouldNotCreateError,
    InvalidAccessError,
    NotDirectoryError,
    NotFoundError,
)
from .runtime.logging import StructuredLogger, get_logger

__all__ = [
    "create_directory",
    "create_file",
    "create_symlink",
    "list_directory",
    "read_symlink_destination",
    "remove_entry",
    "stat",
]

logger: StructuredLogger = get_logger(__name__, context={"component": "host"})


def stat(path: str) -> FileType:
    """Classify whatever occupies ``path``."""

    return FileType.of(path)


def create_file(path: str) -> None:
    """Create an empty file, truncating any existing one."""

    try:
        with open(path, "wb"):
            pass
    except OSError as err:
        raise CouldNotCreateError(path, f"Could not create file {path}: {err}") from err
    logger.debug("Created file %s", path, event="host.create_file")


def create_directory(path: str) -> None:
    """Create a single directory; the parent must already exist."""

    try:
        os.mkdir(path)
    except OSError as err:
        raise CouldNotCreateError(
            path, f"Could not create directory {path}: {err}"
        ) from err
    logger.debug("Created directory %s", path, event="host.create_directory")


def create_symlink(path: str, destination: str) -> None:
    """Create a symbolic link at ``path`` storing ``destination`` verbatim."""

    try:
        os.symlink(destination, path)
    except OSError as err:
        raise CouldNotCreateError(
            path, f"Could not create symbolic link {path}: {err}"
        ) from err
    logger.debug(
        "Created symbolic link %s -> %s",
        path,
        destination,
        event="host.create_symlink",
    )


def read_symlink_destination(path: str) -> str:
    """Return the destination stored in the link at ``path``, unresolved."""

    try:
        return os.readlink(path)
    except FileNotFoundError:
        raise NotFoundError(path) from None


def remove_entry(path: str) -> None:
    """Remove a file, a link, or a directory tree.

    A symbolic link is removed itself, never the directory it points to.
    """

    entry = FileType.of(path)
    if not entry.exists:
        raise NotFoundError(path)
    try:
        if entry.is_symbolic_link or not entry.is_directory:
            os.unlink(path)
        else:
            shutil.rmtree(path)
    except PermissionError:
        raise InvalidAccessError(path, writing=True) from None
    logger.debug(
        "Removed %s",
        path,
        event="host.remove_entry",
        context={"kind": entry.kind.value},
    )


def list_directory(path: str) -> list[tuple[str, FileType]]:
    """Entries of the directory at ``path``, sorted by name."""

    try:
        names = sorted(os.listdir(path))
    except FileNotFoundError:
        raise NotFoundError(path) from None
    except NotADirectoryError:
        raise NotDirectoryError(path) from None
    except PermissionError:
        raise InvalidAccessError(path) from None
    return [(name, FileType.of(os.path.join(path, name))) for name in names]
