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

"""Base exception hierarchy for :mod:`filewright`."""

from __future__ import annotations


class FilewrightError(Exception):
    """Base class for all filewright exceptions.

    Catch this to handle any library-specific failure while letting standard
    Python exceptions propagate normally.

    Example:
        Recover from any filesystem failure::

            try:
                Directory.create("build/output", "throw_error")
            except FilewrightError as e:
                logger.error("Could not prepare output: %s", e)

    Note:
        Concrete subclasses also inherit from the matching builtin
        (``FileNotFoundError``, ``PermissionError``, ...) so callers written
        against the standard library keep working.
    """


class FileSystemError(FilewrightError):
    """Base class for failures tied to a specific path.

    Attributes:
        path: The path string the failing operation was applied to.
    """

    def __init__(self, path: object, message: str | None = None) -> None:
        self.path = str(path)
        super().__init__(message or self._describe())

    def _describe(self) -> str:
        return f"{type(self).__name__}: {self.path}"


class NotFoundError(FileSystemError, FileNotFoundError):
    """Raised when nothing exists at the requested path."""

    def _describe(self) -> str:
        return f"No such file or directory: {self.path}"


class IsDirectoryError(FileSystemError, IsADirectoryError):
    """Raised when a file was requested but a directory occupies the path."""

    def _describe(self) -> str:
        return f"Is a directory: {self.path}"


class NotDirectoryError(FileSystemError, NotADirectoryError):
    """Raised when a directory was requested but something else is there."""

    def _describe(self) -> str:
        return f"Not a directory: {self.path}"


class AlreadyExistsError(FileSystemError, FileExistsError):
    """Raised by ``throw_error`` creation when the path is already taken."""

    def _describe(self) -> str:
        return f"Already exists: {self.path}"


class OutsideSandboxError(FileSystemError, PermissionError):
    """Raised when a write-capable operation targets a path outside the sandbox.

    Attributes:
        root: Absolute path of the sandbox root the check was made against.
    """

    def __init__(self, path: object, root: object) -> None:
        self.root = str(root)
        super().__init__(path, f"Path is outside the sandbox {self.root}: {path}")


class InvalidAccessError(FileSystemError, PermissionError):
    """Raised when the path exists but cannot be opened as requested.

    Attributes:
        writing: True when write access was requested.
    """

    def __init__(self, path: object, *, writing: bool = False) -> None:
        self.writing = writing
        mode = "writing" if writing else "reading"
        super().__init__(path, f"Cannot access for {mode}: {path}")


class CouldNotCreateError(FileSystemError, OSError):
    """Raised when the host refuses to create a file, directory or link."""

    def _describe(self) -> str:
        return f"Could not create: {self.path}"


class CurrentDirectoryError(FileSystemError, RuntimeError):
    """Raised when asked to delete the process's current working directory.

    Removing it (or one of its ancestors) would leave the process in a
    directory that no longer exists.
    """

    def _describe(self) -> str:
        return f"Refusing to delete the current working directory: {self.path}"


__all__ = [
    "AlreadyExistsError",
    "CouldNotCreateError",
    "CurrentDirectoryError",
    "FileSystemError",
    "FilewrightError",
    "InvalidAccessError",
    "IsDirectoryError",
    "NotDirectoryError",
    "NotFoundError",
    "OutsideSandboxError",
]
