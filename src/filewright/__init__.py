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

"""Typed, sandbox-aware access to the host filesystem.

Paths are values: :class:`FilePath` and :class:`DirectoryPath` never touch
the disk and are never interchangeable. Handles (:class:`File`,
:class:`EditableFile`, :class:`Directory`) are opened or created from paths
under an ``IfExists`` policy (``"throw_error"``, ``"open"`` or
``"replace"``). When the sandbox is enabled every write-capable operation
is confined to its root.

Example::

    from filewright import Directory, sandboxed

    with sandboxed():
        work = Directory.create("work", "open")
        work.create_file("notes/today.txt", "replace").write("hello\\n")
        [str(path) for path in work.files(recursive=True)]   # ["notes/today.txt"]
"""

from __future__ import annotations

from ._config import FilewrightConfig, get_config, set_config
from ._directory import Directory
from ._file import EditableFile, File
from ._path import AnyPath, DirectoryPath, FilePath, glob_match
from ._types import FileKind, FileType, IfExists
from .errors import (
    AlreadyExistsError,
    CouldNotCreateError,
    CurrentDirectoryError,
    FileSystemError,
    FilewrightError,
    InvalidAccessError,
    IsDirectoryError,
    NotDirectoryError,
    NotFoundError,
    OutsideSandboxError,
)
from .runtime import (
    SandboxPolicy,
    active_sandbox,
    configure,
    configure_logging,
    sandboxed,
    set_sandbox,
)

__all__ = [
    "AlreadyExistsError",
    "AnyPath",
    "CouldNotCreateError",
    "CurrentDirectoryError",
    "Directory",
    "DirectoryPath",
    "EditableFile",
    "File",
    "FileKind",
    "FilePath",
    "FileSystemError",
    "FileType",
    "FilewrightConfig",
    "FilewrightError",
    "IfExists",
    "InvalidAccessError",
    "IsDirectoryError",
    "NotDirectoryError",
    "NotFoundError",
    "OutsideSandboxError",
    "SandboxPolicy",
    "active_sandbox",
    "configure",
    "configure_logging",
    "get_config",
    "glob_match",
    "sandboxed",
    "set_config",
    "set_sandbox",
]
