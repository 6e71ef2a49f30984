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

"""Symbolic link creation and reconciliation.

A link at ``newlink`` is reconciled against a wanted ``target`` with the
usual ``IfExists`` policy. Under ``open`` an existing link is accepted only
if it already points where ``target`` names; anything else is an
``InvalidAccessError`` rather than a silent rewrite.
"""

from __future__ import annotations

import os

from . import _host as host
from ._path import AnyPath, DirectoryPath, FilePath
from ._types import IfExists, validate_if_exists
from .errors import (
    AlreadyExistsError,
    InvalidAccessError,
    IsDirectoryError,
    NotDirectoryError,
)
from .runtime.logging import StructuredLogger, get_logger
from .runtime.sandbox import SandboxPolicy, verify_is_in_sandbox

__all__ = ["link_directory", "link_file", "stored_destination"]

logger: StructuredLogger = get_logger(__name__, context={"component": "links"})


def link_file(
    newlink: FilePath,
    target: FilePath,
    if_exists: IfExists,
    *,
    sandbox: SandboxPolicy | None = None,
) -> None:
    """Make ``newlink`` a symbolic link to the file ``target``."""

    _reconcile(newlink, target, if_exists, directory=False, sandbox=sandbox)


def link_directory(
    newlink: DirectoryPath,
    target: DirectoryPath,
    if_exists: IfExists,
    *,
    sandbox: SandboxPolicy | None = None,
) -> None:
    """Make ``newlink`` a symbolic link to the directory ``target``."""

    _reconcile(newlink, target, if_exists, directory=True, sandbox=sandbox)


def stored_destination(newlink: AnyPath, target: AnyPath) -> str:
    """Text written into a new link so it resolves to ``target``.

    Absolute targets are stored as absolute strings. Relative targets are
    stored relative to the link's own directory, because the OS resolves a
    relative link against the directory containing it.

    Example::

        stored_destination(FilePath.parse("/a/b/link"), FilePath.parse("/a/c/f"))
        # "/a/c/f"
        stored_destination(FilePath.parse("b/link"), FilePath.parse("c/f"))
        # "../c/f"
    """
    if not target.relative:
        return target.absolute_string
    return os.path.relpath(target.absolute_string, newlink.parent().absolute_string)


def _reconcile(
    newlink: AnyPath,
    target: AnyPath,
    if_exists: IfExists,
    *,
    directory: bool,
    sandbox: SandboxPolicy | None,
) -> None:
    policy = validate_if_exists(if_exists)
    location = newlink.absolute_string
    entry = host.stat(location)
    if entry.exists:
        if directory and not entry.is_directory:
            raise NotDirectoryError(location)
        if not directory and entry.is_directory:
            raise IsDirectoryError(location)
        if policy == "throw_error":
            raise AlreadyExistsError(location)
        if policy == "open":
            _verify_points_to(newlink, target, is_link=entry.is_symbolic_link)
            return
        verify_is_in_sandbox(newlink, sandbox=sandbox)
        host.remove_entry(location)
    else:
        verify_is_in_sandbox(newlink, sandbox=sandbox)
    host.create_symlink(location, stored_destination(newlink, target))


def _verify_points_to(newlink: AnyPath, target: AnyPath, *, is_link: bool) -> None:
    location = newlink.absolute_string
    if not is_link:
        raise InvalidAccessError(location, writing=True)
    stored = host.read_symlink_destination(location)
    current = DirectoryPath.parse(stored, base=newlink.parent().absolute)
    wanted = target.absolute
    if current.absolute.segments == wanted.segments:
        return
    logger.warning(
        "Existing link %s points to %s, not %s",
        location,
        current.absolute_string,
        wanted.absolute_string,
        event="links.mismatch",
    )
    raise InvalidAccessError(location, writing=True)
