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

"""Sandbox policy and the process-wide working directory.

A :class:`SandboxPolicy` confines write-capable operations (create, replace,
delete, link, open for writing) to a root directory. Reads are never
checked.

The active policy is process state shared by every thread, like the working
directory itself. Operations also accept an explicit ``sandbox=`` argument so
callers (and tests) can inject a policy without touching the shared one.

Example usage::

    from filewright import Directory, sandboxed

    with sandboxed(root="/srv/workspace"):
        Directory.create("/srv/workspace/out", "open")   # fine
        Directory.create("/etc/out", "open")             # OutsideSandboxError
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from .._config import FilewrightConfig, get_config, set_config
from .._path import AnyPath, DirectoryPath
from ..errors import OutsideSandboxError
from .logging import StructuredLogger, get_logger

__all__ = [
    "SandboxPolicy",
    "active_sandbox",
    "change_directory",
    "configure",
    "current_directory",
    "sandboxed",
    "set_sandbox",
    "verify_is_in_sandbox",
    "verify_link_destination_in_sandbox",
]

logger: StructuredLogger = get_logger(__name__, context={"component": "sandbox"})


@dataclass(slots=True, frozen=True)
class SandboxPolicy:
    """Whether writes are confined, and to where.

    Attributes:
        enabled: Reject write-capable operations outside ``root``.
        root: Sandbox root. None means the working directory at the time of
            each check, so changing directory moves the sandbox with it.
    """

    enabled: bool = False
    root: DirectoryPath | None = None

    @classmethod
    def from_config(cls, config: FilewrightConfig) -> SandboxPolicy:
        root = (
            DirectoryPath.parse(config.sandbox_root)
            if config.sandbox_root is not None
            else None
        )
        return cls(enabled=config.sandbox_enabled, root=root)

    @property
    def resolved_root(self) -> DirectoryPath:
        """Absolute root as of now."""

        if self.root is None:
            return DirectoryPath.current()
        return self.root.absolute

    def allows(self, path: AnyPath) -> bool:
        """True if ``path`` may be written under this policy."""

        if not self.enabled:
            return True
        root = self.resolved_root
        return path.absolute.segments == root.segments or root.is_a_parent_of(path)


_active: SandboxPolicy | None = None


def active_sandbox() -> SandboxPolicy:
    """Return the process-wide policy, deriving it from config on first use."""

    if _active is not None:
        return _active
    return SandboxPolicy.from_config(get_config())


def set_sandbox(policy: SandboxPolicy | None) -> None:
    """Install ``policy`` process-wide; None falls back to configuration."""

    global _active
    _active = policy


def configure(config: FilewrightConfig | None = None) -> FilewrightConfig:
    """Install ``config`` (default: read from the environment) and its sandbox.

    Example::

        configure(FilewrightConfig(sandbox_enabled=True, sandbox_root="/srv/data"))
    """
    config = config if config is not None else FilewrightConfig.from_env()
    set_config(config)
    set_sandbox(SandboxPolicy.from_config(config))
    logger.info(
        "Configured filewright",
        event="config.applied",
        context={
            "sandbox_enabled": config.sandbox_enabled,
            "sandbox_root": config.sandbox_root,
            "encoding": config.encoding,
        },
    )
    return config


@contextmanager
def sandboxed(
    *, enabled: bool = True, root: DirectoryPath | str | None = None
) -> Iterator[SandboxPolicy]:
    """Temporarily install a sandbox policy inside a ``with`` block."""

    global _active
    previous = _active
    if isinstance(root, str):
        root = DirectoryPath.parse(root)
    policy = SandboxPolicy(enabled=enabled, root=root)
    _active = policy
    try:
        yield policy
    finally:
        _active = previous


def verify_is_in_sandbox(
    path: AnyPath, *, sandbox: SandboxPolicy | None = None
) -> None:
    """Raise if ``path`` is outside the sandbox.

    The check compares normalized absolute segments only; ``..`` components
    are already resolved by the path algebra.

    Raises:
        OutsideSandboxError: When the policy is enabled and ``path`` is
            neither the root nor below it.
    """
    policy = sandbox if sandbox is not None else active_sandbox()
    if policy.allows(path):
        return
    root = policy.resolved_root
    logger.warning(
        "Rejected write outside sandbox: %s",
        path.absolute_string,
        event="sandbox.violation",
        context={"root": root.absolute_string},
    )
    raise OutsideSandboxError(path.absolute_string, root.absolute_string)


def verify_link_destination_in_sandbox(
    path: AnyPath, *, sandbox: SandboxPolicy | None = None
) -> None:
    """Raise if ``path`` is a symbolic link leading outside the sandbox.

    Both the link's destination and the root are fully resolved, so the
    comparison is not fooled by links inside the root pointing out of it.
    Paths that are not links pass unchanged.
    """
    policy = sandbox if sandbox is not None else active_sandbox()
    if not policy.enabled or not os.path.islink(path.absolute_string):
        return
    destination = DirectoryPath.parse(os.path.realpath(path.absolute_string))
    root = DirectoryPath.parse(os.path.realpath(policy.resolved_root.absolute_string))
    if destination.segments == root.segments or root.is_a_parent_of(destination):
        return
    logger.warning(
        "Rejected write through link leaving sandbox: %s -> %s",
        path.absolute_string,
        destination.absolute_string,
        event="sandbox.violation",
        context={"root": root.absolute_string},
    )
    raise OutsideSandboxError(path.absolute_string, root.absolute_string)


def current_directory() -> DirectoryPath:
    """Absolute path of the process working directory."""

    return DirectoryPath.current()


def change_directory(path: AnyPath | str) -> None:
    """Change the process working directory.

    Relative paths created without a base resolve against the new directory
    from now on, including ones created earlier.
    """
    target = path if isinstance(path, str) else path.absolute_string
    os.chdir(target)
    logger.debug(
        "Changed working directory to %s", os.getcwd(), event="sandbox.chdir"
    )
