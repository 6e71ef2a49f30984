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

"""Environment-driven configuration.

Environment variables:

- ``FILEWRIGHT_SANDBOX``: truthy value enables the sandbox.
- ``FILEWRIGHT_SANDBOX_ROOT``: sandbox root; unset means "the current
  working directory at the time of each check".
- ``FILEWRIGHT_ENCODING``: default text encoding for file handles.
"""

from __future__ import annotations

import codecs
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

from .dbc import coerce_flag

SANDBOX_ENV: Final[str] = "FILEWRIGHT_SANDBOX"
SANDBOX_ROOT_ENV: Final[str] = "FILEWRIGHT_SANDBOX_ROOT"
ENCODING_ENV: Final[str] = "FILEWRIGHT_ENCODING"
DEFAULT_ENCODING: Final[str] = "utf-8"


@dataclass(slots=True, frozen=True)
class FilewrightConfig:
    """Process-level settings read once at start-up.

    Attributes:
        sandbox_enabled: Reject writes outside ``sandbox_root``.
        sandbox_root: Root directory string, or None to follow the current
            working directory.
        encoding: Default codec for text reads and writes.
    """

    sandbox_enabled: bool = False
    sandbox_root: str | None = None
    encoding: str = DEFAULT_ENCODING

    def __post_init__(self) -> None:
        # Raises LookupError for unknown codecs.
        _ = codecs.lookup(self.encoding)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> FilewrightConfig:
        """Build a configuration from ``env`` (defaults to ``os.environ``)."""

        env = env if env is not None else os.environ
        root = env.get(SANDBOX_ROOT_ENV) or None
        return cls(
            sandbox_enabled=coerce_flag(env.get(SANDBOX_ENV)),
            sandbox_root=root,
            encoding=env.get(ENCODING_ENV) or DEFAULT_ENCODING,
        )


_config: FilewrightConfig | None = None


def get_config() -> FilewrightConfig:
    """Return the active configuration, reading the environment on first use."""

    global _config
    if _config is None:
        _config = FilewrightConfig.from_env()
    return _config


def set_config(config: FilewrightConfig | None) -> None:
    """Replace the active configuration; None re-reads the environment lazily."""

    global _config
    _config = config


__all__ = [
    "DEFAULT_ENCODING",
    "ENCODING_ENV",
    "SANDBOX_ENV",
    "SANDBOX_ROOT_ENV",
    "FilewrightConfig",
    "get_config",
    "set_config",
]
