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

"""Process-level runtime state for :mod:`filewright`: logging and sandbox."""

from __future__ import annotations

from .logging import StructuredLogger, configure_logging, get_logger
from .sandbox import (
    SandboxPolicy,
    active_sandbox,
    change_directory,
    configure,
    current_directory,
    sandboxed,
    set_sandbox,
    verify_is_in_sandbox,
    verify_link_destination_in_sandbox,
)

__all__ = [
    "SandboxPolicy",
    "StructuredLogger",
    "active_sandbox",
    "change_directory",
    "configure",
    "configure_logging",
    "current_directory",
    "get_logger",
    "sandboxed",
    "set_sandbox",
    "verify_is_in_sandbox",
    "verify_link_destination_in_sandbox",
]
