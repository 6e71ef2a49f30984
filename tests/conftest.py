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

"""Shared fixtures isolating process-wide filesystem state per test."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

import filewright.dbc as dbc_module
from filewright._config import (
    ENCODING_ENV,
    SANDBOX_ENV,
    SANDBOX_ROOT_ENV,
    set_config,
)
from filewright.runtime.sandbox import set_sandbox


@pytest.fixture(autouse=True)
def isolated_filesystem_state(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Run each test inside its own working directory with contracts on."""

    for name in (SANDBOX_ENV, SANDBOX_ROOT_ENV, ENCODING_ENV, "FILEWRIGHT_DBC"):
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    set_sandbox(None)
    dbc_module.enable_dbc()
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    yield
    dbc_module._forced_state = None
    set_sandbox(None)
    set_config(None)


@pytest.fixture
def workdir() -> Path:
    """Resolved working directory of the current test."""

    return Path(os.getcwd())
