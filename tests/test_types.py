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

"""Tests for entry classification and the IfExists policy."""

from __future__ import annotations

from pathlib import Path

import pytest

from filewright import FileKind, FileType
from filewright._types import IF_EXISTS_OPTIONS, NONE, validate_if_exists


class TestFileType:
    """Test FileType.of against real entries."""

    def test_regular_file(self, workdir: Path) -> None:
        (workdir / "file.txt").write_text("x")

        entry = FileType.of(workdir / "file.txt")

        assert entry == FileType(kind=FileKind.FILE)
        assert entry.exists
        assert entry.is_file
        assert not entry.is_directory
        assert not entry.is_symbolic_link

    def test_directory(self, workdir: Path) -> None:
        (workdir / "dir").mkdir()

        entry = FileType.of(str(workdir / "dir"))

        assert entry.kind is FileKind.DIRECTORY
        assert entry.is_directory
        assert entry.resolved is FileKind.DIRECTORY

    def test_missing_entry(self, workdir: Path) -> None:
        assert FileType.of(workdir / "missing") is NONE
        assert not NONE.exists

    def test_below_a_file_is_missing(self, workdir: Path) -> None:
        (workdir / "file.txt").write_text("x")

        assert FileType.of(workdir / "file.txt" / "child") is NONE

    def test_link_to_file_looks_like_a_file(self, workdir: Path) -> None:
        (workdir / "file.txt").write_text("x")
        (workdir / "link").symlink_to(workdir / "file.txt")

        entry = FileType.of(workdir / "link")

        assert entry == FileType(kind=FileKind.SYMBOLIC_LINK, target=FileKind.FILE)
        assert entry.is_symbolic_link
        assert entry.is_file

    def test_link_to_directory_looks_like_a_directory(self, workdir: Path) -> None:
        (workdir / "dir").mkdir()
        (workdir / "link").symlink_to("dir")

        entry = FileType.of(workdir / "link")

        assert entry.is_directory
        assert entry.resolved is FileKind.DIRECTORY

    def test_dangling_link_exists_but_resolves_to_nothing(
        self, workdir: Path
    ) -> None:
        (workdir / "dangling").symlink_to(workdir / "missing")

        entry = FileType.of(workdir / "dangling")

        assert entry.exists
        assert entry.resolved is FileKind.NONE
        assert not entry.is_file
        assert not entry.is_directory

    def test_link_loop_resolves_to_nothing(self, workdir: Path) -> None:
        (workdir / "a").symlink_to("b")
        (workdir / "b").symlink_to("a")

        entry = FileType.of(workdir / "a")

        assert entry.is_symbolic_link
        assert entry.resolved is FileKind.NONE


class TestIfExists:
    """Test validation of the IfExists policy."""

    @pytest.mark.parametrize("policy", ["throw_error", "open", "replace"])
    def test_known_policies(self, policy: str) -> None:
        assert validate_if_exists(policy) == policy

    def test_options_are_complete(self) -> None:
        assert IF_EXISTS_OPTIONS == ("throw_error", "open", "replace")

    @pytest.mark.parametrize("policy", ["", "overwrite", "OPEN"])
    def test_unknown_policy(self, policy: str) -> None:
        with pytest.raises(ValueError, match="Unknown if_exists policy"):
            _ = validate_if_exists(policy)
