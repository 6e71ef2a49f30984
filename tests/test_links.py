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

"""Tests for symbolic link creation and reconciliation."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from filewright import (
    AlreadyExistsError,
    CouldNotCreateError,
    Directory,
    DirectoryPath,
    EditableFile,
    File,
    FilePath,
    InvalidAccessError,
    IsDirectoryError,
    NotDirectoryError,
    OutsideSandboxError,
    sandboxed,
)
from filewright._links import link_file, stored_destination


class TestStoredDestination:
    """Test what is written into new links."""

    def test_absolute_target_is_stored_verbatim(self) -> None:
        assert (
            stored_destination(FilePath.parse("/a/b/link"), FilePath.parse("/a/c/f"))
            == "/a/c/f"
        )

    def test_relative_target_is_relative_to_link_directory(self) -> None:
        assert (
            stored_destination(FilePath.parse("b/link"), FilePath.parse("c/f"))
            == "../c/f"
        )

    def test_relative_target_next_to_link(self) -> None:
        assert (
            stored_destination(
                DirectoryPath.parse("link"), DirectoryPath.parse("target")
            )
            == "target"
        )


class TestFileLinks:
    """Test File.create_symbolic_link."""

    def test_link_opens_like_target(self, workdir: Path) -> None:
        (workdir / "data").mkdir()
        (workdir / "data" / "file.txt").write_text("content")
        (workdir / "links").mkdir()
        target = File.open("data/file.txt")

        link = File.create_symbolic_link("links/file_link", target, "throw_error")

        assert type(link) is File
        assert link.read() == "content"
        assert os.readlink(workdir / "links" / "file_link") == "../data/file.txt"

    def test_editable_target_gives_editable_link(self, workdir: Path) -> None:
        target = EditableFile.create("file.txt", "throw_error")

        link = File.create_symbolic_link("link.txt", target, "throw_error")

        assert isinstance(link, EditableFile)
        link.write("through link")
        assert (workdir / "file.txt").read_text() == "through link"

    def test_absolute_target_stays_absolute(self, workdir: Path) -> None:
        (workdir / "file.txt").write_text("x")
        target = File.open(str(workdir / "file.txt"))

        _ = File.create_symbolic_link("link.txt", target, "throw_error")

        assert os.readlink(workdir / "link.txt") == f"{workdir}/file.txt"

    def test_policies(self, workdir: Path) -> None:
        first = File.create("first.txt", "throw_error")
        second = File.create("second.txt", "throw_error")
        _ = File.create_symbolic_link("link.txt", first, "throw_error")

        with pytest.raises(AlreadyExistsError):
            _ = File.create_symbolic_link("link.txt", first, "throw_error")
        _ = File.create_symbolic_link("link.txt", first, "open")
        with pytest.raises(InvalidAccessError) as excinfo:
            _ = File.create_symbolic_link("link.txt", second, "open")
        assert excinfo.value.writing

        _ = File.create_symbolic_link("link.txt", second, "replace")
        assert os.readlink(workdir / "link.txt") == "second.txt"

    def test_open_accepts_link_made_elsewhere(self, workdir: Path) -> None:
        (workdir / "file.txt").write_text("x")
        (workdir / "link.txt").symlink_to(workdir / "file.txt")
        target = File.open("file.txt")

        link = File.create_symbolic_link("link.txt", target, "open")

        assert link.read() == "x"

    def test_open_rejects_regular_file(self, workdir: Path) -> None:
        (workdir / "plain.txt").write_text("x")
        target = File.create("file.txt", "throw_error")

        with pytest.raises(InvalidAccessError):
            _ = File.create_symbolic_link("plain.txt", target, "open")

    def test_directory_in_the_way(self, workdir: Path) -> None:
        (workdir / "dir").mkdir()
        target = File.create("file.txt", "throw_error")

        with pytest.raises(IsDirectoryError):
            _ = File.create_symbolic_link("dir", target, "replace")

    def test_missing_parent_is_not_created(self) -> None:
        target = File.create("file.txt", "throw_error")

        with pytest.raises(CouldNotCreateError):
            link_file(FilePath.parse("missing/link.txt"), target.path, "throw_error")

    def test_outside_sandbox(self, tmp_path: Path) -> None:
        target = File.create("file.txt", "throw_error")

        with sandboxed(), pytest.raises(OutsideSandboxError):
            _ = File.create_symbolic_link(
                str(tmp_path / "link.txt"), target, "throw_error"
            )

        assert not (tmp_path / "link.txt").is_symlink()

    def test_replace_outside_sandbox(self, tmp_path: Path) -> None:
        (tmp_path / "other.txt").write_text("x")
        (tmp_path / "link.txt").symlink_to(tmp_path / "other.txt")
        target = File.create("file.txt", "throw_error")

        with sandboxed(), pytest.raises(OutsideSandboxError):
            _ = File.create_symbolic_link(str(tmp_path / "link.txt"), target, "replace")

        assert os.readlink(tmp_path / "link.txt") == str(tmp_path / "other.txt")


class TestDirectoryLinks:
    """Test Directory.create_symbolic_link and Directory.create_link."""

    def test_link_to_directory(self, workdir: Path) -> None:
        target = Directory.create("target", "throw_error")
        _ = target.create_file("inside.txt", "throw_error")

        link = Directory.create_symbolic_link("link", target, "throw_error")

        assert link.writable
        assert link.contains("inside.txt")
        assert os.readlink(workdir / "link") == "target"

    def test_read_only_target_gives_read_only_link(self, workdir: Path) -> None:
        (workdir / "target").mkdir()
        target = Directory.open("target")

        link = Directory.create_symbolic_link("link", target, "throw_error")

        assert not link.writable

    def test_file_in_the_way(self, workdir: Path) -> None:
        (workdir / "file.txt").write_text("x")
        target = Directory.create("target", "throw_error")

        with pytest.raises(NotDirectoryError):
            _ = Directory.create_symbolic_link("file.txt", target, "open")

    def test_dangling_link_in_the_way(self, workdir: Path) -> None:
        (workdir / "dangling").symlink_to(workdir / "missing")
        target = Directory.create("target", "throw_error")

        with pytest.raises(NotDirectoryError):
            _ = Directory.create_symbolic_link("dangling", target, "replace")

    def test_directory_scoped_links(self, workdir: Path) -> None:
        parent = Directory.create("parent", "throw_error")
        other = Directory.create("other", "throw_error")
        file = File.create("file.txt", "throw_error")

        directory_link = parent.create_link("to_other", other, "throw_error")
        file_link = parent.create_link("to_file", file, "throw_error")

        assert isinstance(directory_link, Directory)
        assert type(file_link) is File
        assert os.readlink(workdir / "parent" / "to_other") == "../other"
        assert os.readlink(workdir / "parent" / "to_file") == "../file.txt"

    def test_reconcile_after_working_directory_change(
        self, workdir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = Directory.create("target", "throw_error")
        _ = Directory.create_symbolic_link("link", target, "throw_error")
        absolute_target = Directory.open(str(workdir / "target"))

        monkeypatch.chdir(workdir / "target")

        link = Directory.create_symbolic_link(
            str(workdir / "link"), absolute_target, "open"
        )
        assert link.path.exists()
