"""Tests for sandbox root confinement."""

import os

import pytest

from patchbox.editing.errors import PathSecurityError
from patchbox.editing.root_resolver import is_within_root, resolve_within_root


@pytest.fixture
def root(tmp_path):
    sandbox = tmp_path / "ws"
    sandbox.mkdir()
    return str(sandbox)


class TestResolveWithinRoot:
    def test_relative_path_lands_under_root(self, root):
        resolved = resolve_within_root(lambda: root, "src/app.py")
        assert resolved == os.path.join(root, "src", "app.py")

    def test_empty_path_is_root(self, root):
        assert resolve_within_root(lambda: root, "") == root
        assert resolve_within_root(lambda: root, "   ") == root

    def test_dot_segments_are_collapsed(self, root):
        resolved = resolve_within_root(lambda: root, "a/./b/../c.txt")
        assert resolved == os.path.join(root, "a", "c.txt")

    def test_parent_escape_rejected(self, root):
        with pytest.raises(PathSecurityError, match="Refusing to write outside root"):
            resolve_within_root(lambda: root, "../outside")

    def test_absolute_path_outside_rejected(self, root):
        with pytest.raises(PathSecurityError):
            resolve_within_root(lambda: root, "/etc/passwd")

    def test_sibling_sharing_prefix_rejected(self, tmp_path, root):
        """root /x/ws must not admit /x/wsevil even though it is a string prefix."""
        (tmp_path / "wsevil").mkdir()
        with pytest.raises(PathSecurityError):
            resolve_within_root(lambda: root, "../wsevil/file.txt")

    def test_root_is_requeried_every_call(self, tmp_path):
        roots = [str(tmp_path / "one"), str(tmp_path / "two")]
        current = {"root": roots[0]}

        first = resolve_within_root(lambda: current["root"], "f.txt")
        current["root"] = roots[1]
        second = resolve_within_root(lambda: current["root"], "f.txt")

        assert first == os.path.join(roots[0], "f.txt")
        assert second == os.path.join(roots[1], "f.txt")

    def test_relative_root_is_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        resolved = resolve_within_root(lambda: ".", "x.txt")
        assert resolved == os.path.join(str(tmp_path), "x.txt")


class TestIsWithinRoot:
    def test_root_itself(self):
        assert is_within_root("/a/b", "/a/b") is True

    def test_child(self):
        assert is_within_root("/a/b", "/a/b/c") is True

    def test_string_prefix_sibling(self):
        assert is_within_root("/a/b", "/a/bc/evil") is False

    def test_trailing_separator_on_root(self):
        assert is_within_root("/a/b/", "/a/b/c") is True

    def test_filesystem_root(self):
        assert is_within_root("/", "/anything") is True
