"""Tests for the PatchApplier."""

import os

import pytest

from patchbox.editing.errors import PatchIOError, PatchNotFoundError
from patchbox.editing.patch_applier import PatchApplier, split_lines
from patchbox.editing.patch_parser import (
    Hunk, HunkLine, LineKind, LineRange, ParsedPatch, PatchOp,
)


def _hunk(start: int, count: int, *lines: tuple[LineKind, str]) -> Hunk:
    new_count = sum(1 for kind, _ in lines if kind is not LineKind.REMOVE)
    return Hunk(
        old_range=LineRange(start, count),
        new_range=LineRange(start, new_count),
        lines=tuple(HunkLine(kind, text) for kind, text in lines),
    )


def _update(path: str, *hunks: Hunk) -> ParsedPatch:
    return ParsedPatch(op=PatchOp.UPDATE, path=path, hunks=tuple(hunks))


R, A, C = LineKind.REMOVE, LineKind.ADD, LineKind.CONTEXT


class TestSplitLines:
    def test_trailing_newline_is_terminator(self):
        assert split_lines("a\nb\n") == ["a", "b"]

    def test_no_trailing_newline(self):
        assert split_lines("a\nb") == ["a", "b"]

    def test_crlf_normalized(self):
        assert split_lines("a\r\nb\r\n") == ["a", "b"]

    def test_empty(self):
        assert split_lines("") == []


class TestSpliceHunks:
    def test_single_hunk_replace(self):
        hunk = _hunk(1, 1, (R, "a"), (A, "x"))
        assert PatchApplier().splice_hunks(["a", "b", "c"], (hunk,)) == ["x", "b", "c"]

    def test_multi_hunk_uses_original_numbering(self):
        """Second start is read against the original file, not the spliced one."""
        lines = ["1", "2", "3", "4", "5", "6"]
        first = _hunk(5, 1, (R, "5"), (A, "FIVE"))
        second = _hunk(2, 1, (R, "2"), (A, "TWO-a"), (A, "TWO-b"), (A, "TWO-c"))
        result = PatchApplier().splice_hunks(lines, (first, second))
        assert result == ["1", "TWO-a", "TWO-b", "TWO-c", "3", "4", "FIVE", "6"]

    def test_ascending_hunks_without_offsets_shift(self):
        lines = ["1", "2", "3", "4", "5"]
        first = _hunk(1, 1, (R, "1"), (A, "a"), (A, "b"))
        second = _hunk(4, 1, (R, "4"), (A, "FOUR"))
        result = PatchApplier().splice_hunks(lines, (first, second))
        # Start 4 is applied to the already-grown list, so "3" is replaced
        assert result == ["a", "b", "2", "FOUR", "4", "5"]

    def test_ascending_hunks_with_offset_tracking(self):
        lines = ["1", "2", "3", "4", "5"]
        first = _hunk(1, 1, (R, "1"), (A, "a"), (A, "b"))
        second = _hunk(4, 1, (R, "4"), (A, "FOUR"))
        result = PatchApplier(track_offsets=True).splice_hunks(lines, (first, second))
        assert result == ["a", "b", "2", "3", "FOUR", "5"]

    def test_context_lines_contribute_to_replacement(self):
        hunk = _hunk(2, 2, (C, "b"), (R, "c"), (A, "C"))
        assert PatchApplier().splice_hunks(["a", "b", "c"], (hunk,)) == ["a", "b", "C"]

    def test_pure_insertion(self):
        hunk = _hunk(2, 0, (A, "new"))
        assert PatchApplier().splice_hunks(["a", "b"], (hunk,)) == ["a", "new", "b"]

    def test_input_not_mutated(self):
        lines = ["a", "b"]
        PatchApplier().splice_hunks(lines, (_hunk(1, 1, (A, "z")),))
        assert lines == ["a", "b"]


class TestApply:
    def test_update_end_to_end(self, tmp_path):
        target = tmp_path / "a.txt"
        target.write_text("one\ntwo\nthree\n", encoding="utf-8")

        PatchApplier().apply(
            _update("a.txt", _hunk(2, 1, (R, "two"), (A, "TWO"))), str(target),
        )

        assert target.read_bytes() == b"one\nTWO\nthree\n"

    def test_update_normalizes_crlf(self, tmp_path):
        target = tmp_path / "win.txt"
        target.write_bytes(b"a\r\nb\r\n")

        PatchApplier().apply(_update("win.txt", _hunk(1, 1, (A, "A"))), str(target))

        assert target.read_bytes() == b"A\nb\n"

    def test_update_context_whitespace_preserved(self, tmp_path):
        target = tmp_path / "code.py"
        target.write_text("def f():\n    return 1\n", encoding="utf-8")

        PatchApplier().apply(
            _update("code.py", _hunk(1, 2, (C, "def f():"), (R, "    return 1"),
                                     (C, "    # kept"), (A, "    return 2"))),
            str(target),
        )

        assert target.read_text(encoding="utf-8") == (
            "def f():\n    # kept\n    return 2\n"
        )

    def test_update_missing_file(self, tmp_path):
        with pytest.raises(PatchNotFoundError, match="File not found for update: gone.txt"):
            PatchApplier().apply(
                _update("gone.txt", _hunk(1, 1, (A, "x"))), str(tmp_path / "gone.txt"),
            )

    def test_add_creates_parents_and_exact_bytes(self, tmp_path):
        target = tmp_path / "deep" / "er" / "new.txt"
        parsed = ParsedPatch(op=PatchOp.ADD, path="deep/er/new.txt", content="foo\nbar\n")

        PatchApplier().apply(parsed, str(target))

        assert target.read_bytes() == b"foo\nbar\n"

    def test_add_overwrites_existing(self, tmp_path):
        target = tmp_path / "x.txt"
        target.write_text("old content that is long\n", encoding="utf-8")

        PatchApplier().apply(
            ParsedPatch(op=PatchOp.ADD, path="x.txt", content="new\n"), str(target),
        )

        assert target.read_text(encoding="utf-8") == "new\n"

    def test_delete_existing(self, tmp_path):
        target = tmp_path / "bye.txt"
        target.write_text("x", encoding="utf-8")

        PatchApplier().apply(ParsedPatch(op=PatchOp.DELETE, path="bye.txt"), str(target))

        assert not target.exists()

    def test_delete_missing_is_noop(self, tmp_path):
        PatchApplier().apply(
            ParsedPatch(op=PatchOp.DELETE, path="never.txt"), str(tmp_path / "never.txt"),
        )

    def test_delete_directory_is_io_error(self, tmp_path):
        (tmp_path / "adir").mkdir()
        with pytest.raises(PatchIOError):
            PatchApplier().apply(
                ParsedPatch(op=PatchOp.DELETE, path="adir"), str(tmp_path / "adir"),
            )
        assert os.path.isdir(tmp_path / "adir")
