"""
Patch parser - parses the minimal patch language sent by editing agents
into an immutable patch operation.

Format::

    *** Begin Patch
    *** Update File: src/app.py
    @@ -2,1 +2,1 @@
    -old line
    +new line
    *** End Patch
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .errors import PatchFormatError

logger = logging.getLogger(__name__)

# Markers
_BEGIN_MARKER = "*** Begin Patch"
_HEADERS = (
    ("*** Add File:", "add"),
    ("*** Update File:", "update"),
    ("*** Delete File:", "delete"),
)

# Patterns
_HUNK_HEADER = re.compile(r"^@@ -(\d+),(\d+) \+(\d+),(\d+) @@")


class PatchOp(str, enum.Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


class LineKind(str, enum.Enum):
    CONTEXT = "context"
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class LineRange:
    """A ``start,count`` pair from a hunk header (start is 1-based)."""
    start: int
    count: int


@dataclass(frozen=True)
class HunkLine:
    kind: LineKind
    text: str


@dataclass(frozen=True)
class Hunk:
    """One ``@@`` block: the old range it replaces plus its body lines."""
    old_range: LineRange
    new_range: LineRange           # informational, never validated
    lines: tuple[HunkLine, ...] = ()

    def replacement(self) -> list[str]:
        """Lines that take the place of ``old_range`` (context + add)."""
        return [
            line.text for line in self.lines
            if line.kind in (LineKind.ADD, LineKind.CONTEXT)
        ]


@dataclass(frozen=True)
class ParsedPatch:
    """A single-file patch operation.

    ``content`` is only set for adds; ``hunks`` is only non-empty for
    updates.
    """
    op: PatchOp
    path: str
    content: Optional[str] = None
    hunks: tuple[Hunk, ...] = field(default_factory=tuple)


class PatchParser:
    """Parse patch text into a :class:`ParsedPatch`."""

    def parse(self, raw: str) -> ParsedPatch:
        """Parse raw patch text.

        Parameters
        ----------
        raw:
            The patch text as received from the caller.

        Returns
        -------
        ParsedPatch
            The parsed operation.

        Raises
        ------
        PatchFormatError
            If the begin marker or the operation header is missing, or if
            the patch names more than one operation.
        """
        lines = self._split_lines(raw)

        if not lines or _BEGIN_MARKER not in lines[0]:
            raise PatchFormatError(f"Patch missing {_BEGIN_MARKER}")

        op, path = self._parse_header(lines)

        if op is PatchOp.DELETE:
            return ParsedPatch(op=op, path=path)

        if op is PatchOp.ADD:
            return ParsedPatch(op=op, path=path, content=self._parse_add_body(lines))

        hunks = self._parse_hunks(lines)
        logger.debug("[PatchEngine] Parsed %d hunk(s) for %s", len(hunks), path)
        return ParsedPatch(op=op, path=path, hunks=tuple(hunks))

    # ------------------------------------------------------------------
    # Internal parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _split_lines(raw: str) -> list[str]:
        lines = raw.replace("\r\n", "\n").split("\n")
        # A final newline terminates the last line, it does not open one
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()
        return lines

    @staticmethod
    def _parse_header(lines: list[str]) -> tuple[PatchOp, str]:
        """Find the single Add/Update/Delete header and its path."""
        found: list[tuple[PatchOp, str]] = []
        for line in lines:
            for prefix, op in _HEADERS:
                if line.startswith(prefix):
                    found.append((PatchOp(op), line[len(prefix):].strip()))
                    break

        if not found or not found[0][1]:
            raise PatchFormatError(
                "Patch must contain one of Add/Update/Delete headers"
            )
        if len(found) > 1:
            logger.warning(
                "[PatchEngine] Patch names %d operations, rejecting", len(found)
            )
            raise PatchFormatError(
                "Patch contains more than one Add/Update/Delete header"
            )
        return found[0]

    @staticmethod
    def _parse_add_body(lines: list[str]) -> str:
        content_lines = [
            line[1:] for line in lines
            if line.startswith("+") and not line.startswith("+++")
        ]
        if not content_lines:
            return ""
        return "\n".join(content_lines) + "\n"

    @staticmethod
    def _parse_hunks(lines: list[str]) -> list[Hunk]:
        """Group the lines following each ``@@`` header into hunks."""
        hunks: list[Hunk] = []
        header: Optional[re.Match] = None
        body: list[HunkLine] = []

        def _close() -> None:
            if header is not None:
                old_start, old_count = int(header.group(1)), int(header.group(2))
                if old_start < 1 and old_count > 0:
                    raise PatchFormatError(
                        f"Hunk removes {old_count} line(s) starting at line 0: {header.group(0)}"
                    )
                hunks.append(Hunk(
                    old_range=LineRange(old_start, old_count),
                    new_range=LineRange(int(header.group(3)), int(header.group(4))),
                    lines=tuple(body),
                ))

        for line in lines:
            match = _HUNK_HEADER.match(line)
            if match:
                _close()
                header = match
                body = []
                continue

            if header is None:
                continue

            if line.startswith("+") and not line.startswith("+++"):
                body.append(HunkLine(LineKind.ADD, line[1:]))
            elif line.startswith("-") and not line.startswith("---"):
                body.append(HunkLine(LineKind.REMOVE, line[1:]))
            elif not line.startswith("***") and not line.startswith("@@"):
                body.append(HunkLine(LineKind.CONTEXT, line))

        _close()
        return hunks
