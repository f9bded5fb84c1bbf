"""
Patch applier - executes a parsed add/update/delete operation against
the filesystem.
"""

from __future__ import annotations

import logging
import os

from .errors import PatchIOError, PatchNotFoundError
from .patch_parser import Hunk, ParsedPatch, PatchOp

logger = logging.getLogger(__name__)


class PatchApplier:
    """Apply a :class:`ParsedPatch` to an already-resolved path.

    Hunks are spliced in patch order using the line numbers in their
    headers, which refer to the untouched file. Hunks out of ascending
    order or overlapping give undefined results. With
    ``track_offsets=True`` each later start is shifted by the line count
    change of the hunks before it instead.
    """

    def __init__(self, track_offsets: bool = False) -> None:
        self._track_offsets = track_offsets

    def apply(self, parsed: ParsedPatch, abs_path: str) -> None:
        """Apply *parsed* to *abs_path*.

        Parameters
        ----------
        parsed:
            The operation from :class:`PatchParser`.
        abs_path:
            Absolute target path, already confined to the sandbox root.

        Raises
        ------
        PatchNotFoundError
            If an update target cannot be read.
        PatchIOError
            For any other filesystem failure.
        """
        if parsed.op is PatchOp.DELETE:
            self._delete(abs_path)
        elif parsed.op is PatchOp.ADD:
            write_text(abs_path, parsed.content or "", make_parents=True)
        else:
            self._update(parsed, abs_path)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @staticmethod
    def _delete(abs_path: str) -> None:
        try:
            os.unlink(abs_path)
        except FileNotFoundError:
            logger.debug("[PatchEngine] Delete of missing file %s ignored", abs_path)
        except (OSError, ValueError) as exc:
            raise PatchIOError(f"Failed to delete {abs_path}: {exc}") from exc

    def _update(self, parsed: ParsedPatch, abs_path: str) -> None:
        try:
            with open(abs_path, "r", encoding="utf-8", newline="") as f:
                original = f.read()
        except (OSError, ValueError) as exc:
            raise PatchNotFoundError(
                f"File not found for update: {parsed.path}"
            ) from exc

        lines = split_lines(original)
        lines = self.splice_hunks(lines, parsed.hunks)
        write_text(abs_path, "\n".join(lines) + "\n")
        logger.info(
            "[PatchEngine] Applied %d hunk(s) to %s", len(parsed.hunks), parsed.path,
        )

    def splice_hunks(self, lines: list[str], hunks: tuple[Hunk, ...]) -> list[str]:
        """Return *lines* with every hunk spliced in, in patch order."""
        result = list(lines)
        delta = 0
        for hunk in hunks:
            start = hunk.old_range.start - 1
            if self._track_offsets:
                start += delta
            replacement = hunk.replacement()
            result[start:start + hunk.old_range.count] = replacement
            delta += len(replacement) - hunk.old_range.count
        return result


# ----------------------------------------------------------------------
# Text helpers shared with the request facade
# ----------------------------------------------------------------------

def split_lines(text: str) -> list[str]:
    """Split *text* into lines, normalizing CRLF to LF.

    The empty element a trailing newline would produce is dropped.
    """
    lines = text.replace("\r\n", "\n").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def write_text(abs_path: str, content: str, make_parents: bool = False) -> None:
    """Overwrite *abs_path* with *content* (no temp file, no rename)."""
    try:
        data = content.encode("utf-8")
        if make_parents:
            parent = os.path.dirname(abs_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
        with open(abs_path, "wb") as f:
            f.write(data)
    except (OSError, ValueError) as exc:
        # ValueError: NUL in path, or a lone surrogate the codec rejects
        raise PatchIOError(f"Failed to write {abs_path}: {exc}") from exc
