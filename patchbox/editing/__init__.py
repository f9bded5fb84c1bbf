"""Sandboxed patch editing - root confinement, patch parsing and hunk application."""

from .errors import (
    PatchError, PatchFormatError, PathSecurityError,
    PatchNotFoundError, PatchIOError,
)
from .root_resolver import resolve_within_root, is_within_root, RootProvider
from .patch_parser import (
    PatchParser, ParsedPatch, PatchOp, Hunk, HunkLine, LineKind, LineRange,
)
from .patch_applier import PatchApplier
from .path_locks import PathLocks
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "PatchError", "PatchFormatError", "PathSecurityError",
    "PatchNotFoundError", "PatchIOError",
    "resolve_within_root", "is_within_root", "RootProvider",
    "PatchParser", "ParsedPatch", "PatchOp", "Hunk", "HunkLine",
    "LineKind", "LineRange",
    "PatchApplier",
    "PathLocks",
    "log_edit_metric", "read_edit_stats",
]
