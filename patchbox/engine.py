"""
Request facade for the patch engine - the single entry point used by
tool-calling collaborators.

Example usage::

    from patchbox import PatchEngine

    engine = PatchEngine(lambda: "/workspace")
    result = engine.apply(patch_text)
    print(result.to_dict())   # {"ok": True, "path": "a.txt", "op": "update"}
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Optional

from .editing.errors import PatchError, PatchFormatError, PatchIOError
from .editing.metrics import log_edit_metric
from .editing.patch_applier import PatchApplier, write_text
from .editing.patch_parser import PatchParser
from .editing.path_locks import PathLocks
from .editing.root_resolver import RootProvider, resolve_within_root

_logger = logging.getLogger(__name__)

REWRITE_OP = "rewrite"


@dataclass
class EditResult:
    """Structured result of one engine request."""
    ok: bool
    path: str = ""
    op: str = ""
    error: str = ""
    error_kind: str = ""

    def to_dict(self) -> dict:
        """Transport shape: ``{ok, path, op}`` or ``{error}``."""
        if self.ok:
            return {"ok": True, "path": self.path, "op": self.op}
        return {"error": self.error}


class PatchEngine:
    """Apply patches and rewrite files under a sandbox root.

    Args:
        root_provider: Zero-argument callable returning the sandbox root,
            queried on every request.
        applier: Applier to use (default: a plain :class:`PatchApplier`).
        locks: Per-path lock table; pass ``None`` to disable serialization
            of same-path requests.
        metrics_root: Directory for the request journal, or ``None`` to
            skip journaling.
    """

    def __init__(
        self,
        root_provider: RootProvider,
        applier: Optional[PatchApplier] = None,
        locks: Optional[PathLocks] = None,
        metrics_root: Optional[str] = None,
    ) -> None:
        self._root_provider = root_provider
        self._parser = PatchParser()
        self._applier = applier or PatchApplier()
        self._locks = locks
        self._metrics_root = metrics_root

    @classmethod
    def from_config(cls, cfg, root_provider: RootProvider) -> "PatchEngine":
        """Build an engine with the switches from a :class:`Config`."""
        return cls(
            root_provider,
            applier=PatchApplier(track_offsets=cfg.TRACK_OFFSETS),
            locks=PathLocks() if cfg.SERIALIZE_PATHS else None,
            metrics_root=cfg.METRICS_DIR if cfg.METRICS_ENABLED else None,
        )

    # ── Public operations ──

    def apply(self, raw_patch: Any) -> EditResult:
        """Parse *raw_patch* and apply it to the one file it names."""
        text = raw_patch if isinstance(raw_patch, str) else ""
        op = ""
        path = ""
        try:
            parsed = self._parser.parse(text)
            op, path = parsed.op.value, parsed.path
            abs_path = resolve_within_root(self._root_provider, parsed.path)
            with self._hold(abs_path):
                self._applier.apply(parsed, abs_path)
        except PatchError as exc:
            return self._failure(exc, op, path)
        except OSError as exc:
            return self._failure(PatchIOError(str(exc)), op, path)
        except Exception as exc:
            _logger.exception("[PatchEngine] Unexpected error in %s %s", op or "patch", path or "-")
            return self._failure(PatchIOError(str(exc)), op, path)

        _logger.info("[PatchEngine] %s %s", op, path)
        return self._success(path, op)

    def rewrite(self, path: Any, content: Any = "") -> EditResult:
        """Replace the whole content of *path*, creating parents as needed."""
        if not isinstance(path, str) or not path.strip():
            return self._failure(
                PatchFormatError("Missing or invalid 'path' for rewrite_file"),
                REWRITE_OP, "",
            )
        text = content if isinstance(content, str) else ""
        try:
            abs_path = resolve_within_root(self._root_provider, path)
            with self._hold(abs_path):
                write_text(abs_path, text, make_parents=True)
        except PatchError as exc:
            return self._failure(exc, REWRITE_OP, path)
        except OSError as exc:
            return self._failure(PatchIOError(str(exc)), REWRITE_OP, path)
        except Exception as exc:
            _logger.exception("[PatchEngine] Unexpected error in rewrite %s", path)
            return self._failure(PatchIOError(str(exc)), REWRITE_OP, path)

        _logger.info("[PatchEngine] rewrite %s (%d chars)", path, len(text))
        return self._success(path, REWRITE_OP)

    # ── Internals ──

    def _hold(self, abs_path: str):
        if self._locks is None:
            return nullcontext()
        return self._locks.hold(abs_path)

    def _success(self, path: str, op: str) -> EditResult:
        self._journal({"op": op, "path": path, "ok": True})
        return EditResult(ok=True, path=path, op=op)

    def _failure(self, exc: PatchError, op: str, path: str) -> EditResult:
        _logger.warning("[PatchEngine] %s %s failed (%s): %s",
                        op or "patch", path or "-", exc.kind, exc)
        self._journal({
            "op": op, "path": path, "ok": False,
            "error_kind": exc.kind, "error": str(exc),
        })
        return EditResult(ok=False, path=path, op=op,
                          error=str(exc), error_kind=exc.kind)

    def _journal(self, data: dict) -> None:
        if self._metrics_root is not None:
            log_edit_metric(data, project_root=self._metrics_root)

