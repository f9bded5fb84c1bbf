"""
Runtime state - the persisted, reconfigurable settings the engine host
reads on every request (sandbox root, tool switch).
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass, fields, replace

from .editing.root_resolver import RootProvider

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME_FILE = "runtime.json"

_FIELD_CHECKS = {
    "root_dir": lambda v: isinstance(v, str) and bool(v.strip()),
    "tools_enabled": lambda v: isinstance(v, bool),
}


@dataclass(frozen=True)
class RuntimeState:
    root_dir: str = "."
    tools_enabled: bool = True


class RuntimeStore:
    """In-memory runtime state backed by a JSON file.

    ``load()`` merges the file over the defaults; a missing or unreadable
    file is replaced by the defaults. ``save()`` merges changes and
    rewrites the file.
    """

    def __init__(self, filepath: str = DEFAULT_RUNTIME_FILE,
                 defaults: RuntimeState | None = None) -> None:
        self.filepath = os.path.abspath(filepath)
        self._defaults = defaults or RuntimeState()
        self._state = self._defaults
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg) -> "RuntimeStore":
        store = cls(cfg.RUNTIME_FILE, RuntimeState(
            root_dir=cfg.ROOT_DIR,
            tools_enabled=cfg.TOOLS_ENABLED,
        ))
        store.load()
        return store

    def load(self) -> RuntimeState:
        """Read the runtime file, writing the defaults if it is unusable."""
        data = self._read_file()
        with self._lock:
            if data is None:
                self._state = self._defaults
            else:
                self._state = replace(self._defaults, **self._valid_fields(data))
            state = self._state
        if data is None:
            logger.info("[Runtime] No usable %s, writing defaults", self.filepath)
            self._write_file(state)
        return state

    def _valid_fields(self, data: dict) -> dict:
        """Keep the known keys whose values have the right type."""
        valid = {}
        for name, check in _FIELD_CHECKS.items():
            if name not in data:
                continue
            if check(data[name]):
                valid[name] = data[name]
            else:
                logger.warning("[Runtime] Ignoring invalid %s=%r in %s",
                               name, data[name], self.filepath)
        return valid

    def get(self) -> RuntimeState:
        with self._lock:
            return self._state

    def save(self, **changes) -> RuntimeState:
        """Merge *changes* into the state and persist it."""
        unknown = set(changes) - {f.name for f in fields(RuntimeState)}
        if unknown:
            raise ValueError(f"Unknown runtime setting(s): {', '.join(sorted(unknown))}")
        with self._lock:
            self._state = replace(self._state, **changes)
            state = self._state
        self._write_file(state)
        logger.info("[Runtime] Saved %s", changes)
        return state

    def root_provider(self) -> RootProvider:
        """Return a callable yielding the current absolute sandbox root."""
        return lambda: os.path.abspath(self.get().root_dir)

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _read_file(self) -> dict | None:
        if not os.path.isfile(self.filepath):
            return None
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return None
        return data if isinstance(data, dict) else None

    def _write_file(self, state: RuntimeState) -> None:
        tmp = self.filepath + ".tmp"
        parent = os.path.dirname(self.filepath)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(asdict(state), f, indent=2)
        os.replace(tmp, self.filepath)
