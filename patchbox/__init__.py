"""
patchbox - sandboxed patch engine for code-editing agents.

Public API for library usage::

    from patchbox import PatchEngine

    engine = PatchEngine(lambda: "/workspace")
    engine.apply(patch_text).to_dict()
"""

from .engine import PatchEngine, EditResult
from .runtime import RuntimeStore, RuntimeState

__all__ = ["PatchEngine", "EditResult", "RuntimeStore", "RuntimeState"]
