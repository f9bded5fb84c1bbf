"""
Root resolver - confines caller-relative paths to the sandbox root.
"""

from __future__ import annotations

import logging
import os
from typing import Callable

from .errors import PathSecurityError

logger = logging.getLogger(__name__)

RootProvider = Callable[[], str]


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.normpath(path))


def is_within_root(root: str, candidate: str) -> bool:
    """Return True if *candidate* is *root* itself or lies below it.

    The root is treated as a directory boundary, so ``/a/b`` does not
    contain ``/a/bc``.
    """
    root_norm = _normalize(root)
    cand_norm = _normalize(candidate)
    if cand_norm == root_norm:
        return True
    prefix = root_norm if root_norm.endswith(os.sep) else root_norm + os.sep
    return cand_norm.startswith(prefix)


def resolve_within_root(root_provider: RootProvider, rel_path: str) -> str:
    """Resolve *rel_path* against the current sandbox root.

    Parameters
    ----------
    root_provider:
        Zero-argument callable returning the sandbox root. It is called
        on every resolve so a reconfigured root applies immediately.
    rel_path:
        Caller-supplied path. Empty or whitespace-only means the root.

    Returns
    -------
    str
        Absolute, normalized path under the root.

    Raises
    ------
    PathSecurityError
        If the resolved path escapes the root.
    """
    root = os.path.abspath(root_provider())
    rel = rel_path if rel_path and rel_path.strip() else "."
    abs_path = os.path.normpath(os.path.join(root, rel))

    if not is_within_root(root, abs_path):
        logger.warning(
            "[PatchEngine] Rejected path outside root: %r (root=%s)",
            rel_path, root,
        )
        raise PathSecurityError(
            f'Refusing to write outside root. rel="{rel_path}", root="{root}"'
        )
    return abs_path
