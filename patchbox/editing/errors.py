"""
Engine errors - every failure the patch engine can report to a caller.
"""


class PatchError(Exception):
    """Base class for failures local to a single engine request."""

    kind = "error"


class PatchFormatError(PatchError):
    """Raised when patch text does not follow the patch grammar."""

    kind = "format"


class PathSecurityError(PatchError):
    """Raised when a requested path resolves outside the sandbox root."""

    kind = "security"


class PatchNotFoundError(PatchError):
    """Raised when the target of an update cannot be read."""

    kind = "not_found"


class PatchIOError(PatchError):
    """Raised for any other filesystem failure (write, mkdir, unlink)."""

    kind = "io"
