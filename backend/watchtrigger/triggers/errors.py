"""
Directory trigger error hierarchy.

Pattern and config errors are raised synchronously to the caller.
Filesystem errors during a scan are never raised: the scanner logs them
and skips the affected subtree.
"""

from typing import List, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import PathPattern


class TriggerError(Exception):
    """Base exception for directory trigger failures."""

    pass


class InvalidPatternError(TriggerError):
    """Raised when a glob expression cannot be compiled."""

    def __init__(
        self,
        expression: str,
        reason: str,
        registered: Optional[Set["PathPattern"]] = None,
    ):
        self.expression = expression
        self.reason = reason
        # Patterns from the same register() call that did succeed
        self.registered: Set["PathPattern"] = set(registered or ())
        super().__init__(f"Invalid glob pattern {expression!r}: {reason}")


class InvalidConfigError(TriggerError):
    """Raised when trigger configuration fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        message = "Invalid trigger configuration:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(message)


class TriggerStateError(TriggerError):
    """Raised when an operation is not valid in the trigger's current state."""

    pass
