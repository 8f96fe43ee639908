"""
History Exceptions

Lookup misses when replaying command history. These are never fatal: the
shell reports them and returns to the prompt.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any

from .base import ShellError


class HistoryException(ShellError):
    """Base exception for history errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code=error_code or 3000, context=context)

    def __str__(self) -> str:
        return self.message


class HistoryNotFoundError(HistoryException):
    """
    No retained history entry matches the reference.

    Attributes:
        index: The 1-based index requested (for !N lookups)
        prefix: The prefix requested (for !prefix lookups)

    Example:
        >>> raise HistoryNotFoundError(index=42)
    """

    def __init__(
        self,
        index: Optional[int] = None,
        prefix: Optional[str] = None
    ) -> None:
        if index is not None:
            message = "Invalid command number entered."
            ctx = {"index": index}
        else:
            message = "Invalid command string entered."
            ctx = {"prefix": prefix}
        super().__init__(message, error_code=3001, context=ctx)
        self.index = index
        self.prefix = prefix
