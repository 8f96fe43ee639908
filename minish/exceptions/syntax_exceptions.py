"""
Syntax Exceptions

Errors detected while segmenting a command line, before any process is
spawned. Each one maps to a distinct SegmentStatus so callers can tell the
conditions apart without parsing messages.

Author: YSNRFD
Version: 1.0.0
"""

from enum import Enum
from typing import Optional, Any

from .base import ShellError


class SegmentStatus(Enum):
    """Outcome of segmenting one token sequence."""
    OK = "ok"
    EMPTY_LINE = "empty_line"
    LEADING_SEPARATOR = "leading_separator"
    DOUBLED_SEPARATOR = "doubled_separator"
    DANGLING_PIPE = "dangling_pipe"
    MISSING_COMMAND = "missing_command"


class ShellSyntaxError(ShellError):
    """
    Base exception for malformed command lines.

    Attributes:
        status: The SegmentStatus describing the condition
        position: Index of the offending token (if applicable)
    """

    status: SegmentStatus = SegmentStatus.OK

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if position is not None:
            ctx["position"] = position
        super().__init__(message, error_code=error_code or 1000, context=ctx)
        self.position = position

    def __str__(self) -> str:
        return f"syntax error: {self.message}"


class LeadingSeparatorError(ShellSyntaxError):
    """
    The line starts with a control operator.

    Example:
        >>> raise LeadingSeparatorError("|")
    """

    status = SegmentStatus.LEADING_SEPARATOR

    def __init__(self, operator: str) -> None:
        super().__init__(
            f"unexpected '{operator}' at start of line",
            position=0,
            error_code=1001,
        )
        self.operator = operator


class DoubledSeparatorError(ShellSyntaxError):
    """Two control operators with no command between them."""

    status = SegmentStatus.DOUBLED_SEPARATOR

    def __init__(self, operator: str, position: int) -> None:
        super().__init__(
            f"unexpected '{operator}' after another separator",
            position=position,
            error_code=1002,
        )
        self.operator = operator


class DanglingPipeError(ShellSyntaxError):
    """The line ends with a pipe that feeds nothing."""

    status = SegmentStatus.DANGLING_PIPE

    def __init__(self, position: int) -> None:
        super().__init__(
            "pipe at end of line has no command to feed",
            position=position,
            error_code=1003,
        )


class MissingCommandError(ShellSyntaxError):
    """A stage is left with no program word once redirections are removed."""

    status = SegmentStatus.MISSING_COMMAND

    def __init__(self, position: Optional[int] = None) -> None:
        super().__init__(
            "redirection without a command",
            position=position,
            error_code=1004,
        )
