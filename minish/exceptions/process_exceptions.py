"""
Process Exceptions

Exceptions related to realizing pipeline stages as operating system
processes. These are local to the stage that raised them: the pipeline
reports them and keeps running the siblings already in flight.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any

from .base import ShellError


class ProcessException(ShellError):
    """
    Base exception for all process-related errors.

    Attributes:
        message: Human-readable error description
        pid: Process ID associated with the error (if applicable)
        error_code: Numeric error code for programmatic handling
    """

    def __init__(
        self,
        message: str,
        pid: Optional[int] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if pid is not None:
            ctx["pid"] = pid
        super().__init__(message, error_code=error_code or 2000, context=ctx)
        self.pid = pid

    def __str__(self) -> str:
        return self.message


class SpawnError(ProcessException):
    """
    A stage's program could not be started.

    Common causes include:
    - Program not found on PATH
    - Permission denied
    - Process table exhausted

    Example:
        >>> raise SpawnError("nosuchprog", "command not found")
    """

    def __init__(
        self,
        program: str,
        reason: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["program"] = program
        super().__init__(
            message=f"{program}: {reason}",
            error_code=2001,
            context=ctx
        )
        self.program = program
        self.reason = reason


class PipeCreationError(ProcessException):
    """An inter-stage channel could not be allocated."""

    def __init__(
        self,
        reason: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=f"cannot create pipe: {reason}",
            error_code=2002,
            context=context
        )
        self.reason = reason


class RedirectionError(ProcessException):
    """
    A redirection target could not be opened.

    Example:
        >>> raise RedirectionError("/no/such/dir/out.txt", "No such file or directory")
    """

    def __init__(
        self,
        path: str,
        reason: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        ctx["path"] = path
        super().__init__(
            message=f"{path}: {reason}",
            error_code=2003,
            context=ctx
        )
        self.path = path
        self.reason = reason


class DescriptorError(ProcessException):
    """The shell's own standard descriptors could not be duplicated or restored."""

    def __init__(
        self,
        message: str,
        fd: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if fd is not None:
            ctx["fd"] = fd
        super().__init__(
            message=message,
            error_code=2004,
            context=ctx
        )
        self.fd = fd
