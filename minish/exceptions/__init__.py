"""
minish Exception Hierarchy

All custom exceptions inherit from ShellError, with sub-categories for the
stage of the engine that raised them.

Architecture:
    ShellError (Base)
    ├── ShellSyntaxError
    │   ├── LeadingSeparatorError
    │   ├── DoubledSeparatorError
    │   ├── DanglingPipeError
    │   └── MissingCommandError
    ├── ProcessException
    │   ├── SpawnError
    │   ├── PipeCreationError
    │   ├── RedirectionError
    │   └── DescriptorError
    ├── HistoryException
    │   └── HistoryNotFoundError
    └── ConfigException
        └── ConfigValidationError
"""

from .base import (
    ShellError,
    ConfigException,
    ConfigValidationError,
)

from .syntax_exceptions import (
    SegmentStatus,
    ShellSyntaxError,
    LeadingSeparatorError,
    DoubledSeparatorError,
    DanglingPipeError,
    MissingCommandError,
)

from .process_exceptions import (
    ProcessException,
    SpawnError,
    PipeCreationError,
    RedirectionError,
    DescriptorError,
)

from .history_exceptions import (
    HistoryException,
    HistoryNotFoundError,
)

__all__ = [
    # Base
    "ShellError",
    # Config exceptions
    "ConfigException",
    "ConfigValidationError",
    # Syntax exceptions
    "SegmentStatus",
    "ShellSyntaxError",
    "LeadingSeparatorError",
    "DoubledSeparatorError",
    "DanglingPipeError",
    "MissingCommandError",
    # Process exceptions
    "ProcessException",
    "SpawnError",
    "PipeCreationError",
    "RedirectionError",
    "DescriptorError",
    # History exceptions
    "HistoryException",
    "HistoryNotFoundError",
]
