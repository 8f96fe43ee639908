"""
minish Shell Module

Provides the interactive command-line shell:
- Read loop and prompt
- Built-in commands
- History replay
"""

from .builtins import BuiltinCommands
from .shell import Shell, SYNTAX_ERROR_STATUS

__all__ = [
    'BuiltinCommands',
    'Shell',
    'SYNTAX_ERROR_STATUS',
]
