"""
minish - A small UNIX command shell

Reads command lines, interprets the control operators '|', '&' and ';',
redirections and wildcards, and runs the result as real processes.
"""

__version__ = "1.0.0"
__author__ = "YSNRFD"

# Import main components for convenience
from .parsing import CommandParser
from .process import ProcessPipeline
from .history import HistoryStore
from .shell.shell import Shell

__all__ = [
    'CommandParser',
    'ProcessPipeline',
    'HistoryStore',
    'Shell',
]
