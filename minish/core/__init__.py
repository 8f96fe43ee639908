"""
minish Core

Configuration shared by every engine subsystem.
"""

from .config_loader import (
    Config,
    ConfigLoader,
    LoggingConfig,
    ProcessConfig,
    ShellConfig,
    get_config,
)

__all__ = [
    'Config',
    'ConfigLoader',
    'LoggingConfig',
    'ProcessConfig',
    'ShellConfig',
    'get_config',
]
