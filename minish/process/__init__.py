"""
minish Process Module

Runs parsed stages as operating system processes:
- Pipe wiring and spawning
- Foreground waiting and background detaching
- Reaping of finished background jobs
- Signal notifications observed while waiting
"""

from .job import Job, JobState, SPAWN_FAILED, exit_status
from .pipeline import ProcessPipeline, iter_groups
from .reaper import BackgroundReaper
from .signals import SignalChannel, INTERRUPT_NOTICE, INTERRUPT_SIGNALS

__all__ = [
    'Job',
    'JobState',
    'SPAWN_FAILED',
    'exit_status',
    'ProcessPipeline',
    'iter_groups',
    'BackgroundReaper',
    'SignalChannel',
    'INTERRUPT_NOTICE',
    'INTERRUPT_SIGNALS',
]
