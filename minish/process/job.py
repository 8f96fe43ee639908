"""
Job Module

A job is one group of stages launched together: a single command or a
chain of commands joined by pipes. Foreground jobs are waited on as a
whole; background jobs are handed to the reaper.

Author: YSNRFD
Version: 1.0.0
"""

import subprocess
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, List


SPAWN_FAILED = -1
"""Status reported when the final stage of a group could not be started."""


class JobState(Enum):
    """
    Job lifecycle states.

    State transitions:
        RUNNING -> DONE: every started process has exited
        RUNNING -> REAPED: a background job collected by the reaper
    """

    RUNNING = auto()
    """At least one process of the job is still alive."""

    DONE = auto()
    """All processes have exited and their statuses are known."""

    REAPED = auto()
    """Background job whose completion has been reported."""


def exit_status(returncode: Optional[int]) -> int:
    """
    Translate a subprocess return code to a shell exit status.

    Processes killed by signal N report 128 + N.
    """
    if returncode is None:
        return SPAWN_FAILED
    if returncode < 0:
        return 128 - returncode
    return returncode


@dataclass
class Job:
    """
    Processes started for one stage group.

    ``processes`` holds one entry per stage in order; an entry is None when
    that stage could not be started.
    """
    command: str
    processes: List[Optional[subprocess.Popen]] = field(default_factory=list)
    background: bool = False
    job_id: Optional[int] = None
    state: JobState = JobState.RUNNING
    started_at: float = field(default_factory=time.time)

    @property
    def started(self) -> List[subprocess.Popen]:
        return [p for p in self.processes if p is not None]

    @property
    def pids(self) -> List[int]:
        return [p.pid for p in self.started]

    @property
    def leader_pid(self) -> Optional[int]:
        """Pid of the last process that was actually started."""
        started = self.started
        return started[-1].pid if started else None

    def poll(self) -> bool:
        """
        Check without blocking whether every process has exited.

        Returns:
            True once the whole job is finished
        """
        if self.state is not JobState.RUNNING:
            return True

        if all(p.poll() is not None for p in self.started):
            self.state = JobState.DONE
            return True
        return False

    @property
    def status(self) -> int:
        """Exit status of the final stage, or SPAWN_FAILED if it never started."""
        if not self.processes or self.processes[-1] is None:
            return SPAWN_FAILED
        return exit_status(self.processes[-1].returncode)
