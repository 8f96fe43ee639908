"""
Background Reaper

Collects finished background jobs without blocking so that they never
linger as zombies.

Author: YSNRFD
Version: 1.0.0
"""

import itertools
import sys
from typing import List, Optional, TextIO

from minish.logger import get_logger
from .job import Job, JobState


class BackgroundReaper:
    """
    Tracks background jobs and reclaims them once they finish.

    ``reap`` never blocks: it polls each tracked process and drops the jobs
    whose processes have all exited. The shell calls it whenever it is
    idle, and the pipeline calls it while waiting when a SIGCHLD has been
    seen.

    Example:
        >>> reaper = BackgroundReaper()
        >>> reaper.add(job)
        >>> finished = reaper.reap()
    """

    def __init__(self, err: Optional[TextIO] = None):
        self._logger = get_logger('reaper')
        self._jobs: dict[int, Job] = {}
        self._job_ids = itertools.count(1)
        self._err = err

    @property
    def jobs(self) -> List[Job]:
        return list(self._jobs.values())

    def __len__(self) -> int:
        return len(self._jobs)

    def add(self, job: Job) -> None:
        """Start tracking a background job and give it the next job number."""
        job.job_id = next(self._job_ids)
        self._jobs[job.job_id] = job
        self._logger.info(
            "Tracking background job",
            pid=job.leader_pid,
            context={'job': job.job_id, 'command': job.command}
        )

    def reap(self) -> List[Job]:
        """
        Collect every finished background job.

        Returns:
            The jobs collected by this call
        """
        finished = []

        for job_id, job in list(self._jobs.items()):
            if not job.poll():
                continue

            job.state = JobState.REAPED
            del self._jobs[job_id]
            finished.append(job)

            self._logger.info(
                "Reaped background job",
                pid=job.leader_pid,
                context={'job': job_id, 'status': job.status}
            )
            self._report(job)

        return finished

    def _report(self, job: Job) -> None:
        stream = self._err or sys.stderr
        print(f"[{job.job_id}] Done {job.status} {job.command}", file=stream)
        stream.flush()
