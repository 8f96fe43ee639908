"""
Process Pipeline Module

Realizes a list of stages as operating system processes:
- Groups stages joined by '|' and wires them with anonymous pipes
- Waits for every process of a foreground group
- Detaches background groups and hands them to the reaper
- Runs builtins in the shell process with save/restore redirection
- Runs wildcard expansions one after another

A failure to start one stage is reported and only affects that stage.
Siblings already running are still waited on.

Author: YSNRFD
Version: 1.0.0
"""

import os
import subprocess
import sys
from typing import Callable, Iterator, List, Optional, TextIO

from minish.core.config_loader import get_config
from minish.exceptions import (
    ProcessException,
    PipeCreationError,
    SpawnError,
    RedirectionError,
    DescriptorError,
)
from minish.logger import get_logger
from minish.parsing.redirection import (
    STDIN_FD,
    STDOUT_FD,
    STDERR_FD,
    close_fds,
    open_stage_files,
    redirected_stdio,
)
from minish.parsing.segmenter import Stage
from .job import Job, JobState, SPAWN_FAILED
from .reaper import BackgroundReaper
from .signals import SignalChannel, INTERRUPT_NOTICE


def iter_groups(stages: List[Stage]) -> Iterator[List[Stage]]:
    """
    Yield runs of stages that are joined by pipes.

    Each run ends with a stage terminated by ';' or '&'.
    """
    group: List[Stage] = []
    for stage in stages:
        group.append(stage)
        if not stage.pipes_to_next:
            yield group
            group = []
    if group:
        yield group


class ProcessPipeline:
    """
    Executes parsed stages.

    Example:
        >>> pipeline = ProcessPipeline(BackgroundReaper(), SignalChannel())
        >>> status = pipeline.run(CommandParser().parse("ls | wc -l"))
    """

    def __init__(
        self,
        reaper: Optional[BackgroundReaper] = None,
        channel: Optional[SignalChannel] = None,
        builtins=None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        poll_interval: Optional[float] = None,
        stop_requested: Optional[Callable[[], bool]] = None
    ):
        """
        Initialize the pipeline.

        Args:
            reaper: Receives background jobs
            channel: Signal notifications observed while waiting
            builtins: Object with is_builtin(name) and execute(name, args)
            out: Stream for shell messages (defaults to sys.stdout)
            err: Stream for error messages (defaults to sys.stderr)
            poll_interval: Seconds between checks of the signal channel
            stop_requested: Checked between groups; no further group runs once
                it returns True
        """
        self._logger = get_logger('pipeline')
        self._reaper = reaper if reaper is not None else BackgroundReaper(err)
        self._channel = channel if channel is not None else SignalChannel()
        self._builtins = builtins
        self._out = out
        self._err = err
        self._poll_interval = poll_interval or get_config().process.wait_poll_interval
        self._stop_requested = stop_requested or (lambda: False)

    @property
    def reaper(self) -> BackgroundReaper:
        return self._reaper

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def run(self, stages: List[Stage]) -> int:
        """
        Run every group of a parsed line in order.

        Stops early when stop_requested reports that the shell is exiting.

        Args:
            stages: Stages produced by CommandParser.parse

        Returns:
            Status of the last group run
        """
        status = 0
        for group in iter_groups(stages):
            if self._stop_requested():
                break
            status = self._run_group(group)
        return status

    def _run_group(self, group: List[Stage]) -> int:
        background = group[-1].background

        if len(group) == 1:
            stage = group[0]
            if not background and self._is_builtin(stage):
                return self._run_builtin(stage)
            if len(stage.invocations) > 1:
                return self._run_expansions(stage, background)

        try:
            job = self._spawn_chain(group)
        except PipeCreationError as e:
            self._report_failure(e)
            return SPAWN_FAILED

        job.background = background
        if background:
            return self._detach(job)
        return self._wait(job)

    # Spawning

    def _open_channels(self, count: int) -> List[tuple[int, int]]:
        channels: List[tuple[int, int]] = []
        try:
            for _ in range(count):
                channels.append(os.pipe())
        except OSError as e:
            close_fds(fd for pair in channels for fd in pair)
            raise PipeCreationError(e.strerror or str(e)) from e
        return channels

    def _spawn_chain(self, group: List[Stage]) -> Job:
        """
        Start one process per stage, stage i reading from channel i-1 and
        writing to channel i.

        The parent closes its copy of each channel end as soon as the
        stage using it has been started (or has failed to start).
        """
        n = len(group)
        channels = self._open_channels(n - 1)
        pending = {fd for pair in channels for fd in pair}
        job = Job(command=" | ".join(stage.text for stage in group))

        try:
            for i, stage in enumerate(group):
                stdin = channels[i - 1][0] if i > 0 else None
                stdout = channels[i][1] if i < n - 1 else None
                try:
                    job.processes.append(self._spawn(stage, stage.argv, stdin, stdout))
                finally:
                    own = [fd for fd in (stdin, stdout) if fd is not None]
                    close_fds(own)
                    pending.difference_update(own)
        finally:
            close_fds(pending)

        return job

    def _spawn(
        self,
        stage: Stage,
        argv: List[str],
        stdin: Optional[int] = None,
        stdout: Optional[int] = None
    ) -> Optional[subprocess.Popen]:
        files = self._open_files(stage)
        if files is None:
            return None
        try:
            return self._popen(
                argv,
                files.get(STDIN_FD, stdin),
                files.get(STDOUT_FD, stdout),
                files.get(STDERR_FD),
            )
        finally:
            close_fds(files.values())

    def _open_files(self, stage: Stage) -> Optional[dict[int, int]]:
        try:
            return open_stage_files(stage)
        except RedirectionError as e:
            self._report_failure(e)
            return None

    def _popen(
        self,
        argv: List[str],
        stdin: Optional[int],
        stdout: Optional[int],
        stderr: Optional[int]
    ) -> Optional[subprocess.Popen]:
        self.out.flush()
        try:
            proc = subprocess.Popen(
                argv,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                close_fds=True,
            )
        except FileNotFoundError:
            self._report_failure(SpawnError(argv[0], "command not found"))
            return None
        except OSError as e:
            self._report_failure(SpawnError(argv[0], e.strerror or str(e)))
            return None

        self._logger.debug("Spawned stage", pid=proc.pid, context={'argv': " ".join(argv)})
        return proc

    # Lifecycle

    def _run_expansions(self, stage: Stage, background: bool) -> int:
        """
        Run one child per glob expansion, sharing the stage's redirections.

        In the foreground each child is waited on before the next starts and
        the status of the last one is returned.
        """
        files = self._open_files(stage)
        if files is None:
            return SPAWN_FAILED

        stdin = files.get(STDIN_FD)
        stdout = files.get(STDOUT_FD)
        stderr = files.get(STDERR_FD)

        try:
            if background:
                job = Job(
                    command=stage.text,
                    processes=[self._popen(argv, stdin, stdout, stderr) for argv in stage.invocations],
                    background=True,
                )
                return self._detach(job)

            status = SPAWN_FAILED
            for argv in stage.invocations:
                job = Job(command=" ".join(argv), processes=[self._popen(argv, stdin, stdout, stderr)])
                status = self._wait(job)
            return status
        finally:
            close_fds(files.values())

    def _wait(self, job: Job) -> int:
        """Block until every started process of the job has exited."""
        with self._channel.observing_interrupts():
            for proc in job.started:
                while True:
                    try:
                        proc.wait(timeout=self._poll_interval)
                        break
                    except subprocess.TimeoutExpired:
                        self._observe_signals()
            self._observe_signals()

        job.state = JobState.DONE
        status = job.status
        self._logger.debug(
            "Foreground job finished",
            pid=job.leader_pid,
            context={'command': job.command, 'status': status}
        )
        return status

    def _observe_signals(self) -> None:
        if self._channel.consume_interrupt():
            print(INTERRUPT_NOTICE, file=self.err)
            self.err.flush()
        if self._channel.consume_child_event():
            self._reaper.reap()

    def _detach(self, job: Job) -> int:
        if not job.started:
            return SPAWN_FAILED

        self._reaper.add(job)
        print(f"Background job started with PID: {job.leader_pid}", file=self.out)
        self.out.flush()
        return 0

    # Builtins

    def _is_builtin(self, stage: Stage) -> bool:
        return self._builtins is not None and self._builtins.is_builtin(stage.command)

    def _run_builtin(self, stage: Stage) -> int:
        try:
            with redirected_stdio(stage):
                return self._builtins.execute(stage.command, stage.argv[1:])
        except (RedirectionError, DescriptorError) as e:
            self._report_failure(e)
            return 1

    def _report_failure(self, error: ProcessException) -> None:
        self._logger.warning(str(error), context=error.context)
        print(f"minish: {error}", file=self.err)
        self.err.flush()
