#!/usr/bin/env python3
"""
minish Process Pipeline Tests

Spawns real processes (echo, cat, sort, tr, true, false, sleep, sh) and
checks wiring, statuses and background handling. Files are written under a
temporary directory.

Run with: python -m pytest minish/tests/test_pipeline.py -v

Author: YSNRFD
Version: 1.0.0
"""

import io
import os
import signal
import threading
import tempfile
import time
import unittest

from minish.parsing import CommandParser
from minish.process import (
    BackgroundReaper,
    Job,
    ProcessPipeline,
    SignalChannel,
    SPAWN_FAILED,
    INTERRUPT_NOTICE,
    exit_status,
    iter_groups,
)


def wait_for(predicate, timeout=5.0, interval=0.02):
    """Poll predicate until it is true or the timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class PipelineTestCase(unittest.TestCase):
    """Shared fixture: a pipeline writing its messages to buffers."""

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = tmp.name

        self.out = io.StringIO()
        self.err = io.StringIO()
        self.channel = SignalChannel()
        self.reaper = BackgroundReaper(self.err)
        self.pipeline = ProcessPipeline(
            reaper=self.reaper,
            channel=self.channel,
            out=self.out,
            err=self.err,
            poll_interval=0.01,
        )
        self.parser = CommandParser()
        self.addCleanup(self.kill_background)

    def kill_background(self):
        for job in self.reaper.jobs:
            for proc in job.started:
                if proc.poll() is None:
                    proc.kill()
                proc.wait()

    def path(self, name):
        return os.path.join(self.dir, name)

    def read(self, name):
        with open(self.path(name)) as f:
            return f.read()

    def write(self, name, content):
        with open(self.path(name), "w") as f:
            f.write(content)

    def run_line(self, line):
        return self.pipeline.run(self.parser.parse(line))


class TestExitStatus(unittest.TestCase):
    """Test status translation."""

    def test_exit_status(self):
        """Normal exits pass through, signals map to 128 + N."""
        self.assertEqual(exit_status(0), 0)
        self.assertEqual(exit_status(3), 3)
        self.assertEqual(exit_status(-signal.SIGKILL), 128 + signal.SIGKILL)
        self.assertEqual(exit_status(None), SPAWN_FAILED)

    def test_job_without_final_process(self):
        """A job whose last stage never started reports SPAWN_FAILED."""
        job = Job(command="x | y", processes=[None])

        self.assertEqual(job.status, SPAWN_FAILED)
        self.assertIsNone(job.leader_pid)
        self.assertTrue(job.poll())

    def test_iter_groups(self):
        """Stages are grouped up to each ';' or '&'."""
        stages = CommandParser().parse("a | b ; c & d | e | f")
        groups = [[s.command for s in g] for g in iter_groups(stages)]

        self.assertEqual(groups, [["a", "b"], ["c"], ["d", "e", "f"]])


class TestForeground(PipelineTestCase):
    """Test foreground execution."""

    def test_output_redirection(self):
        """A single command writes to a redirected file."""
        status = self.run_line(f"echo hello world > {self.path('out.txt')}")

        self.assertEqual(status, 0)
        self.assertEqual(self.read("out.txt"), "hello world\n")

    def test_input_redirection(self):
        """'<' feeds a file to the program."""
        self.write("in.txt", "pear\napple\n")

        status = self.run_line(f"sort < {self.path('in.txt')} > {self.path('out.txt')}")

        self.assertEqual(status, 0)
        self.assertEqual(self.read("out.txt"), "apple\npear\n")

    def test_error_redirection(self):
        """'2>' captures standard error."""
        status = self.run_line(f"ls /nonexistent/minish/path 2> {self.path('err.txt')}")

        self.assertNotEqual(status, 0)
        self.assertTrue(self.read("err.txt"))

    def test_three_stage_pipeline(self):
        """Bytes flow through every stage in order."""
        status = self.run_line(
            f"printf %s\\n c a b | sort | tr a-z A-Z > {self.path('out.txt')}"
        )

        self.assertEqual(status, 0)
        self.assertEqual(self.read("out.txt"), "A\nB\nC\n")

    def test_status_of_last_stage(self):
        """A chain reports the status of its final stage."""
        self.assertEqual(self.run_line("true | false"), 1)
        self.assertEqual(self.run_line("false | true"), 0)

    def test_sequence(self):
        """';' runs groups one after the other."""
        status = self.run_line(
            f"echo one > {self.path('1.txt')} ; echo two > {self.path('2.txt')} ; false"
        )

        self.assertEqual(status, 1)
        self.assertEqual(self.read("1.txt"), "one\n")
        self.assertEqual(self.read("2.txt"), "two\n")

    def test_killed_by_signal(self):
        """A child killed by signal N reports 128 + N."""
        self.write("suicide.sh", "kill -TERM $$\n")

        status = self.run_line(f"sh {self.path('suicide.sh')}")

        self.assertEqual(status, 128 + signal.SIGTERM)

    def test_interrupt_while_waiting(self):
        """SIGINT during a foreground wait is reported and the wait goes on."""
        timer = threading.Timer(0.3, os.kill, args=(os.getpid(), signal.SIGINT))
        timer.start()
        self.addCleanup(timer.cancel)

        status = self.run_line("sleep 1")

        self.assertEqual(status, 0)
        self.assertIn(INTERRUPT_NOTICE, self.err.getvalue())

    def test_quit_and_stop_while_waiting(self):
        """SIGQUIT and SIGTSTP are reported like SIGINT and do not stop the wait."""
        for signum in (signal.SIGQUIT, signal.SIGTSTP):
            with self.subTest(signal=signum.name):
                self.err.seek(0)
                self.err.truncate()
                timer = threading.Timer(0.3, os.kill, args=(os.getpid(), signum))
                timer.start()
                self.addCleanup(timer.cancel)

                status = self.run_line("sleep 1")

                self.assertEqual(status, 0)
                self.assertIn(INTERRUPT_NOTICE, self.err.getvalue())

    def test_children_keep_default_dispositions(self):
        """A child sending itself SIGQUIT is killed by it."""
        self.write("quit.sh", "kill -QUIT $$\n")

        status = self.run_line(f"sh {self.path('quit.sh')}")

        self.assertEqual(status, 128 + signal.SIGQUIT)


class TestSpawnFailures(PipelineTestCase):
    """Test that start-up failures stay local to their stage."""

    def test_command_not_found(self):
        """An unknown program is reported and yields SPAWN_FAILED."""
        status = self.run_line("nonexistent_minish_command_xyz")

        self.assertEqual(status, SPAWN_FAILED)
        self.assertIn("nonexistent_minish_command_xyz: command not found", self.err.getvalue())

    def test_failed_middle_stage(self):
        """Siblings of a failed stage still run and are waited on."""
        status = self.run_line(
            f"echo hi | nonexistent_minish_command_xyz | cat > {self.path('out.txt')}"
        )

        self.assertEqual(status, 0)
        self.assertEqual(self.read("out.txt"), "")
        self.assertIn("command not found", self.err.getvalue())

    def test_failed_final_stage(self):
        """The group status is SPAWN_FAILED when its last stage never started."""
        status = self.run_line("echo hi | nonexistent_minish_command_xyz")

        self.assertEqual(status, SPAWN_FAILED)

    def test_missing_input_file(self):
        """A redirection that cannot be opened prevents only that stage."""
        status = self.run_line("cat < /nonexistent/minish/input")

        self.assertEqual(status, SPAWN_FAILED)
        self.assertIn("minish: /nonexistent/minish/input:", self.err.getvalue())

    def test_failure_then_next_group(self):
        """A failed group does not stop the rest of the line."""
        status = self.run_line(
            f"nonexistent_minish_command_xyz ; echo after > {self.path('out.txt')}"
        )

        self.assertEqual(status, 0)
        self.assertEqual(self.read("out.txt"), "after\n")


class TestExpansions(PipelineTestCase):
    """Test execution of wildcard expansions."""

    def setUp(self):
        super().setUp()
        self.src = os.path.join(self.dir, "src")
        os.mkdir(self.src)
        for name in ("a.txt", "b.txt"):
            open(os.path.join(self.src, name), "w").close()

    def test_sequential_expansions_share_output(self):
        """Each expansion runs in turn, appending to the same output file."""
        status = self.run_line(f"echo {self.src}/*.txt > {self.path('out.txt')}")

        a = os.path.join(self.src, "a.txt")
        b = os.path.join(self.src, "b.txt")
        self.assertEqual(status, 0)
        self.assertEqual(self.read("out.txt"), f"{a}\n{b}\n")

    def test_status_of_last_expansion(self):
        """The status of the sequence is that of the last expansion."""
        os.mkdir(os.path.join(self.src, "z_dir"))

        self.assertEqual(self.run_line(f"test -f {self.src}/*"), 1)
        self.assertEqual(self.run_line(f"test -d {self.src}/*"), 0)

    def test_expansions_inside_chain(self):
        """Within a pipe chain the matches are passed as one argument list."""
        status = self.run_line(f"echo {self.src}/*.txt | cat > {self.path('out.txt')}")

        a = os.path.join(self.src, "a.txt")
        b = os.path.join(self.src, "b.txt")
        self.assertEqual(status, 0)
        self.assertEqual(self.read("out.txt"), f"{a} {b}\n")

    def test_unmatched_pattern_runs_literally(self):
        """A pattern with no match reaches the program unchanged."""
        pattern = f"{self.src}/*.nonexistent"

        status = self.run_line(f"ls {pattern} 2> {self.path('err.txt')}")

        self.assertNotEqual(status, 0)
        self.assertNotEqual(status, SPAWN_FAILED)
        self.assertIn(pattern, self.read("err.txt"))


class TestBackground(PipelineTestCase):
    """Test detached execution and reaping."""

    def test_background_returns_immediately(self):
        """A background job does not block the caller."""
        start = time.monotonic()
        status = self.run_line("sleep 5 &")
        elapsed = time.monotonic() - start

        self.assertEqual(status, 0)
        self.assertLess(elapsed, 1.0)
        self.assertIn("Background job started with PID:", self.out.getvalue())
        self.assertEqual(len(self.reaper), 1)

    def test_reported_pid_is_last_stage(self):
        """The announced pid belongs to the final stage of the chain."""
        self.run_line("sleep 5 | sleep 5 &")

        job, = self.reaper.jobs
        self.assertEqual(len(job.pids), 2)
        self.assertIn(f"PID: {job.pids[-1]}", self.out.getvalue())

    def test_reaped_after_exit(self):
        """Finished background jobs are collected and reported."""
        self.run_line("true &")
        job, = self.reaper.jobs

        self.assertTrue(wait_for(lambda: bool(self.reaper.reap()) or len(self.reaper) == 0))
        self.assertEqual(len(self.reaper), 0)
        self.assertIn(f"[{job.job_id}] Done 0 true", self.err.getvalue())

    def test_reap_is_non_blocking(self):
        """Reaping a running job returns at once and keeps tracking it."""
        self.run_line("sleep 5 &")

        start = time.monotonic()
        finished = self.reaper.reap()

        self.assertEqual(finished, [])
        self.assertLess(time.monotonic() - start, 0.5)
        self.assertEqual(len(self.reaper), 1)

    def test_child_signal_reaps_during_wait(self):
        """A SIGCHLD seen during a foreground wait triggers a reap."""
        if not self.channel.install_child_handler():
            self.skipTest("SIGCHLD not available")
        self.addCleanup(self.channel.uninstall_child_handler)

        self.run_line("true &")
        self.run_line("sleep 0.5")

        self.assertEqual(len(self.reaper), 0)
        self.assertIn("Done 0 true", self.err.getvalue())

    def test_background_expansions(self):
        """Expansions of a background stage run as one job."""
        src = os.path.join(self.dir, "bg")
        os.mkdir(src)
        for name in ("a", "b"):
            open(os.path.join(src, name), "w").close()

        status = self.run_line(f"ls {src}/* > {self.path('out.txt')} &")

        self.assertEqual(status, 0)
        job, = self.reaper.jobs
        self.assertEqual(len(job.processes), 2)

    def test_job_numbers_per_reaper(self):
        """Job numbers count up per reaper, starting at 1."""
        self.run_line("sleep 5 &")
        self.run_line("sleep 5 &")
        other = BackgroundReaper(io.StringIO())
        other_pipeline = ProcessPipeline(reaper=other, out=io.StringIO(), err=io.StringIO())
        other_pipeline.run(self.parser.parse("sleep 5 &"))
        self.addCleanup(self.kill_jobs, other)

        self.assertEqual([job.job_id for job in self.reaper.jobs], [1, 2])
        self.assertEqual([job.job_id for job in other.jobs], [1])

    def kill_jobs(self, reaper):
        for job in reaper.jobs:
            for proc in job.started:
                proc.kill()
                proc.wait()


class TestStopRequested(PipelineTestCase):
    """Test that a stop request ends the line."""

    def test_groups_after_stop_are_skipped(self):
        """Once stop_requested is true no further group starts."""
        stopped = []
        pipeline = ProcessPipeline(
            out=self.out,
            err=self.err,
            poll_interval=0.01,
            stop_requested=lambda: bool(stopped),
        )

        pipeline.run(self.parser.parse(f"echo one > {self.path('1.txt')}"))
        stopped.append(True)
        status = pipeline.run(self.parser.parse(f"echo two > {self.path('2.txt')}"))

        self.assertEqual(status, 0)
        self.assertEqual(self.read("1.txt"), "one\n")
        self.assertFalse(os.path.exists(self.path("2.txt")))


if __name__ == '__main__':
    unittest.main()
