"""
minish Shell Module

The interactive command-line shell.

Author: YSNRFD
Version: 1.0.0
"""

import sys
from typing import List, Optional, TextIO

from .builtins import BuiltinCommands
from minish.core.config_loader import Config, get_config
from minish.exceptions import HistoryNotFoundError, ShellSyntaxError
from minish.history import HistoryStore
from minish.logger import get_logger
from minish.parsing import CommandParser, Stage
from minish.process import BackgroundReaper, ProcessPipeline, SignalChannel, INTERRUPT_NOTICE


SYNTAX_ERROR_STATUS = 2


class Shell:
    """
    minish Interactive Shell.

    Provides:
    - Command parsing
    - Built-in commands
    - Pipeline execution
    - I/O redirection
    - Background execution
    - Command history and replay

    Example:
        >>> shell = Shell()
        >>> shell.execute_line("echo hello | tr a-z A-Z")
        HELLO
        0
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        stdin: Optional[TextIO] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None
    ):
        self._config = config or get_config()
        self._logger = get_logger('shell')
        self._stdin = stdin
        self._out = out
        self._err = err

        self._parser = CommandParser()
        self._history = HistoryStore(self._config.shell.history_size)
        self._channel = SignalChannel()
        self._reaper = BackgroundReaper(err)
        self._builtins = BuiltinCommands(self)
        self._pipeline = ProcessPipeline(
            reaper=self._reaper,
            channel=self._channel,
            builtins=self._builtins,
            out=out,
            err=err,
            poll_interval=self._config.process.wait_poll_interval,
            stop_requested=lambda: self._exiting,
        )

        self._exiting = False
        self._last_status = 0

        # Prompt
        self._prompt = self._config.shell.prompt

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    @property
    def prompt(self) -> str:
        return self._prompt

    @prompt.setter
    def prompt(self, value: str):
        self._prompt = value

    @property
    def parser(self) -> CommandParser:
        return self._parser

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def reaper(self) -> BackgroundReaper:
        return self._reaper

    @property
    def channel(self) -> SignalChannel:
        return self._channel

    @property
    def last_status(self) -> int:
        return self._last_status

    @property
    def exiting(self) -> bool:
        return self._exiting

    def run(self) -> int:
        """
        Run the interactive shell.

        This is the main REPL loop. It ends on 'exit' or end of input.
        Interrupt signals are reported and never end the session.

        Returns:
            Status of the last command executed
        """
        stdin = self._stdin or sys.stdin

        if self._config.process.reap_on_child_signal:
            self._channel.install_child_handler()

        try:
            with self._channel.observing_interrupts():
                while not self._exiting:
                    try:
                        self._reaper.reap()

                        line = self._read_line(stdin)
                        if line is None:
                            print("Exiting the shell.", file=self.out)
                            break

                        self.execute_line(line)
                        self._report_interrupt()

                    except Exception as e:
                        self._logger.exception(f"Shell error: {e}")
                        print(f"minish: error: {e}", file=self.err)
        finally:
            self._channel.uninstall_child_handler()

        return self._last_status

    def _read_line(self, stdin: TextIO) -> Optional[str]:
        """Show the prompt and read one line; None at end of input."""
        while True:
            self.out.write(self._prompt)
            self.out.flush()
            try:
                with self._channel.interruptible():
                    line = stdin.readline()
            except KeyboardInterrupt:
                self._report_interrupt()
                continue
            return line or None

    def _report_interrupt(self) -> None:
        if self._channel.consume_interrupt():
            print(f"\n{INTERRUPT_NOTICE}", file=self.err)
            self.err.flush()

    def execute_line(self, line: str, record: bool = True) -> int:
        """
        Execute a command line.

        The line is recorded in history before anything runs.

        Args:
            line: Command line string
            record: Whether the line goes into history

        Returns:
            Exit code
        """
        line = line.strip()
        if not line:
            return self._last_status

        if HistoryStore.is_replay(line):
            return self._replay(line)

        if record:
            self._history.record(line)

        stages = self._parse(line)
        if stages is None:
            self._last_status = SYNTAX_ERROR_STATUS
            return self._last_status

        self._last_status = self._pipeline.run(stages)
        self._reaper.reap()
        return self._last_status

    def _parse(self, line: str) -> Optional[List[Stage]]:
        try:
            return self._parser.parse(line)
        except ShellSyntaxError as e:
            self._logger.info("Rejected command line", context={'line': line, 'status': e.status.name})
            print(f"minish: {e}", file=self.err)
            self.err.flush()
            return None

    def _replay(self, reference: str) -> int:
        try:
            return self._history.replay(
                reference,
                submit=lambda text: self.execute_line(text, record=False),
                announce=self._announce,
            )
        except HistoryNotFoundError as e:
            print(e.message, file=self.err)
            self.err.flush()
            self._last_status = 1
            return self._last_status

    def _announce(self, text: str) -> None:
        print(text, file=self.out)
        self.out.flush()

    def request_exit(self) -> None:
        """Request the shell to exit; groups left on the current line are skipped."""
        self._exiting = True
