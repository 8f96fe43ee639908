#!/usr/bin/env python3
"""
minish Support Tests

Exceptions, logging and configuration.

Run with: python -m pytest minish/tests/test_support.py -v

Author: YSNRFD
Version: 1.0.0
"""

import json
import os
import tempfile
import unittest


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_shell_error(self):
        """ShellError carries a code and context."""
        from minish.exceptions import ShellError

        exc = ShellError("Test error", error_code=42, context={'line': 'ls'})

        self.assertEqual(exc.message, "Test error")
        self.assertEqual(exc.error_code, 42)
        self.assertIn("42", str(exc))
        self.assertIn("line=ls", str(exc))

    def test_syntax_errors(self):
        """Each syntax error has its own code and status."""
        from minish.exceptions import (
            ShellSyntaxError,
            SegmentStatus,
            LeadingSeparatorError,
            DoubledSeparatorError,
            DanglingPipeError,
            MissingCommandError,
        )

        cases = [
            (LeadingSeparatorError("|"), 1001, SegmentStatus.LEADING_SEPARATOR),
            (DoubledSeparatorError(";", 3), 1002, SegmentStatus.DOUBLED_SEPARATOR),
            (DanglingPipeError(4), 1003, SegmentStatus.DANGLING_PIPE),
            (MissingCommandError(0), 1004, SegmentStatus.MISSING_COMMAND),
        ]
        for exc, code, status in cases:
            with self.subTest(exc=type(exc).__name__):
                self.assertIsInstance(exc, ShellSyntaxError)
                self.assertEqual(exc.error_code, code)
                self.assertIs(exc.status, status)
                self.assertTrue(str(exc).startswith("syntax error:"))

    def test_process_exceptions(self):
        """Process errors read as plain messages."""
        from minish.exceptions import ProcessException, SpawnError, RedirectionError

        exc = SpawnError("nosuchprog", "command not found")
        self.assertIsInstance(exc, ProcessException)
        self.assertEqual(str(exc), "nosuchprog: command not found")
        self.assertEqual(exc.error_code, 2001)

        exc = RedirectionError("/x/out", "Permission denied")
        self.assertEqual(exc.path, "/x/out")
        self.assertEqual(exc.context['path'], "/x/out")

    def test_history_not_found(self):
        """History misses carry the user-facing message."""
        from minish.exceptions import HistoryNotFoundError

        self.assertEqual(str(HistoryNotFoundError(index=3)), "Invalid command number entered.")
        self.assertEqual(str(HistoryNotFoundError(prefix="x")), "Invalid command string entered.")
        self.assertEqual(HistoryNotFoundError(index=3).error_code, 3001)


class TestLogger(unittest.TestCase):
    """Test the logging system."""

    @classmethod
    def setUpClass(cls):
        from minish.logger import Logger, LogLevel
        Logger.initialize(level=LogLevel.DEBUG)

    def test_logger_singleton(self):
        """Loggers are shared per subsystem."""
        from minish.logger import Logger, get_logger

        self.assertIs(Logger('history'), get_logger('history'))
        self.assertIsNot(get_logger('history'), get_logger('pipeline'))

    def test_log_levels(self):
        """Levels compare numerically and resolve by name."""
        from minish.logger import LogLevel

        self.assertTrue(LogLevel.ERROR > LogLevel.INFO)
        self.assertTrue(LogLevel.DEBUG < LogLevel.WARNING)
        self.assertIs(LogLevel.from_name("info"), LogLevel.INFO)
        with self.assertRaises(ValueError):
            LogLevel.from_name("loud")

    def test_session_logs(self):
        """Records are kept in the session buffer with their context."""
        from minish.logger import Logger, get_logger

        get_logger('tests').warning("disk nearly full", pid=99, context={'free': 1})

        logs = Logger.get_session_logs(subsystem='tests')
        self.assertTrue(logs)
        entry = logs[-1]
        self.assertEqual(entry['message'], "disk nearly full")
        self.assertEqual(entry['level'], "WARNING")
        self.assertEqual(entry['pid'], 99)
        self.assertEqual(entry['context'], {'free': 1})

    def test_engine_logs_spawn_failure(self):
        """A failed spawn is logged by the pipeline subsystem."""
        import io
        from minish.logger import Logger
        from minish.parsing import CommandParser
        from minish.process import ProcessPipeline

        pipeline = ProcessPipeline(out=io.StringIO(), err=io.StringIO(), poll_interval=0.01)
        pipeline.run(CommandParser().parse("nonexistent_minish_logged_xyz"))

        messages = [l['message'] for l in Logger.get_session_logs(level='WARNING', subsystem='pipeline')]
        self.assertTrue(any("nonexistent_minish_logged_xyz" in m for m in messages))


class TestConfig(unittest.TestCase):
    """Test the configuration system."""

    def setUp(self):
        from minish.core.config_loader import ConfigLoader
        self.loader = ConfigLoader()
        self.addCleanup(self.loader.reset)

        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.dir = tmp.name

    def write_config(self, data):
        path = os.path.join(self.dir, "minish.json")
        with open(path, "w") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)
        return path

    def test_default_config(self):
        """Test default configuration values."""
        from minish.core.config_loader import Config

        config = Config()

        self.assertEqual(config.shell.prompt, "% ")
        self.assertEqual(config.shell.history_size, 100)
        self.assertEqual(config.logging.level, "WARNING")
        self.assertTrue(config.process.reap_on_child_signal)

    def test_singleton(self):
        """ConfigLoader is shared."""
        from minish.core.config_loader import ConfigLoader

        self.assertIs(ConfigLoader(), self.loader)

    def test_load(self):
        """Values from a file override defaults; others keep theirs."""
        from minish.core.config_loader import get_config

        path = self.write_config({'shell': {'prompt': '> '}, 'logging': {'level': 'DEBUG'}})
        config = self.loader.load(path)

        self.assertEqual(config.shell.prompt, "> ")
        self.assertEqual(config.shell.history_size, 100)
        self.assertEqual(config.logging.level, "DEBUG")
        self.assertIs(get_config(), config)

    def test_get_and_set(self):
        """Dot keys read and write nested values."""
        from minish.exceptions import ConfigValidationError

        self.loader.set('shell.history_size', 5)

        self.assertEqual(self.loader.get('shell.history_size'), 5)
        self.assertEqual(self.loader.get('shell.missing', 'dflt'), 'dflt')
        with self.assertRaises(ConfigValidationError):
            self.loader.set('nowhere.value', 1)

    def test_to_dict(self):
        """The configuration can be exported as a dictionary."""
        data = self.loader.to_dict()

        self.assertEqual(data['shell']['prompt'], "% ")
        self.assertIn('wait_poll_interval', data['process'])

    def test_invalid_files(self):
        """Missing, malformed or invalid files raise ConfigValidationError."""
        from minish.exceptions import ConfigValidationError

        bad = [
            os.path.join(self.dir, "missing.json"),
            self.write_config("{not json"),
        ]
        for path in bad:
            with self.subTest(path=path):
                with self.assertRaises(ConfigValidationError):
                    self.loader.load(path)

        path = self.write_config({'shell': {'history_size': 0}})
        with self.assertRaises(ConfigValidationError):
            self.loader.load(path)


class TestMain(unittest.TestCase):
    """Test the command-line entry point."""

    def test_argument_parsing(self):
        """Options are parsed and log levels normalized."""
        from minish.main import build_parser

        args = build_parser().parse_args(['--config', 'x.json', '--log-level', 'debug'])

        self.assertEqual(args.config, 'x.json')
        self.assertEqual(args.log_level, 'DEBUG')

    def test_bad_config_exits(self):
        """An unreadable configuration file ends the program with status 1."""
        from minish.main import main

        with self.assertRaises(SystemExit) as ctx:
            main(['--config', '/nonexistent/minish/config.json'])
        self.assertEqual(ctx.exception.code, 1)


if __name__ == '__main__':
    unittest.main()
