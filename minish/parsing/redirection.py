"""
Redirection Module

Resolves '<', '>' and '2>' inside a single stage and opens the target files
when the stage is executed.

Author: YSNRFD
Version: 1.0.0
"""

import os
import sys
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, TextIO

from minish.exceptions import (
    MissingCommandError,
    RedirectionError,
    DescriptorError,
)
from minish.logger import get_logger
from .segmenter import Stage
from .tokenizer import TokenType


STDIN_FD = 0
STDOUT_FD = 1
STDERR_FD = 2

_READ_FLAGS = os.O_RDONLY
_WRITE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
_FILE_MODE = 0o644

_STREAM_NAMES = {STDOUT_FD: 'stdout', STDERR_FD: 'stderr'}

_log = get_logger('redirection')


def resolve_redirections(stage: Stage) -> Stage:
    """
    Extract redirections from a stage's tokens and build its argument list.

    The word following a redirection operator is taken as the file path and
    both are dropped from the arguments. A later redirection of the same
    stream overrides an earlier one. An operator not followed by a word is
    ignored.

    Args:
        stage: Stage with its raw token range filled in

    Returns:
        The same stage, updated in place

    Raises:
        MissingCommandError: Nothing is left to run once redirections are removed
    """
    args = []
    tokens = stage.tokens
    i = 0

    while i < len(tokens):
        token = tokens[i]

        if not token.is_redirection:
            args.append(token.value)
            i += 1
            continue

        target = tokens[i + 1] if i + 1 < len(tokens) else None
        if target is None or target.type is not TokenType.WORD:
            _log.debug(
                "Ignoring redirection without target",
                context={'operator': token.value}
            )
            i += 1
            continue

        if token.type is TokenType.REDIRECT_IN:
            stage.stdin_file = target.value
        elif token.type is TokenType.REDIRECT_OUT:
            stage.stdout_file = target.value
        else:
            stage.stderr_file = target.value
        i += 2

    if not args:
        raise MissingCommandError(position=stage.first)

    stage.args = args
    return stage


def _open(path: str, flags: int) -> int:
    try:
        return os.open(os.path.expanduser(path), flags, _FILE_MODE)
    except OSError as e:
        raise RedirectionError(path, e.strerror or str(e)) from e


def open_stage_files(stage: Stage) -> dict[int, int]:
    """
    Open a stage's redirection targets.

    Returns:
        Mapping of standard descriptor number (0, 1, 2) to the newly opened
        descriptor. The caller owns and must close the descriptors.

    Raises:
        RedirectionError: A target cannot be opened; nothing is left open
    """
    wanted = (
        (STDIN_FD, stage.stdin_file, _READ_FLAGS),
        (STDOUT_FD, stage.stdout_file, _WRITE_FLAGS),
        (STDERR_FD, stage.stderr_file, _WRITE_FLAGS),
    )
    opened: dict[int, int] = {}

    try:
        for target, path, flags in wanted:
            if path is not None:
                opened[target] = _open(path, flags)
    except RedirectionError:
        close_fds(opened.values())
        raise

    return opened


def close_fds(fds: Iterable[Optional[int]]) -> None:
    """Close descriptors, ignoring ones that are already closed."""
    for fd in fds:
        if fd is None:
            continue
        try:
            os.close(fd)
        except OSError:
            pass


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, ValueError, OSError):
            pass


@contextmanager
def redirected_stdio(stage: Stage) -> Iterator[None]:
    """
    Apply a stage's redirections to the shell's own standard descriptors.

    Used for builtins, which run inside the shell process. The original
    descriptors are saved first and restored on every exit path. While the
    block runs, sys.stdout and sys.stderr write to the redirected
    descriptors as well.

    Raises:
        RedirectionError: A target cannot be opened
        DescriptorError: A standard descriptor cannot be saved or replaced
    """
    opened = open_stage_files(stage)
    if not opened:
        yield
        return

    saved: dict[int, int] = {}
    streams: dict[str, TextIO] = {}
    _flush_std_streams()

    try:
        for target, fd in opened.items():
            try:
                saved[target] = os.dup(target)
                os.dup2(fd, target)
            except OSError as e:
                raise DescriptorError(
                    f"cannot redirect descriptor {target}: {e.strerror}",
                    fd=target
                ) from e
        for target in opened:
            name = _STREAM_NAMES.get(target)
            if name is not None:
                streams[name] = getattr(sys, name)
                setattr(sys, name, open(target, "w", closefd=False))
        yield
    finally:
        _flush_std_streams()
        for name, stream in streams.items():
            getattr(sys, name).close()
            setattr(sys, name, stream)
        close_fds(opened.values())
        _restore(saved)


def _restore(saved: dict[int, int]) -> None:
    failed = None
    for target, backup in saved.items():
        try:
            os.dup2(backup, target)
        except OSError as e:
            failed = (target, e)
        finally:
            close_fds([backup])

    if failed is not None:
        target, e = failed
        _log.critical(
            "Failed to restore standard descriptor",
            context={'fd': target, 'error': e.strerror}
        )
        raise DescriptorError(
            f"cannot restore descriptor {target}: {e.strerror}",
            fd=target
        ) from e
