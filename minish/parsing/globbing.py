"""
Glob Expansion Module

Expands '*' and '?' in a stage's arguments against the filesystem.

A pattern with no match is kept as a literal argument. When patterns do
match, the stage turns into one invocation per matched path, each one
combining the fixed command word with that path.

Author: YSNRFD
Version: 1.0.0
"""

import glob
import itertools
import os
from typing import List

from minish.logger import get_logger
from .segmenter import Stage
from .tokenizer import WILDCARDS


_log = get_logger('glob')


def has_wildcard(word: str) -> bool:
    """Check whether a word contains a wildcard character."""
    return any(c in WILDCARDS for c in word)


def expand_word(word: str) -> List[str]:
    """
    Expand a single pattern.

    Args:
        word: Argument that may contain '*', '?' or a leading '~'

    Returns:
        Sorted matching paths, or [word] when nothing matches
    """
    if not has_wildcard(word):
        return [word]

    matches = sorted(glob.glob(os.path.expanduser(word)))
    if not matches:
        _log.debug("Pattern matched nothing, keeping literal", context={'pattern': word})
        return [word]
    return matches


def expand_globs(stage: Stage) -> Stage:
    """
    Expand wildcard arguments of a stage in place.

    Sets ``stage.expansions`` to the invocations to run when the patterns
    produce more than one, and ``stage.flat_args`` to a single argument
    list with every match inlined (used when the stage is part of a pipe
    chain). The command word itself is never expanded.

    Args:
        stage: Stage whose arguments have been resolved

    Returns:
        The same stage
    """
    command, rest = stage.args[0], stage.args[1:]

    if not any(has_wildcard(arg) for arg in rest):
        return stage

    choices = [expand_word(arg) for arg in rest]
    invocations = [[command, *combo] for combo in itertools.product(*choices)]

    if len(invocations) == 1:
        stage.args = invocations[0]
        return stage

    stage.expansions = invocations
    stage.flat_args = [command] + [path for paths in choices for path in paths]

    _log.debug(
        "Expanded wildcards",
        context={'command': command, 'invocations': len(invocations)}
    )
    return stage
