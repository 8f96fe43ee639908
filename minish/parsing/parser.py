"""
Command Parser Module

Turns a command line into a list of ready-to-run stages:
tokenize -> segment -> resolve redirections -> expand wildcards.

Author: YSNRFD
Version: 1.0.0
"""

from typing import List

from .globbing import expand_globs
from .redirection import resolve_redirections
from .segmenter import Segmenter, Stage
from .tokenizer import tokenize


class CommandParser:
    """
    Parses shell command lines.

    Handles:
    - Pipes (|)
    - Background execution (&)
    - Sequential execution (;)
    - Redirections (<, >, 2>), resolved per stage
    - Wildcards (*, ?), expanded per stage

    Example:
        >>> parser = CommandParser()
        >>> stages = parser.parse("ls -la | grep test > output.txt")
        >>> stages[1].stdout_file
        'output.txt'
    """

    def __init__(self):
        self._segmenter = Segmenter()

    @property
    def segmenter(self) -> Segmenter:
        return self._segmenter

    def parse(self, line: str) -> List[Stage]:
        """
        Parse a command line.

        Args:
            line: Command line string

        Returns:
            Ordered stages; empty if the line is blank

        Raises:
            ShellSyntaxError: The line is malformed
        """
        stages = self._segmenter.segment(tokenize(line))

        for stage in stages:
            resolve_redirections(stage)
            expand_globs(stage)

        return stages
