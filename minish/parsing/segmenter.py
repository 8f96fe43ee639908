"""
Segmenter Module

Partitions a token sequence into stages bounded by the control operators
'|', '&' and ';', validating where those operators may appear.

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Optional, List, Tuple

from minish.exceptions import (
    SegmentStatus,
    ShellSyntaxError,
    LeadingSeparatorError,
    DoubledSeparatorError,
    DanglingPipeError,
)
from minish.logger import get_logger
from .tokenizer import Token, TokenType


IMPLICIT_SEQUENCE = Token(TokenType.SEQUENCE, ';')


@dataclass
class Stage:
    """
    One execution unit: a command and its arguments.

    Created by the Segmenter with only its raw token range filled in, then
    completed in place by the redirection resolver and glob expander.
    """
    tokens: List[Token]
    operator: TokenType
    first: int = 0
    last: int = 0
    args: List[str] = field(default_factory=list)
    stdin_file: Optional[str] = None
    stdout_file: Optional[str] = None
    stderr_file: Optional[str] = None
    expansions: List[List[str]] = field(default_factory=list)
    flat_args: List[str] = field(default_factory=list)
    background: bool = False

    @property
    def command(self) -> str:
        return self.args[0] if self.args else ""

    @property
    def pipes_to_next(self) -> bool:
        return self.operator is TokenType.PIPE

    @property
    def invocations(self) -> List[List[str]]:
        """Argument lists to run, one per glob expansion."""
        return self.expansions or [self.args]

    @property
    def argv(self) -> List[str]:
        """Single argument list, with every glob match inlined."""
        return self.flat_args or self.args

    @property
    def text(self) -> str:
        return " ".join(t.value for t in self.tokens)


class Segmenter:
    """
    Splits tokens into stages.

    Rules:
    - An empty sequence yields no stages
    - A leading control operator is an error
    - A line without a trailing operator ends with an implicit ';'
    - Two adjacent control operators are an error
    - A line may not end with '|'

    Example:
        >>> stages = Segmenter().segment(tokenize("ls -l | wc -l &"))
        >>> [s.operator for s in stages]
        [<TokenType.PIPE: 'pipe'>, <TokenType.BACKGROUND: 'background'>]
    """

    def __init__(self):
        self._logger = get_logger('segmenter')

    def segment(self, tokens: List[Token]) -> List[Stage]:
        """
        Segment tokens into stages.

        Args:
            tokens: Classified tokens of one line

        Returns:
            Ordered list of stages (empty for an empty line)

        Raises:
            LeadingSeparatorError: First token is a control operator
            DoubledSeparatorError: Two control operators are adjacent
            DanglingPipeError: The last operator is '|'
        """
        if not tokens:
            return []

        if tokens[0].is_separator:
            raise LeadingSeparatorError(tokens[0].value)

        tokens = list(tokens)
        if not tokens[-1].is_separator:
            tokens.append(IMPLICIT_SEQUENCE)

        stages: List[Stage] = []
        first = 0

        for i, token in enumerate(tokens):
            if not token.is_separator:
                continue

            if i == first:
                raise DoubledSeparatorError(token.value, i)

            stages.append(Stage(
                tokens=tokens[first:i],
                operator=token.type,
                first=first,
                last=i - 1,
                background=token.type is TokenType.BACKGROUND,
            ))
            first = i + 1

        if stages[-1].pipes_to_next:
            raise DanglingPipeError(len(tokens) - 1)

        self._logger.debug(
            "Segmented line",
            context={'stages': len(stages)}
        )
        return stages

    def status(self, tokens: List[Token]) -> Tuple[SegmentStatus, int]:
        """
        Report the segmentation outcome without raising.

        Returns:
            (status, stage count); the count is 0 unless status is OK
        """
        try:
            stages = self.segment(tokens)
        except ShellSyntaxError as e:
            return e.status, 0

        if not stages:
            return SegmentStatus.EMPTY_LINE, 0
        return SegmentStatus.OK, len(stages)
