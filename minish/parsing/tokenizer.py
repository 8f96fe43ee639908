"""
Tokenizer Module

Splits a command line into whitespace-delimited tokens and classifies each
one once, so later stages never compare raw strings against operators.

There is no quoting or escaping: an operator is only recognized when it
stands as its own token ("ls|wc" is a single word).

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from minish.logger import get_logger


class TokenType(Enum):
    """Token types for command parsing."""
    WORD = "word"
    PIPE = "pipe"
    BACKGROUND = "background"
    SEQUENCE = "sequence"
    REDIRECT_IN = "redirect_in"
    REDIRECT_OUT = "redirect_out"
    REDIRECT_ERR = "redirect_err"


OPERATORS: dict[str, TokenType] = {
    '|': TokenType.PIPE,
    '&': TokenType.BACKGROUND,
    ';': TokenType.SEQUENCE,
    '<': TokenType.REDIRECT_IN,
    '>': TokenType.REDIRECT_OUT,
    '2>': TokenType.REDIRECT_ERR,
}

SEPARATORS = frozenset({TokenType.PIPE, TokenType.BACKGROUND, TokenType.SEQUENCE})

REDIRECTIONS = frozenset({
    TokenType.REDIRECT_IN,
    TokenType.REDIRECT_OUT,
    TokenType.REDIRECT_ERR,
})

WILDCARDS = frozenset('*?')


@dataclass(frozen=True)
class Token:
    """A classified token."""
    type: TokenType
    value: str

    @property
    def is_separator(self) -> bool:
        return self.type in SEPARATORS

    @property
    def is_redirection(self) -> bool:
        return self.type in REDIRECTIONS

    @property
    def has_wildcard(self) -> bool:
        return self.type is TokenType.WORD and any(c in WILDCARDS for c in self.value)

    def __str__(self) -> str:
        return self.value


_log = get_logger('tokenizer')


def split_words(line: str) -> List[str]:
    """Split a line on runs of whitespace, dropping empty strings."""
    return line.split()


def classify(word: str) -> Token:
    """Build the token for a single word."""
    return Token(OPERATORS.get(word, TokenType.WORD), word)


def tokenize(line: Optional[str]) -> List[Token]:
    """
    Tokenize a command line.

    Args:
        line: Raw input line (may be empty or None)

    Returns:
        Ordered list of tokens; empty for blank input
    """
    if not line:
        return []

    tokens = [classify(word) for word in split_words(line)]
    _log.debug(
        "Tokenized line",
        context={'count': len(tokens), 'line': line.strip()[:80]}
    )
    return tokens
