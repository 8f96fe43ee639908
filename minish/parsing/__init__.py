"""
minish Parsing Module

Turns a command line into stages ready to run:
- Tokenizing and operator classification
- Segmenting on control operators
- Per-stage redirection resolution
- Per-stage wildcard expansion
"""

from .tokenizer import Token, TokenType, tokenize, split_words
from .segmenter import Segmenter, Stage
from .redirection import resolve_redirections, open_stage_files, redirected_stdio
from .globbing import expand_globs, expand_word
from .parser import CommandParser

__all__ = [
    'Token',
    'TokenType',
    'tokenize',
    'split_words',
    'Segmenter',
    'Stage',
    'resolve_redirections',
    'open_stage_files',
    'redirected_stdio',
    'expand_globs',
    'expand_word',
    'CommandParser',
]
