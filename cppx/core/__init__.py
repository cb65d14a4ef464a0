"""
Scanning and splitting engine

    tokens = scan(source)
    result = split(source, tokens, "widget")
    result.declaration, result.definition, result.guard
"""

from .tokens import Token, TokenKind
from .frames import Frame, FrameKind, FrameStack, ScopeFrame
from .merger import TokenMerger
from .lexer import Lexer, scan
from .splitter import Splitter, SplitResult, split, include_guard

__all__ = [
    'Token',
    'TokenKind',
    'Frame',
    'FrameKind',
    'FrameStack',
    'ScopeFrame',
    'TokenMerger',
    'Lexer',
    'scan',
    'Splitter',
    'SplitResult',
    'split',
    'include_guard',
]
