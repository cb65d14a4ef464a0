"""
cppx: converts extended C++ sources (.cppx) into standard .h/.cpp pairs

Inline method bodies written inside classes are moved to the .cpp file and
qualified with their enclosing namespaces and types; the .h file keeps the
declarations behind an include guard.
"""

__version__ = '0.0.2'

from .core import scan, split, SplitResult, Token, TokenKind
from .errors import (
    CppxError, FrameStackError, ScanError, UnterminatedLiteral, UnterminatedComment,
    MalformedEscape, UnbalancedBrace, UnbalancedParenthesis, EmptyCharLiteral,
)
from .config import GeneratorConfig
from .generator import find_source_files, generate_file, generate_code

__all__ = [
    'scan',
    'split',
    'SplitResult',
    'Token',
    'TokenKind',
    'CppxError',
    'FrameStackError',
    'ScanError',
    'UnterminatedLiteral',
    'UnterminatedComment',
    'MalformedEscape',
    'UnbalancedBrace',
    'UnbalancedParenthesis',
    'EmptyCharLiteral',
    'GeneratorConfig',
    'find_source_files',
    'generate_file',
    'generate_code',
]
