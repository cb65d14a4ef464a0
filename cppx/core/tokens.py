"""
Token definitions for the cppx scanner

A token is a classified, non-owning span of the source buffer: it stores
only its kind and an inclusive [begin, end] byte range. The buffer is the
sole owner of the text; use ``Token.raw``/``Token.text`` to read it back.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class TokenKind(IntEnum):
    """Token kind enumeration"""
    # Layout
    EMPTY = 1
    COMMENT = 2
    DIRECTIVE = 3

    # Literals
    CHAR_LITERAL = 10
    STRING_LITERAL = 11

    # Names
    IDENTIFIER = 20
    ACCESS_MODIFIER = 21
    NAMESPACE_KEYWORD = 22
    CLASS_KEYWORD = 23
    STRUCT_KEYWORD = 24
    ENUM_KEYWORD = 25

    # Functions
    PARAMETERS = 30          # ( ... ) parameters or arguments
    FUNCTION_NAME = 31
    CONSTRUCTOR_DESTRUCTOR = 32
    INITIALIZER_LIST = 33    # : a(1), b{2}

    # Punctuation
    BEGIN_GROUP = 40         # {
    END_GROUP = 41           # }
    STATEMENT_TERMINATOR = 42  # ;
    SCOPE_RESOLUTION = 43    # ::
    TYPE_CONTINUATION = 44   # ) or } closing an initializer segment

    # Everything else
    PASSTHROUGH = 50
    EOF = 60


@dataclass(frozen=True)
class Token:
    """A [begin, end] span of the source buffer (end is inclusive)"""
    kind: TokenKind
    begin: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.begin + 1

    def raw(self, source) -> bytes:
        return bytes(source[self.begin:self.end + 1])

    def text(self, source) -> str:
        return self.raw(source).decode('utf-8', errors='surrogateescape')

    def extended_to(self, end: int, kind: Optional[TokenKind] = None) -> 'Token':
        """Return a copy stretched to ``end``, optionally with a new kind"""
        return Token(self.kind if kind is None else kind, self.begin, end)

    def __repr__(self):
        return f"Token({self.kind.name}, {self.begin}, {self.end})"


# Tokens skipped when looking backward for a merge candidate
TRIVIA_KINDS = frozenset({TokenKind.EMPTY, TokenKind.COMMENT})

# Keywords that open a container (namespace or type)
CONTAINER_KEYWORDS = frozenset({
    TokenKind.NAMESPACE_KEYWORD,
    TokenKind.CLASS_KEYWORD,
    TokenKind.STRUCT_KEYWORD,
    TokenKind.ENUM_KEYWORD,
})

# Keywords recognized by the scanner
g_keyword_to_kind = {
    "namespace": TokenKind.NAMESPACE_KEYWORD,
    "class": TokenKind.CLASS_KEYWORD,
    "struct": TokenKind.STRUCT_KEYWORD,
    "enum": TokenKind.ENUM_KEYWORD,
}

ACCESS_SPECIFIERS = frozenset({"public", "protected", "private"})
