"""
Lexical scanner for extended C++ (.cppx) sources
Converts a source buffer into an ordered, lossless stream of tokens

Design:
- The buffer (bytes or a read-only mmap) is never copied; tokens are
  [begin, end] spans into it
- A stack of scope frames is consulted and updated while scanning, which
  is what tells a constructor apart from a function and an initializer
  list apart from an access modifier
- Every token goes through the TokenMerger before it is committed
- Any malformed construct raises a positioned ScanError immediately
"""

import re
from typing import List, Optional, Union

from ..errors import (
    ScanError, UnterminatedLiteral, UnterminatedComment, MalformedEscape,
    UnbalancedBrace, UnbalancedParenthesis, EmptyCharLiteral,
)
from ..logger import logger
from .frames import FrameKind, FrameStack, ScopeFrame, g_keyword_to_frame
from .merger import TokenMerger
from .tokens import Token, TokenKind, g_keyword_to_kind, ACCESS_SPECIFIERS

# Escape sequence after a backslash
ESCAPE_RE = re.compile(rb"['\"?\\abfnrtv]|[0-7]{1,3}|x[0-9A-Fa-f]{2}|u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}")

# Raw string body after the opening quote: delim( ... )delim"
RAW_STRING_RE = re.compile(rb"([^()\\\s]{0,16})\([\s\S]*?\)\1\"")

# Next byte that can end or escape an ordinary string
STRING_STOP_RE = re.compile(rb"[\\\"\n]")

# Directive line that opens a C comment, and the rest of a line closing it
DIRECTIVE_COMMENT_RE = re.compile(rb".*?/\*")
DIRECTIVE_COMMENT_END_RE = re.compile(rb".*?\*/.*")
DIRECTIVE_LINE_RE = re.compile(rb".*\n?")

BLOCK_COMMENT_RE = re.compile(rb"/\*[\s\S]*?\*/\s*\n*")
LINE_COMMENT_RE = re.compile(rb"//.*")
NEXT_LINE_COMMENT_RE = re.compile(rb"\s*//.*")

IDENTIFIER_RE = re.compile(rb"[_a-zA-Z]\w*")
NUMBER_RE = re.compile(rb"\d(?:[eEpP][+-]|[\w.]|'(?=\w))*")
WHITESPACE_RE = re.compile(rb"\s+")

# One UTF-8 encoded character
UTF8_CHAR_RE = re.compile(rb"[\x00-\x7f]|[\xc0-\xff][\x80-\xbf]*")

Source = Union[bytes, bytearray, memoryview]


class Lexer:
    """Scanner state for one source buffer"""

    def __init__(self, source: Union[Source, str]):
        if isinstance(source, str):
            source = source.encode('utf-8')
        self.source = source
        self.length = len(source)
        self.pos = 0

        self.frames: FrameStack[ScopeFrame] = FrameStack(ScopeFrame(FrameKind.NONE))
        self.merger = TokenMerger()

        # Container announced by a keyword or a '(' but not opened yet
        self.next_container = FrameKind.NONE
        self.container_name = ''
        self.last_identifier = ''

        self._tokens: Optional[List[Token]] = None

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def _char(self, pos: int) -> bytes:
        return bytes(self.source[pos:pos + 1])

    def _previous_char(self) -> bytes:
        return self._char(self.pos - 1) if self.pos > 0 else b''

    def _match(self, pattern: 're.Pattern') -> Optional['re.Match']:
        """Match ``pattern`` at the cursor and advance past it on success"""
        match = pattern.match(self.source, self.pos)
        if match:
            self.pos = match.end()
        return match

    def _error(self, exc_type, message: str, pos: Optional[int] = None) -> ScanError:
        return exc_type.at(message, self.source, self.pos if pos is None else pos)

    # ------------------------------------------------------------------
    # Literals, directives and comments
    # ------------------------------------------------------------------

    def _scan_escape_sequence(self):
        self.pos += 1  # backslash
        if not self._match(ESCAPE_RE):
            raise self._error(MalformedEscape, "Invalid escape sequence")

    def _scan_char_literal(self):
        self.pos += 1
        c = self._char(self.pos)
        if c == b"'":
            raise self._error(EmptyCharLiteral, "Empty character literal found")
        if c == b"\\":
            self._scan_escape_sequence()
        elif not self._match(UTF8_CHAR_RE):
            self.pos += 1

        if self._char(self.pos) != b"'":
            raise self._error(UnterminatedLiteral, "Character literal delimiter is missing")
        self.pos += 1

    def _scan_string(self):
        start = self.pos
        is_raw_string = self._previous_char() == b'R'
        self.pos += 1

        if is_raw_string:
            if not self._match(RAW_STRING_RE):
                raise self._error(UnterminatedLiteral, "Invalid raw string", start)
            return

        while True:
            stop = STRING_STOP_RE.search(self.source, self.pos)
            if stop is None:
                raise self._error(UnterminatedLiteral, "String does not end", start)
            self.pos = stop.start()
            c = self._char(self.pos)
            if c == b'"':
                self.pos += 1
                return
            if c == b'\\':
                self._scan_escape_sequence()
            else:
                raise self._error(UnterminatedLiteral, "String does not end", start)

    def _scan_directive(self):
        self.pos += 1
        if self._match(DIRECTIVE_COMMENT_RE):
            # Directive followed by a C comment on the same line
            if not self._match(DIRECTIVE_COMMENT_END_RE):
                # The comment does not end on this line; scan it separately
                self.pos -= 2
        else:
            self._match(DIRECTIVE_LINE_RE)

    def _scan_comment(self) -> bool:
        following = self._char(self.pos + 1)
        if following == b'*':
            if not self._match(BLOCK_COMMENT_RE):
                raise self._error(UnterminatedComment, "C style comment (/*) does not end (*/)")
            return True
        if following == b'/':
            self._match(LINE_COMMENT_RE)
            while self._match(NEXT_LINE_COMMENT_RE):
                pass
            return True
        return False

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _begin_group(self):
        frames = self.frames
        if self.next_container == FrameKind.NONE or frames.current.kind == FrameKind.INITIALIZER_LIST:
            frames.open_brace()
        else:
            frames.push(ScopeFrame(self.next_container, self.container_name, braces=1))
            self.next_container = FrameKind.NONE
            self.container_name = ''

    def _end_group(self) -> TokenKind:
        frames = self.frames
        if not frames.close_brace():
            raise self._error(UnbalancedBrace, "An extra '}' was found. Perhaps you forgot a '{'")

        current = frames.current
        if current.kind == FrameKind.INITIALIZER_LIST:
            if current.braces == 0 and current.parenthesis == 0:
                frames.pop()
            return TokenKind.TYPE_CONTINUATION

        if current.braces == 0 and len(frames) > 1:
            frames.pop()
        return TokenKind.END_GROUP

    def _open_parenthesis(self):
        frames = self.frames
        current = frames.current
        if current.kind not in (FrameKind.FUNCTION, FrameKind.INITIALIZER_LIST):
            previous = self.merger.last_significant()
            if previous is not None and previous.kind == TokenKind.IDENTIFIER:
                if previous.text(self.source) == current.name:
                    self.merger.reclassify_last_significant(TokenKind.CONSTRUCTOR_DESTRUCTOR)
                    self.next_container = FrameKind.CONSTRUCTOR_DESTRUCTOR
                else:
                    self.merger.reclassify_last_significant(TokenKind.FUNCTION_NAME)
                    self.next_container = FrameKind.FUNCTION
                self.container_name = self.last_identifier
        frames.open_parenthesis()

    def _close_parenthesis(self) -> TokenKind:
        frames = self.frames
        if not frames.close_parenthesis():
            raise self._error(UnbalancedParenthesis, "An extra ')' was found. Perhaps you forgot a '('")

        current = frames.current
        if current.kind == FrameKind.INITIALIZER_LIST:
            if current.braces == 0 and current.parenthesis == 0:
                frames.pop()
            return TokenKind.TYPE_CONTINUATION
        return TokenKind.PARAMETERS

    def _open_initializer_list(self):
        self.frames.push(ScopeFrame(FrameKind.INITIALIZER_LIST))

    def _comma(self) -> Optional[TokenKind]:
        if self.frames.current.kind != FrameKind.INITIALIZER_LIST:
            previous = self.merger.last_significant()
            if previous is not None and previous.kind == TokenKind.INITIALIZER_LIST:
                self._open_initializer_list()
                return TokenKind.INITIALIZER_LIST
        return None

    def _colon(self) -> Optional[TokenKind]:
        if self._char(self.pos) == b':':
            self.pos += 1
            return TokenKind.SCOPE_RESOLUTION
        if self.next_container == FrameKind.CONSTRUCTOR_DESTRUCTOR and self.frames.current.parenthesis == 0:
            self._open_initializer_list()
            return TokenKind.INITIALIZER_LIST
        if self.last_identifier in ACCESS_SPECIFIERS:
            return TokenKind.ACCESS_MODIFIER
        return None

    def _statement_terminator(self):
        # A finished declaration disarms a pending function or type
        if self.frames.current.parenthesis == 0:
            self.next_container = FrameKind.NONE

    def _identifier(self, match) -> TokenKind:
        word = match.group().decode('ascii')
        kind = g_keyword_to_kind.get(word)
        if kind is not None:
            self.next_container = g_keyword_to_frame[kind]
            self.container_name = ''
            return kind

        self.last_identifier = word
        if not self.container_name:
            self.container_name = word
        return TokenKind.IDENTIFIER

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def _next_token(self) -> Optional[TokenKind]:
        """Consume the construct at the cursor and return its kind (None if unclassified)"""
        c = self._char(self.pos)

        if c == b"'":
            self._scan_char_literal()
            return TokenKind.CHAR_LITERAL

        if c == b'"':
            self._scan_string()
            return TokenKind.STRING_LITERAL

        if c == b'#':
            self._scan_directive()
            return TokenKind.DIRECTIVE

        if c == b';':
            self.pos += 1
            self._statement_terminator()
            return TokenKind.STATEMENT_TERMINATOR

        if c == b'{':
            self.pos += 1
            self._begin_group()
            return TokenKind.BEGIN_GROUP

        if c == b'}':
            kind = self._end_group()
            self.pos += 1
            return kind

        if c == b'/':
            if self._scan_comment():
                return TokenKind.COMMENT
            self.pos += 1
            return None

        if c == b'(':
            self._open_parenthesis()
            self.pos += 1
            return TokenKind.PARAMETERS

        if c == b')':
            kind = self._close_parenthesis()
            self.pos += 1
            return kind

        if c == b',':
            self.pos += 1
            return self._comma()

        if c == b':':
            self.pos += 1
            return self._colon()

        match = self._match(IDENTIFIER_RE)
        if match:
            return self._identifier(match)

        if self._match(NUMBER_RE):
            return None

        if self._match(WHITESPACE_RE):
            return TokenKind.EMPTY

        self.pos += 1
        return None

    def scan(self) -> List[Token]:
        """Scan the whole buffer; raises ScanError on malformed input"""
        if self._tokens is not None:
            return self._tokens

        while self.pos < self.length:
            begin = self.pos
            kind = self._next_token()
            if kind is not None:
                self.merger.append(kind, begin, self.pos - 1, self.frames.current)

        self._tokens = self.merger.finish(self.length)
        logger.debug("scan finished", tokens=len(self._tokens), depth=len(self.frames))
        return self._tokens


def scan(source: Union[Source, str]) -> List[Token]:
    """Scan ``source`` into a token stream ending with an EOF sentinel"""
    return Lexer(source).scan()
