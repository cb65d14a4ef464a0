"""
Splitter: replays a token stream into declaration and definition streams

The splitter is independent of the scanner: it only sees the finished
token stream and keeps its own emission frame stack. Inline function
bodies are moved to the definition stream and qualified with the names
of the enclosing namespaces and types; everything else stays in the
declaration stream, which is wrapped in an include guard.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from ..errors import UnbalancedBrace
from ..logger import logger
from .frames import Frame, FrameKind, FrameStack, g_keyword_to_frame
from .tokens import Token, TokenKind, CONTAINER_KEYWORDS, TRIVIA_KINDS

_NON_IDENTIFIER_RE = re.compile(r"\W")

# Tokens that end a signature capture without being part of it
_SIGNATURE_INTERRUPTS = frozenset({
    TokenKind.DIRECTIVE,
    TokenKind.ACCESS_MODIFIER,
    TokenKind.END_GROUP,
    TokenKind.EOF,
}) | CONTAINER_KEYWORDS


class _State(Enum):
    NORMAL = 'normal'
    CONTAINER = 'container'   # after namespace/class/struct/enum keyword
    SIGNATURE = 'signature'   # after a function or constructor name
    BODY = 'body'             # inside a relocated function body


@dataclass
class SplitResult:
    """The two output streams produced for one source file"""
    declaration: str
    definition: str
    guard: str


@dataclass
class _Capture:
    """Text buffered since a keyword or function name"""
    kind: FrameKind
    name: Optional[str] = None
    head: str = ''
    pieces: List[str] = field(default_factory=list)
    trivia: List[bool] = field(default_factory=list)

    def add(self, token: Token, text: str):
        self.pieces.append(text)
        self.trivia.append(token.kind in TRIVIA_KINDS)

    def text(self) -> str:
        return ''.join(self.pieces)

    def split_trailing_trivia(self):
        """Return (text up to the last significant piece, whitespace and comments after it)"""
        end = len(self.pieces)
        while end and self.trivia[end - 1]:
            end -= 1
        return ''.join(self.pieces[:end]), ''.join(self.pieces[end:])


def include_guard(namespaces: Sequence[str], base_name: str) -> str:
    """Include guard identifier, e.g. ``A_B_X_H`` for namespaces A, B and file x"""
    guard = ''.join(f"{name}_" for name in namespaces) + f"{base_name}_H"
    return _NON_IDENTIFIER_RE.sub('_', guard).upper()


def _split_indent(head: str):
    """Split leading whitespace off ``head``; return (indent of its last line, rest)"""
    rest = head.lstrip()
    leading = head[:len(head) - len(rest)]
    return leading.rsplit('\n', 1)[-1], rest


def _dedent(text: str, indent: str) -> str:
    if not indent:
        return text
    lines = text.split('\n')
    return '\n'.join(line[len(indent):] if line.startswith(indent) else line for line in lines)


class Splitter:
    """Emission state for one token stream"""

    def __init__(self, source, tokens: Sequence[Token], base_name: str,
                 header_name: Optional[str] = None):
        if isinstance(source, str):
            source = source.encode('utf-8')
        self.source = source
        self.tokens = tokens
        self.base_name = base_name
        self.header_name = header_name or f"{base_name}.h"

        self.frames: FrameStack[Frame] = FrameStack(Frame(FrameKind.NONE))
        self.state = _State.NORMAL

        self._banner = ''
        self._declaration: List[str] = []
        self._definition: List[str] = []
        self._pending: List[str] = []
        self._capture: Optional[_Capture] = None
        self._body: List[str] = []
        self._body_indent = ''
        self._open_line_comment = False

        # Namespaces opened before the first type keyword
        self._guard_namespaces: List[str] = []
        self._guard_closed = False

    # ------------------------------------------------------------------
    # Stream helpers
    # ------------------------------------------------------------------

    def _text(self, token: Token) -> str:
        return token.text(self.source)

    def _declare(self, *pieces: str):
        text = ''.join(pieces)
        if not text:
            return
        if self._open_line_comment and not text.startswith('\n'):
            # A line comment ends the previous declaration
            self._declaration.append('\n')
        self._open_line_comment = False
        self._declaration.append(text)

    def _flush_pending(self):
        self._declare(*self._pending)
        self._pending.clear()

    def _take_pending(self) -> str:
        text = ''.join(self._pending)
        self._pending.clear()
        return text

    # ------------------------------------------------------------------
    # Token routing
    # ------------------------------------------------------------------

    def _normal(self, token: Token):
        kind = token.kind
        text = self._text(token)

        if kind in (TokenKind.DIRECTIVE, TokenKind.ACCESS_MODIFIER, TokenKind.STATEMENT_TERMINATOR):
            self._flush_pending()
            self._declare(text)
        elif kind in CONTAINER_KEYWORDS:
            self._flush_pending()
            if kind != TokenKind.NAMESPACE_KEYWORD:
                self._guard_closed = True
            self._capture = _Capture(g_keyword_to_frame[kind])
            self._capture.add(token, text)
            self.state = _State.CONTAINER
        elif kind in (TokenKind.FUNCTION_NAME, TokenKind.CONSTRUCTOR_DESTRUCTOR):
            self._capture = _Capture(FrameKind.FUNCTION, name=text, head=self._take_pending())
            self._capture.add(token, text)
            self.state = _State.SIGNATURE
        elif kind == TokenKind.BEGIN_GROUP:
            self._flush_pending()
            self._declare(text)
            self.frames.open_brace()
        elif kind == TokenKind.END_GROUP:
            self._flush_pending()
            self._declare(text)
            self._close_group(token)
        elif kind == TokenKind.EOF:
            self._flush_pending()
        else:
            self._pending.append(text)

    def _close_group(self, token: Token):
        frames = self.frames
        if not frames.close_brace():
            raise UnbalancedBrace.at("An extra '}' was found while splitting", self.source, token.begin)
        if frames.current.braces == 0 and len(frames) > 1:
            frames.pop()

    def _container(self, token: Token):
        capture = self._capture
        kind = token.kind
        text = self._text(token)

        if kind == TokenKind.BEGIN_GROUP:
            self._declare(capture.text(), text)
            name = capture.name or ''
            self.frames.push(Frame(capture.kind, name, braces=1))
            if capture.kind == FrameKind.NAMESPACE and not self._guard_closed and name:
                self._guard_namespaces.append(name)
            self._end_capture()
        elif kind in (TokenKind.STATEMENT_TERMINATOR, TokenKind.EOF):
            # Forward declaration
            self._declare(capture.text(), text)
            self._end_capture()
        else:
            if kind in CONTAINER_KEYWORDS:
                # e.g. "enum class E" or "template <class T> class X"
                capture.kind = g_keyword_to_frame[kind]
                capture.name = None
                if kind != TokenKind.NAMESPACE_KEYWORD:
                    self._guard_closed = True
            elif kind == TokenKind.IDENTIFIER and capture.name is None:
                capture.name = text
            capture.add(token, text)

    def _signature(self, token: Token):
        capture = self._capture
        kind = token.kind
        text = self._text(token)

        if kind == TokenKind.STATEMENT_TERMINATOR:
            # Prototype only
            self._declare(capture.head, capture.text(), text)
            self._end_capture()
        elif kind in (TokenKind.BEGIN_GROUP, TokenKind.INITIALIZER_LIST):
            self._begin_definition(token)
        elif kind in _SIGNATURE_INTERRUPTS:
            # Not a function after all; hand the text back and route the token normally
            self._declare(capture.head, capture.text())
            self._end_capture()
            self._normal(token)
        else:
            capture.add(token, text)

    def _begin_definition(self, token: Token):
        capture = self._capture
        signature = capture.text()
        prototype, trailing = capture.split_trailing_trivia()
        note = trailing.rstrip()
        self._declare(capture.head, prototype, ';', note)
        self._open_line_comment = '//' in note.rsplit('\n', 1)[-1]

        indent, head = _split_indent(capture.head)
        tilde = ''
        if head.endswith('~'):
            head, tilde = head[:-1], '~'
        qualifier = self.frames.qualifier()
        logger.debug("relocating definition", name=capture.name, qualifier=qualifier)

        self._body = ['\n', head, qualifier, tilde, signature]
        self._body_indent = indent
        self.frames.push(Frame(FrameKind.FUNCTION, capture.name or ''))
        self._capture = None
        self.state = _State.BODY
        self._body_token(token)

    def _body_token(self, token: Token):
        kind = token.kind
        if kind == TokenKind.EOF:
            self._end_definition()
            return

        self._body.append(self._text(token))
        if kind == TokenKind.BEGIN_GROUP:
            self.frames.open_brace()
        elif kind == TokenKind.END_GROUP:
            self.frames.close_brace()
            if self.frames.current.braces == 0:
                self._end_definition()

    def _end_definition(self):
        self.frames.pop()
        self._definition.append(_dedent(''.join(self._body), self._body_indent) + '\n')
        self._body = []
        self.state = _State.NORMAL

    def _end_capture(self):
        self._capture = None
        self.state = _State.NORMAL

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def split(self) -> SplitResult:
        tokens = list(self.tokens)
        if tokens and tokens[0].kind == TokenKind.COMMENT:
            self._banner = self._text(tokens[0])
            tokens = tokens[1:]

        handlers = {
            _State.NORMAL: self._normal,
            _State.CONTAINER: self._container,
            _State.SIGNATURE: self._signature,
            _State.BODY: self._body_token,
        }
        for token in tokens:
            handlers[self.state](token)

        # Streams without an EOF sentinel still flush their buffered text
        if self.state != _State.NORMAL or self._pending:
            handlers[self.state](Token(TokenKind.EOF, len(self.source), len(self.source) - 1))

        guard = include_guard(self._guard_namespaces, self.base_name)
        return SplitResult(self._assemble_declaration(guard), self._assemble_definition(), guard)

    def _banner_line(self) -> str:
        if self._banner and not self._banner.endswith('\n'):
            return self._banner + '\n'
        return self._banner

    def _assemble_declaration(self, guard: str) -> str:
        body = ''.join(self._declaration)
        return (f"{self._banner_line()}#ifndef {guard}\n#define {guard}\n"
                f"{body}\n#endif // {guard}\n")

    def _assemble_definition(self) -> str:
        return f'{self._banner_line()}#include "{self.header_name}"\n' + ''.join(self._definition)


def split(source, tokens: Sequence[Token], base_name: str,
          header_name: Optional[str] = None) -> SplitResult:
    """Split a scanned source into declaration and definition streams"""
    return Splitter(source, tokens, base_name, header_name).split()
