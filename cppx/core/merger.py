"""
Token merger

Coalesces runs of tokens into single logical tokens as they are appended:
qualified names (``A::B::f``), access modifiers (``public:``), whitespace
before ``{`` and consecutive initializer-list segments.

Design:
- Committed tokens are append-only and never change once committed
- The most recent tokens live in a small pending window; merges only ever
  rewrite the window. The window keeps the last two significant tokens
  (plus any whitespace/comments after them), which is as far back as any
  merge rule looks.
"""

from typing import List, Optional

from .frames import FrameKind, ScopeFrame
from .tokens import Token, TokenKind, TRIVIA_KINDS

# Never absorb a same-kind neighbour: each group token holds one brace
GROUP_KINDS = frozenset({TokenKind.BEGIN_GROUP, TokenKind.END_GROUP})

# Same-kind neighbours merge even across unrecognized bytes
REGION_KINDS = frozenset({TokenKind.PARAMETERS, TokenKind.INITIALIZER_LIST})

# Number of significant tokens the window must retain
WINDOW_SIGNIFICANT = 2


class TokenMerger:
    """Pending window in front of an append-only token list"""

    def __init__(self):
        self._committed: List[Token] = []
        self._window: List[Token] = []

    def last(self) -> Optional[Token]:
        if self._window:
            return self._window[-1]
        return self._committed[-1] if self._committed else None

    def _significant_indices(self) -> List[int]:
        """Window indices of significant tokens, most recent first"""
        return [i for i in range(len(self._window) - 1, -1, -1)
                if self._window[i].kind not in TRIVIA_KINDS]

    def last_significant(self) -> Optional[Token]:
        indices = self._significant_indices()
        return self._window[indices[0]] if indices else None

    def reclassify_last_significant(self, kind: TokenKind) -> Optional[Token]:
        indices = self._significant_indices()
        if not indices:
            return None
        i = indices[0]
        self._window[i] = Token(kind, self._window[i].begin, self._window[i].end)
        return self._window[i]

    def append(self, kind: Optional[TokenKind], begin: int, end: int, frame: ScopeFrame):
        """Append a token spanning [begin, end]

        Unrecognized bytes between the previous token and ``begin`` become a
        PASSTHROUGH token. With ``kind`` None only that gap is recorded.
        """
        last = self.last()
        if last is None:
            gap_start = 0
        else:
            if kind is not None and self._absorbs(last, kind, begin, frame):
                self._window[-1] = last.extended_to(end)
                return
            gap_start = last.end + 1

        if begin > gap_start:
            self._push(Token(TokenKind.PASSTHROUGH, gap_start, begin - 1))

        if kind is None:
            return

        token = Token(kind, begin, end)
        if not self._coalesce(token):
            self._push(token)

    def finish(self, length: int) -> List[Token]:
        """Close the stream: record the trailing gap and the EOF sentinel"""
        self.append(None, length, length - 1, None)
        self._committed.extend(self._window)
        self._window.clear()
        self._committed.append(Token(TokenKind.EOF, length, length - 1))
        return self._committed

    def _absorbs(self, last: Token, kind: TokenKind, begin: int, frame: ScopeFrame) -> bool:
        """True when ``last`` should simply grow to cover the new token"""
        if kind == TokenKind.TYPE_CONTINUATION:
            return True
        if last.kind == TokenKind.PARAMETERS and frame.parenthesis > 0:
            return True
        if last.kind == TokenKind.INITIALIZER_LIST and frame.kind == FrameKind.INITIALIZER_LIST:
            return True
        if kind == last.kind and kind not in GROUP_KINDS:
            return kind in REGION_KINDS or begin == last.end + 1
        return False

    def _coalesce(self, token: Token) -> bool:
        """Apply the lookbehind merge rules; True if ``token`` was merged"""
        if token.kind == TokenKind.BEGIN_GROUP:
            if self._window and self._window[-1].kind == TokenKind.EMPTY:
                self._merge_from(len(self._window) - 1, token)
                return True
            return False

        indices = self._significant_indices()
        if not indices:
            return False
        previous = self._window[indices[0]]

        if token.kind == TokenKind.IDENTIFIER:
            if previous.kind != TokenKind.SCOPE_RESOLUTION:
                return False
            start = indices[0]
            if len(indices) > 1 and self._window[indices[1]].kind == TokenKind.IDENTIFIER:
                start = indices[1]
            self._merge_from(start, token)
            return True

        if token.kind == TokenKind.ACCESS_MODIFIER and previous.kind == TokenKind.IDENTIFIER:
            self._merge_from(indices[0], token)
            return True

        if token.kind == TokenKind.INITIALIZER_LIST and previous.kind == TokenKind.INITIALIZER_LIST:
            self._merge_from(indices[0], token)
            return True

        return False

    def _merge_from(self, index: int, token: Token):
        merged = Token(token.kind, self._window[index].begin, token.end)
        del self._window[index:]
        self._window.append(merged)

    def _push(self, token: Token):
        self._window.append(token)
        indices = self._significant_indices()
        if len(indices) > WINDOW_SIGNIFICANT:
            cut = indices[WINDOW_SIGNIFICANT - 1]
            self._committed.extend(self._window[:cut])
            del self._window[:cut]
