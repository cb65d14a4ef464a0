"""
Scope frames and the frame stack

Both passes track nesting with the same stack machine:
- the scanner uses ``ScopeFrame`` (braces and parentheses) to disambiguate
  constructors, functions and initializer lists
- the splitter uses plain ``Frame`` entries (name and braces) to build
  ``A::B::`` qualification prefixes

The stack always holds a root frame of kind NONE, which is never popped.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Generic, Iterator, List, TypeVar

from ..errors import FrameStackError
from ..logger import logger
from .tokens import TokenKind


class FrameKind(IntEnum):
    """Kinds of nesting level"""
    NONE = 0
    NAMESPACE = 1
    CLASS = 2
    STRUCT = 3
    ENUM = 4
    FUNCTION = 5
    CONSTRUCTOR_DESTRUCTOR = 6
    INITIALIZER_LIST = 7


# Container frame opened by each keyword token
g_keyword_to_frame = {
    TokenKind.NAMESPACE_KEYWORD: FrameKind.NAMESPACE,
    TokenKind.CLASS_KEYWORD: FrameKind.CLASS,
    TokenKind.STRUCT_KEYWORD: FrameKind.STRUCT,
    TokenKind.ENUM_KEYWORD: FrameKind.ENUM,
}


@dataclass
class Frame:
    """A nesting level: kind, optional declared name and open brace count"""
    kind: FrameKind
    name: str = ''
    braces: int = 0


@dataclass
class ScopeFrame(Frame):
    """Scanner frame; also counts open parentheses"""
    parenthesis: int = 0


F = TypeVar('F', bound=Frame)


class FrameStack(Generic[F]):
    """Stack of frames with a permanent root"""

    def __init__(self, root: F):
        self._frames: List[F] = [root]

    @property
    def current(self) -> F:
        return self._frames[-1]

    @property
    def root(self) -> F:
        return self._frames[0]

    def __len__(self):
        return len(self._frames)

    def __iter__(self) -> Iterator[F]:
        return iter(self._frames)

    def push(self, frame: F) -> F:
        self._frames.append(frame)
        logger.debug(f"push {frame.kind.name} frame", name=frame.name, depth=len(self._frames))
        return frame

    def pop(self) -> F:
        if len(self._frames) == 1:
            logger.error("Cannot pop the root frame", exc_type=FrameStackError)
            return self._frames[0]
        frame = self._frames.pop()
        logger.debug(f"pop {frame.kind.name} frame", name=frame.name, depth=len(self._frames))
        return frame

    def open_brace(self):
        self.current.braces += 1

    def close_brace(self) -> bool:
        """Decrement the current brace counter; False if it is already zero"""
        if self.current.braces == 0:
            return False
        self.current.braces -= 1
        return True

    def open_parenthesis(self):
        self.current.parenthesis += 1

    def close_parenthesis(self) -> bool:
        """Decrement the current parenthesis counter; False if it is already zero"""
        if self.current.parenthesis == 0:
            return False
        self.current.parenthesis -= 1
        return True

    def names(self) -> List[str]:
        """Declared names of all frames, outermost first, skipping unnamed ones"""
        return [frame.name for frame in self._frames if frame.name]

    def qualifier(self) -> str:
        """Qualification prefix such as ``A::B::`` for the current position"""
        return ''.join(f"{name}::" for name in self.names())
