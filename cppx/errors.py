"""
Error taxonomy for cppx

Every scanner failure is positioned: it records the 1-based line where the
problem was detected and a short window of the source starting there.
A failure aborts the current file only; the batch driver reports it and
moves on.
"""

from typing import Union

# Number of raw characters of forward context kept with an error
NUMBER_CHARS_CODE_CONTAINING_ERROR = 28


class CppxError(Exception):
    """Base class for all cppx errors"""


class FrameStackError(CppxError):
    """Raised when frames are popped or closed out of sequence"""


class ScanError(CppxError):
    """A positioned failure raised while scanning a source buffer"""

    def __init__(self, message: str, line: int, snippet: str = ''):
        super().__init__(message)
        self.message = message
        self.line = line
        self.snippet = snippet

    @classmethod
    def at(cls, message: str, source: Union[bytes, bytearray, memoryview], pos: int) -> 'ScanError':
        """Build an error located at byte offset ``pos`` of ``source``"""
        line = bytes(source[:pos]).count(b'\n') + 1
        return cls(message, line, code_containing_error(source, pos))

    def __str__(self):
        if self.snippet:
            return f"{self.message} (line {self.line}: {self.snippet})"
        return f"{self.message} (line {self.line})"


class UnterminatedLiteral(ScanError):
    """A char or string literal is missing its closing delimiter"""


class UnterminatedComment(ScanError):
    """A /* comment never reaches */"""


class MalformedEscape(ScanError):
    """An escape sequence outside the recognized grammar"""


class UnbalancedBrace(ScanError):
    """A '}' without a matching '{'"""


class UnbalancedParenthesis(ScanError):
    """A ')' without a matching '('"""


class EmptyCharLiteral(ScanError):
    """A char literal with nothing between the quotes"""


def code_containing_error(source, pos: int) -> str:
    """Return up to 28 characters starting at ``pos``, stopping at a newline"""
    window = bytes(source[pos:pos + NUMBER_CHARS_CODE_CONTAINING_ERROR])
    window = window.split(b'\n', 1)[0]
    return window.decode('utf-8', errors='replace')
