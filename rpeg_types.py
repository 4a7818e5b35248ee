"""
rpeg Types & Constants — Compressed Image Container I/O
========================================================

Foundational type definitions, constants and error classes for reading
and writing rpeg containers. This module has ZERO external dependencies
beyond the Python standard library.

Wire layout:
    "Compressed image format 2" NEWLINE
    <width> " " <height> NEWLINE
    <payload: opaque 4-byte words, concatenated>

NEWLINE is LF, CR or CRLF on input and always LF on output.
"""

import struct
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

# ═══════════════════════════════════════════════════════════════
# MAGIC BYTES & LIMITS
# ═══════════════════════════════════════════════════════════════

# Header tag line (without terminator)
RPEG_MAGIC = b"Compressed image format 2"

# Tag line of the human-readable dump (never parsed back)
RPEG_DEBUG_MAGIC = RPEG_MAGIC + b" [DEBUG]"

LF = 0x0A
CR = 0x0D
SPACE = 0x20

# Every payload word is exactly this many bytes
WORD_SIZE = 4

U32_MAX = 0xFFFFFFFF

BytesLike = Union[bytes, bytearray, memoryview]


# ═══════════════════════════════════════════════════════════════
# ERROR CLASSES
# ═══════════════════════════════════════════════════════════════

def _hex(byte: int) -> str:
    return f"0x{byte:02X}"


class RpegError(Exception):
    """Base error for all rpeg operations."""
    pass


class RpegFormatError(RpegError):
    """Malformed rpeg input. `offset` is where the problem was detected."""

    def __init__(self, message: str, offset: Optional[int] = None):
        if offset is not None:
            message = f"{message} at offset {offset}"
        super().__init__(message)
        self.offset = offset


class RpegUnexpectedByteError(RpegFormatError):
    """A literal or delimiter byte did not match."""

    def __init__(self, expected: int, found: int, offset: Optional[int] = None):
        super().__init__(f"Expected {_hex(expected)}, found {_hex(found)}", offset)
        self.expected = expected
        self.found = found


class RpegTruncatedError(RpegFormatError):
    """Input ended before a required literal or delimiter byte."""

    def __init__(self, expected: int, offset: Optional[int] = None):
        super().__init__(f"Ran out of bytes before expected {_hex(expected)} byte", offset)
        self.expected = expected


class RpegNewlineError(RpegFormatError):
    """Neither LF nor a CR-led sequence where a line terminator was required."""

    def __init__(self, found: Optional[int], offset: Optional[int] = None):
        if found is None:
            message = "Ran out of bytes before expected newline byte(s)"
        else:
            message = f"Expected newline byte(s), found {_hex(found)}"
        super().__init__(message, offset)
        self.found = found


class RpegExpectedNumberError(RpegFormatError):
    """No decimal digit where a number was required."""

    def __init__(self, found: Optional[int], offset: Optional[int] = None):
        if found is None:
            message = "Ran out of bytes where a number was expected"
        else:
            message = f"Expected a decimal digit, found {_hex(found)}"
        super().__init__(message, offset)
        self.found = found


class RpegOverflowError(RpegFormatError):
    """Decimal field does not fit in an unsigned 32-bit integer."""

    def __init__(self, offset: Optional[int] = None):
        super().__init__(f"Number exceeds the 32-bit limit {U32_MAX}", offset)


class RpegMisalignedPayloadError(RpegFormatError):
    """Payload length is not a multiple of WORD_SIZE."""

    def __init__(self, length: int):
        super().__init__(
            f"Payload is {length} bytes, not a multiple of {WORD_SIZE} "
            f"({length % WORD_SIZE} trailing)"
        )
        self.length = length


class RpegDimensionError(RpegFormatError):
    """Word count disagrees with width * height (only when verification is on)."""

    def __init__(self, width: int, height: int, word_count: int):
        super().__init__(
            f"{width}x{height} image needs {width * height} words, got {word_count}"
        )
        self.width = width
        self.height = height
        self.word_count = word_count


class RpegValueError(RpegError, ValueError):
    """A value handed to the encoder cannot be represented in an rpeg container."""
    pass


# ═══════════════════════════════════════════════════════════════
# BYTE CURSOR
# ═══════════════════════════════════════════════════════════════

class ByteCursor:
    """
    Forward-only, peekable view over a byte buffer.

    peek() looks at the next byte without consuming it; advance()
    consumes it. Both return None once the buffer is exhausted.
    A consumed byte is never offered again.
    """

    __slots__ = ("buf", "pos")

    def __init__(self, data: BytesLike):
        self.buf = memoryview(bytes(data))
        self.pos = 0

    def peek(self) -> Optional[int]:
        if self.pos >= len(self.buf):
            return None
        return self.buf[self.pos]

    def advance(self) -> Optional[int]:
        byte = self.peek()
        if byte is not None:
            self.pos += 1
        return byte

    def tell(self) -> int:
        return self.pos

    def remaining(self) -> int:
        return len(self.buf) - self.pos

    def drain(self) -> bytes:
        """Consume and return everything that is left."""
        rest = self.buf[self.pos:].tobytes()
        self.pos = len(self.buf)
        return rest


# ═══════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════

def check_u32(value: int, name: str) -> int:
    """Reject anything that is not an int in 0..U32_MAX."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise RpegValueError(f"{name} must be an int, got {type(value).__name__}")
    if not 0 <= value <= U32_MAX:
        raise RpegValueError(f"{name} {value} outside 0..{U32_MAX}")
    return value


@dataclass(frozen=True)
class Dimensions:
    """
    Image dimensions from the second header line.

    Wire format:
        <width decimal> 0x20 <height decimal> 0x0A
    """
    width: int
    height: int

    def __post_init__(self):
        check_u32(self.width, "width")
        check_u32(self.height, "height")

    @property
    def area(self) -> int:
        return self.width * self.height

    def pack(self) -> bytes:
        """Serialize to the dimensions line, LF terminated."""
        return f"{self.width} {self.height}\n".encode("ascii")


@dataclass
class RpegImage:
    """
    A decoded container: payload words plus the declared dimensions.

    Unpacks like a tuple:
        words, width, height = decoder.decode_bytes(raw)
    """
    words: List[bytes] = field(default_factory=list)
    width: int = 0
    height: int = 0

    def __iter__(self) -> Iterator:
        return iter((self.words, self.width, self.height))

    @property
    def dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height)

    @property
    def payload_size(self) -> int:
        return len(self.words) * WORD_SIZE


# ═══════════════════════════════════════════════════════════════
# UTILITY FUNCTIONS
# ═══════════════════════════════════════════════════════════════

_WORD_FORMATS = {"big": ">I", "little": "<I"}


def coerce_word(word) -> bytes:
    """Return `word` as a 4-byte `bytes`, or raise RpegValueError."""
    if isinstance(word, int):
        raise RpegValueError("Word must be a 4-byte sequence, not an int (see int_to_word)")
    try:
        raw = bytes(word)
    except (TypeError, ValueError) as exc:
        raise RpegValueError(f"Word is not a byte sequence: {exc}") from exc
    if len(raw) != WORD_SIZE:
        raise RpegValueError(f"Word must be {WORD_SIZE} bytes, got {len(raw)}")
    return raw


def word_to_int(word: BytesLike, byteorder: str = "big") -> int:
    """Interpret a word as an unsigned 32-bit integer."""
    return struct.unpack(_WORD_FORMATS[byteorder], coerce_word(word))[0]


def int_to_word(value: int, byteorder: str = "big") -> bytes:
    """Pack an unsigned 32-bit integer into a word."""
    return struct.pack(_WORD_FORMATS[byteorder], check_u32(value, "word value"))
