"""
rpeg Decoder — Compressed Image Container Decoder
==================================================

Reads an rpeg container from a file, a binary stream or stdin and
returns the payload words together with the declared dimensions.

Stages (each fails fast with an RpegFormatError subclass):
  1. Header parser: tag line, dimensions line
  2. Word grouper: payload → 4-byte words

Decoding is all-or-nothing. OS errors from opening or reading the
source propagate unchanged.
"""

import os
import sys
from typing import BinaryIO, List, Optional, Union

from rpeg_types import (
    RPEG_MAGIC, LF, CR, SPACE, WORD_SIZE, U32_MAX,
    ByteCursor, Dimensions, RpegImage, BytesLike,
    RpegUnexpectedByteError, RpegTruncatedError, RpegNewlineError,
    RpegExpectedNumberError, RpegOverflowError, RpegMisalignedPayloadError,
    RpegDimensionError,
)

Source = Union[str, "os.PathLike[str]", BinaryIO, None]

_DIGIT_0 = 0x30
_DIGIT_9 = 0x39


# ═══════════════════════════════════════════════════════════════
# HEADER PARSER
# ═══════════════════════════════════════════════════════════════

def expect_bytes(cursor: ByteCursor, expected: bytes) -> None:
    """Consume `expected` from the cursor, checking every byte."""
    for expected_byte in expected:
        offset = cursor.tell()
        byte = cursor.advance()
        if byte is None:
            raise RpegTruncatedError(expected_byte, offset)
        if byte != expected_byte:
            raise RpegUnexpectedByteError(expected_byte, byte, offset)


def expect_newline(cursor: ByteCursor) -> None:
    """Consume LF, CR or CRLF."""
    offset = cursor.tell()
    byte = cursor.advance()
    if byte == LF:
        return
    if byte == CR:
        # LF after CR is optional
        if cursor.peek() == LF:
            cursor.advance()
        return
    raise RpegNewlineError(byte, offset)


def is_ascii_digit(byte: Optional[int]) -> bool:
    return byte is not None and _DIGIT_0 <= byte <= _DIGIT_9


def read_u32(cursor: ByteCursor) -> int:
    """
    Read one or more ASCII digits as an unsigned 32-bit integer.

    Stops at (without consuming) the first non-digit byte. Leading
    zeros are allowed.
    """
    start = cursor.tell()
    first = cursor.peek()
    if not is_ascii_digit(first):
        raise RpegExpectedNumberError(first, start)

    value = 0
    while is_ascii_digit(cursor.peek()):
        value = value * 10 + (cursor.advance() - _DIGIT_0)
        if value > U32_MAX:
            raise RpegOverflowError(start)
    return value


def parse_header(cursor: ByteCursor) -> Dimensions:
    """
    Parse both header lines. On success the cursor sits on the first
    payload byte.
    """
    expect_bytes(cursor, RPEG_MAGIC)
    expect_newline(cursor)

    width = read_u32(cursor)
    expect_bytes(cursor, bytes([SPACE]))
    height = read_u32(cursor)
    expect_newline(cursor)

    return Dimensions(width, height)


# ═══════════════════════════════════════════════════════════════
# WORD GROUPER
# ═══════════════════════════════════════════════════════════════

def group_words(data: Union[ByteCursor, BytesLike]) -> List[bytes]:
    """Split the remaining payload into 4-byte words, in order."""
    raw = data.drain() if isinstance(data, ByteCursor) else bytes(data)
    if len(raw) % WORD_SIZE != 0:
        raise RpegMisalignedPayloadError(len(raw))
    return [raw[i:i + WORD_SIZE] for i in range(0, len(raw), WORD_SIZE)]


# ═══════════════════════════════════════════════════════════════
# DECODER
# ═══════════════════════════════════════════════════════════════

class RpegDecoder:
    """
    rpeg container decoder.

    Usage:
        decoder = RpegDecoder()
        words, width, height = decoder.decode("image.rpeg")
        image = decoder.decode()            # reads stdin

    By default the word count is NOT checked against width * height;
    the container carries them as independent fields. Pass
    verify_dimensions=True to reject containers where they disagree.
    """

    def __init__(self, verify_dimensions: bool = False):
        self.verify_dimensions = verify_dimensions

    # ─── Main Entry Points ────────────────────────────────────

    def decode(self, source: Source = None) -> RpegImage:
        """
        Decode an rpeg container.

        Args:
            source: File path, readable binary stream, or None for stdin.

        Returns:
            RpegImage (unpacks as words, width, height).
        """
        return self.decode_bytes(read_source(source))

    def decode_bytes(self, data: BytesLike) -> RpegImage:
        """Decode from in-memory bytes."""
        cursor = ByteCursor(data)
        dims = parse_header(cursor)
        words = group_words(cursor)

        if self.verify_dimensions and len(words) != dims.area:
            raise RpegDimensionError(dims.width, dims.height, len(words))

        return RpegImage(words=words, width=dims.width, height=dims.height)


# ─── Source Acquisition ───────────────────────────────────────

def read_source(source: Source = None) -> bytes:
    """Read a path, binary stream or stdin (None) to exhaustion."""
    if source is None:
        return sys.stdin.buffer.read()
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as fh:
            return fh.read()
    raw = source.read()
    if isinstance(raw, str):
        raise TypeError("rpeg sources must be opened in binary mode")
    return bytes(raw)


# ═══════════════════════════════════════════════════════════════
# CONVENIENCE FUNCTIONS
# ═══════════════════════════════════════════════════════════════

def decode(source: Source = None, verify_dimensions: bool = False) -> RpegImage:
    """Convenience: decode a path, stream or stdin in one call."""
    return RpegDecoder(verify_dimensions=verify_dimensions).decode(source)

def decode_bytes(data: BytesLike, verify_dimensions: bool = False) -> RpegImage:
    """Convenience: decode in-memory bytes in one call."""
    return RpegDecoder(verify_dimensions=verify_dimensions).decode_bytes(data)

def decode_file(filepath: Union[str, "os.PathLike[str]"], verify_dimensions: bool = False) -> RpegImage:
    """Convenience: decode an rpeg file in one call."""
    return RpegDecoder(verify_dimensions=verify_dimensions).decode(filepath)
