"""
rpeg Encoder — Compressed Image Container Encoder
==================================================

Serializes payload words and dimensions into an rpeg container:
  "Compressed image format 2\\n" + "<width> <height>\\n" + word bytes

Output always uses LF line endings. Words are written in order with no
separators, length prefix or trailer.

Also produces the [DEBUG] dump: same header lines, payload rendered as
upper-case hex pairs. The dump is for human inspection only and cannot
be decoded.
"""

import os
import sys
from typing import BinaryIO, Iterable, List, Optional, TextIO, Union

from rpeg_types import (
    RPEG_MAGIC, RPEG_DEBUG_MAGIC,
    Dimensions, RpegImage, RpegDimensionError,
    coerce_word,
)


# ═══════════════════════════════════════════════════════════════
# ENCODER
# ═══════════════════════════════════════════════════════════════

class RpegEncoder:
    """
    rpeg container encoder.

    Usage:
        encoder = RpegEncoder()
        raw = encoder.encode([b"\\x00\\x11\\x22\\x33"], width=1, height=1)
        encoder.write(words, width, height)     # to stdout
        print(encoder.encode_debug(words, width, height))

    Any combination of width, height and word count is written as given
    unless verify_dimensions=True.
    """

    def __init__(self, verify_dimensions: bool = False):
        self.verify_dimensions = verify_dimensions

    # ─── Binary Container ─────────────────────────────────────

    def encode(self, words: Iterable, width: int, height: int) -> bytes:
        """
        Encode words and dimensions into container bytes.

        Args:
            words: Iterable of 4-byte words (bytes, bytearray, or 4 ints).
            width: Image width, 0..2**32-1.
            height: Image height, 0..2**32-1.

        Returns:
            The complete container.
        """
        dims, payload = self._prepare(words, width, height)

        buf = bytearray()
        buf.extend(RPEG_MAGIC)
        buf.append(0x0A)
        buf.extend(dims.pack())
        for word in payload:
            buf.extend(word)
        return bytes(buf)

    def encode_image(self, image: RpegImage) -> bytes:
        """Encode a decoded image back to container bytes."""
        return self.encode(image.words, image.width, image.height)

    def write(self, words: Iterable, width: int, height: int,
              sink: Optional[BinaryIO] = None) -> int:
        """Write the container to a binary sink (default stdout). Returns bytes written."""
        data = self.encode(words, width, height)
        if sink is None:
            sink = sys.stdout.buffer
        sink.write(data)
        sink.flush()
        return len(data)

    # ─── Debug Dump ───────────────────────────────────────────

    def encode_debug(self, words: Iterable, width: int, height: int) -> str:
        """
        Render the human-readable dump:

            Compressed image format 2 [DEBUG]
            2 1
            00 11 22 33 44 55 66 77

        No trailing newline.
        """
        dims, payload = self._prepare(words, width, height)
        hex_bytes = " ".join(f"{byte:02X}" for word in payload for byte in word)
        return (
            RPEG_DEBUG_MAGIC.decode("ascii") + "\n"
            + f"{dims.width} {dims.height}\n"
            + hex_bytes
        )

    def write_debug(self, words: Iterable, width: int, height: int,
                    sink: Optional[TextIO] = None) -> None:
        """Write the dump to a text sink (default stdout)."""
        if sink is None:
            sink = sys.stdout
        sink.write(self.encode_debug(words, width, height))
        sink.flush()

    # ─── Internal ─────────────────────────────────────────────

    def _prepare(self, words: Iterable, width: int, height: int):
        dims = Dimensions(width, height)
        payload: List[bytes] = [coerce_word(w) for w in words]
        if self.verify_dimensions and len(payload) != dims.area:
            raise RpegDimensionError(dims.width, dims.height, len(payload))
        return dims, payload


# ═══════════════════════════════════════════════════════════════
# CONVENIENCE FUNCTIONS
# ═══════════════════════════════════════════════════════════════

def encode(words: Iterable, width: int, height: int) -> bytes:
    """Convenience: encode a container in one call."""
    return RpegEncoder().encode(words, width, height)

def encode_debug(words: Iterable, width: int, height: int) -> str:
    """Convenience: render the [DEBUG] dump in one call."""
    return RpegEncoder().encode_debug(words, width, height)

def encode_file(filepath: Union[str, "os.PathLike[str]"], words: Iterable,
                width: int, height: int) -> int:
    """Convenience: write a container file. Returns bytes written."""
    data = RpegEncoder().encode(words, width, height)
    with open(filepath, "wb") as fh:
        fh.write(data)
    return len(data)
