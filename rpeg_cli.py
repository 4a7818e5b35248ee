from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from rpeg_decoder import RpegDecoder
from rpeg_encoder import RpegEncoder
from rpeg_types import RpegError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rpeg",
        description="Inspect and normalize rpeg compressed image containers.",
    )
    parser.add_argument(
        "--verify-dimensions",
        action="store_true",
        help="Reject containers whose word count differs from width * height",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("info", "Print dimensions and word count"),
        ("dump", "Print the human-readable [DEBUG] form"),
        ("normalize", "Re-encode to stdout with LF line endings"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("path", nargs="?", help="rpeg file to read (default: stdin)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    decoder = RpegDecoder(verify_dimensions=args.verify_dimensions)
    encoder = RpegEncoder()
    try:
        words, width, height = decoder.decode(args.path)
        if args.command == "info":
            print(f"{width}x{height}, {len(words)} words")
        elif args.command == "dump":
            encoder.write_debug(words, width, height)
            print()
        else:
            encoder.write(words, width, height)
    except (RpegError, OSError) as exc:
        print(f"rpeg: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
