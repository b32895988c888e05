"""Command line entry point for Glyphwerk."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from . import __version__
from .core.config import load_settings, parse_code_point, save_settings
from .core.errors import GlyphwerkError
from .core.exporters import build_webfont
from .log import setup_logging

logger = logging.getLogger(__name__)


def _code_point(value: str) -> int:
    try:
        return parse_code_point(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid code point: {value!r}") from None


def _formats(value: str) -> List[str]:
    return [part.strip().lower() for part in value.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glyphwerk",
        description="Converts a directory full of SVG icons into webfonts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("src", nargs="?", type=Path, help="Source directory")
    parser.add_argument("-o", "--out-dir", type=Path, help="Output directory")
    parser.add_argument("-n", "--font-name", help="Font name")
    parser.add_argument("-f", "--file", help="Output filenames (without extension)")
    parser.add_argument("-p", "--prefix", help="CSS class name prefix")
    parser.add_argument("-b", "--base", help="CSS class name added to all icons")
    parser.add_argument(
        "--directory-separator",
        help="The string to use in CSS class names when the icon files are in sub-directories "
        "(default: -)",
    )
    parser.add_argument(
        "--fixed-width",
        action="store_true",
        default=None,
        help="Creates a monospace font of the width of the largest input icon",
    )
    parser.add_argument(
        "--start-code-point",
        type=_code_point,
        help="First code point handed out to new icons (default: 0xF000)",
    )
    parser.add_argument(
        "--formats",
        type=_formats,
        help="Comma separated font formats to write (default: ttf,woff,woff2)",
    )
    parser.add_argument("-c", "--config", type=Path, help="YAML project file with default options")
    parser.add_argument(
        "--save-config",
        type=Path,
        help="Write the effective options to this YAML project file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.config is None:
        if args.src is None:
            parser.error("the following arguments are required: src")
        if not args.prefix and not args.base:
            parser.error("Not enough arguments. Either --prefix, --base or both must be provided.")

    setup_logging(debug=args.debug, color=sys.stderr.isatty())

    try:
        settings = load_settings(
            args.config,
            source_dir=args.src,
            out_dir=args.out_dir,
            font_name=args.font_name,
            file_name=args.file,
            prefix=args.prefix,
            base=args.base,
            directory_separator=args.directory_separator,
            fixed_width=args.fixed_width,
            start_code_point=args.start_code_point,
            formats=args.formats,
        )
    except GlyphwerkError as exc:
        parser.error(str(exc))

    try:
        settings.validate()
    except ValueError as exc:
        parser.error(str(exc))

    try:
        result = build_webfont(settings)
        if args.save_config is not None:
            save_settings(args.save_config, settings)
            logger.info("Wrote %s", args.save_config)
    except (GlyphwerkError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    if not result.ok:
        total = len(result.failures) + len(result.written)
        logger.error("%d of %d files could not be written", len(result.failures), total)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
