#!/usr/bin/env python3
"""
bmpconv - decode an uncompressed BMP and convert it for embedded targets.

usage: python main.py picture.bmp [options]

Options
-------
--view            open the decoded image in the viewer
--export FILE     write a C header with the pixel data
--format FMT      mono (1bpp, default) or rgb565
--name NAME       C array name (default: export file stem)
--threshold N     mono threshold 0..255 (default 128)
--verbose         dump header, geometry and palette
--log-file FILE   also log DEBUG output to FILE
"""

import argparse
import logging
import sys

from bmp_parser import BMPParser
from config import MONO_THRESHOLD
from errors import BMPError
from exporter import FORMATS, write_c_header
from logger import log_run_end, log_run_start, setup_logger


def build_arg_parser():
    ap = argparse.ArgumentParser(
        prog='bmpconv',
        description="Decode an uncompressed BMP file into a pixel buffer.")
    ap.add_argument('file', help="input .bmp file")
    ap.add_argument('--view', action='store_true', help="show the decoded image")
    ap.add_argument('--export', metavar='FILE', help="write a C header to FILE")
    ap.add_argument('--format', choices=FORMATS, default='mono', help="export layout")
    ap.add_argument('--name', help="C array name")
    ap.add_argument('--threshold', type=int, default=MONO_THRESHOLD,
                    help="mono threshold, pixels darker than this are set")
    ap.add_argument('--verbose', action='store_true', help="dump header and palette")
    ap.add_argument('--log-file', metavar='FILE', help="also log to FILE")
    return ap


def main(argv=None):
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    try:
        logger = setup_logger('bmpconv', level, args.log_file)
    except OSError as e:
        ap.error(f"cannot open log file {args.log_file}: {e}")
    log_run_start(logger, args.file)

    parser = BMPParser(args.file)
    try:
        image = parser.load()
        if args.export:
            write_c_header(args.export, image, name=args.name, fmt=args.format,
                           threshold=args.threshold, source_name=args.file)
    except BMPError as e:
        logger.error(f"{type(e).__name__}: {e}")
        log_run_end(logger, args.file, success=False)
        return 1
    except OSError as e:
        logger.error(f"Could not write {args.export}: {e}")
        log_run_end(logger, args.file, success=False)
        return 1

    for k, v in parser.metadata.items():
        logger.debug(f"{k}: {v}")
    log_run_end(logger, args.file)

    if args.view:
        from viewer import run_viewer
        return run_viewer(args.file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
