import argparse
import logging
import sys

import requests

from .config import HarnessConfig
from .exceptions import BodyProbeError
from .harness import run
from .patterns import RequestPattern

DEFAULT_FILE = "photo.jpg"


def parse_pattern(text):
    try:
        return RequestPattern.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser():
    parser = argparse.ArgumentParser(
        prog="bodyprobe",
        description="Send one request per body-construction pattern to a raw "
        "TCP listener and dump the bytes it receives.",
    )
    parser.add_argument("-f", "--file", default="", help="file name")
    parser.add_argument(
        "-p", "--port", type=int, default=HarnessConfig.port, help="listener port"
    )
    parser.add_argument(
        "--pattern",
        dest="patterns",
        action="append",
        type=parse_pattern,
        help="only send this pattern (number or name, repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv=None, out=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        format="%(message)s", level=logging.DEBUG if args.verbose else logging.INFO
    )

    filename = args.file or DEFAULT_FILE
    config = HarnessConfig(port=args.port)
    if out is None:
        out = sys.stdout.buffer

    try:
        run(config, filename, out, patterns=args.patterns)
    except BodyProbeError as e:
        logging.error(str(e))
        return 1
    except requests.RequestException as e:
        logging.error(f"HTTP request failed: {e}")
        return 1
    return 0
