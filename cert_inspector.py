"""Command line entry point: split a PEM bundle or print what is in it."""
import argparse
import logging
import sys

from bundle_errors import BundleError, BundleIOError
from pem_bundle import parse_bundle
from print_bundle_info import print_bundle_info
from split_bundle import output_prefix, split_bundle

logger = logging.getLogger(__name__)


def read_bundle(path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise BundleIOError(f"Could not read {path}: {e}") from e


def run_split(args):
    blocks = parse_bundle(read_bundle(args.path))
    prefix = output_prefix(args.path, args.output_prefix)
    count = split_bundle(blocks, prefix)
    print(f"Split {count} certificate(s) from {args.path} into {prefix}-*.crt")


def run_info(args):
    data = read_bundle(args.path)
    if not print_bundle_info(data):
        logger.warning("No certificates found in %s", args.path)


def build_parser():
    parser = argparse.ArgumentParser(prog="cert-inspector", description="Split a PEM certificate bundle or display information about its certificates")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    split = subparsers.add_parser("split", help="Split ca-bundle into separate files")
    split.add_argument("path", help="The ca-bundle to split")
    split.add_argument("output_prefix", nargs="?", help="The output file prefix (defaults to the bundle's file name without extension)")
    split.set_defaults(func=run_split)

    info = subparsers.add_parser("info", help="Print information about each certificate in the bundle")
    info.add_argument("path", help="The ca-bundle to inspect")
    info.set_defaults(func=run_info)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        args.func(args)
    except BundleError as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
