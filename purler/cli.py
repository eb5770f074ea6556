"""
Command-line interface for purler.

Usage:
    purler parse <PURL>...         print each purl's components as JSON
    purler canonicalize <PURL>...  print each purl's canonical form
    purler validate <PURL>...      report whether each purl is valid

Exits with status 1 when any of the given purls is invalid.
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from purler.config import PURLER_CONFIG, get_logging_level_from_string
from purler.exceptions import PackageURLError
from purler.purl import PackageURL

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="purler", description="Parse, validate and canonicalize package URLs.")
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default from configuration: {PURLER_CONFIG['logging_level']}).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for command, help_text in (
        ("parse", "Print the components of each purl as JSON."),
        ("canonicalize", "Print the canonical form of each purl."),
        ("validate", "Report whether each purl is valid."),
    ):
        subparser = subparsers.add_parser(command, help=help_text)
        subparser.add_argument("purls", nargs="+", metavar="PURL", help="A package URL, e.g. pkg:npm/lodash@4.17.21")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Runs the CLI and returns the process exit status."""
    args = build_parser().parse_args(argv)

    level = (
        get_logging_level_from_string(args.log_level)
        if args.log_level
        else PURLER_CONFIG["logging_level_int"]
    )
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")
    logging.getLogger("purler").setLevel(level)

    failures = 0
    for raw in args.purls:
        try:
            purl = PackageURL.from_string(raw)
        except PackageURLError as e:
            failures += 1
            logger.debug(f"Rejected '{raw}': {e}")
            if args.command == "validate":
                print(f"{raw}: invalid: {e}")
            else:
                print(f"error: {raw}: {e}", file=sys.stderr)
            continue

        if args.command == "parse":
            print(json.dumps(purl.to_dict(), indent=4))
        elif args.command == "canonicalize":
            print(purl.to_string())
        else:
            print(f"{raw}: valid")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
