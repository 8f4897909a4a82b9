#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
# The comment above enables global autocomplete using argcomplete

import argparse
import json
import os
import sys
from typing import List, NoReturn, Optional

try:
    import argcomplete
except ModuleNotFoundError:
    argcomplete = None

from flavorconvert import config
from flavorconvert.common.exception import (
    FileNotFound,
    FlavorConvertError,
    FlavorPartIOError,
    InvalidFileExtension,
    OutputIOError,
    UsageError,
)
from flavorconvert.converter import convert
from flavorconvert.logger import Logger
from flavorconvert.types import SignedFlavorType

# pylint: disable=pointless-string-statement
"""
This script converts a legacy signed flavor part into a flavor collection
following the flavor template based schema. The flavor templates that apply to
the flavor part are read from the flavor template directory.

Example usage:

```
flavorconvert_convert old-flavor-part.json
```

To use a different template directory and output file:

```
flavorconvert_convert -t ./templates -o new-flavor-part.json old-flavor-part.json
```
"""

logger = Logger().logger()


def check_valid_file(filename: str) -> None:
    """Check that the given input path is an existing JSON file."""
    if not filename:
        raise UsageError("Old flavor part json file path is required")

    if os.path.splitext(filename)[1] != ".json":
        raise InvalidFileExtension(path=filename)

    if not os.path.exists(filename):
        raise FileNotFound(path=filename)


def read_flavor_part(filename: str) -> bytes:
    try:
        with open(filename, "rb") as f:
            return f.read()
    except OSError as e:
        raise FlavorPartIOError(path=filename) from e


def write_flavor_collection(collection: List[SignedFlavorType], output_file: str) -> str:
    """Serialize the flavor collection and write it to the output file."""
    data = json.dumps(collection)
    try:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(data)
    except OSError as e:
        raise OutputIOError(path=output_file) from e
    return data


def get_arg_parser() -> argparse.ArgumentParser:
    parser = ConversionParser(description="Convert a legacy flavor part into the flavor template based schema")
    parser.add_argument("flavor_part", help="old flavor part json file path", action="store")
    parser.add_argument(
        "-t",
        "--templates-dir",
        help=f"flavor template directory (default from configuration, or {config.DEFAULT_TEMPLATES_DIR})",
        action="store",
    )
    parser.add_argument(
        "-o",
        "--output",
        help=f"output file path (default from configuration, or {config.DEFAULT_OUTPUT_FILE})",
        action="store",
    )
    parser.add_argument("-q", "--quiet", help="do not print the new flavor part", action="store_true")
    parser.add_argument("-v", "--verbose", help="enable debug logging", action="store_true")
    return parser


def run(args: argparse.Namespace) -> str:
    """Convert the flavor part named in args and return the written JSON."""
    check_valid_file(args.flavor_part)

    templates_dir = args.templates_dir or config.templates_dir()
    output_file = args.output or config.output_file()

    logger.debug("Converting %s with flavor templates from %s", args.flavor_part, templates_dir)
    collection = convert(read_flavor_part(args.flavor_part), templates_dir)

    data = write_flavor_collection(collection, output_file)
    if not args.quiet and config.print_output():
        print("New flavor part json:\n", data)
    logger.info("New flavor part written to %s", output_file)
    return data


def main(argv: Optional[List[str]] = None) -> None:
    parser = get_arg_parser()

    if argcomplete:
        # This should happen before parse_args()
        argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)
    if args.verbose:
        Logger(verbose=True)

    try:
        run(args)
    except UsageError as e:
        logger.error("Error in validating the input file path - %s", e)
        sys.exit(1)
    except FlavorConvertError as e:
        logger.error("%s", e)
        sys.exit(1)


class ConversionParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        sys.stderr.write(f"error: {message}\n")
        self.print_help(sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
