#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, Optional, Set, TypeVar

import sollayout
from sollayout.compiler import OUTPUT_FORMATS
from sollayout.compiler.settings import SOLLAYOUT_TRACEBACK_LIMIT, Settings, get_log_level
from sollayout.typing import AstPath, ContractName, OutputFormats

T = TypeVar("T")

format_options_help = """Format to print, one or more of:
layout_tree (default) - Storage layout as an indented tree
layout                - Storage layout as a JSON object
layout_json           - Storage layout as indented JSON text
ast                   - State variable type tree of each contract
"""


def _parse_cli_args():
    return _parse_args(sys.argv[1:])


def _cli_helper(f, output_formats, compiled):
    for contracts in compiled.values():
        for contract_data in contracts.values():
            for data in contract_data.values():
                if isinstance(data, (list, dict)):
                    print(json.dumps(data), file=f)
                else:
                    print(data, file=f, end="" if data.endswith("\n") else "\n")


def _parse_args(argv):
    parser = argparse.ArgumentParser(
        description="Storage layout of Solidity contracts, from the solc AST",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "input_files",
        help="solc compact-JSON AST (solc --ast-compact-json) or standard-JSON output",
        nargs="+",
    )
    parser.add_argument("--version", action="version", version=sollayout.__version__)
    parser.add_argument("-f", help=format_options_help, default="layout_tree", dest="format")
    parser.add_argument(
        "--contract",
        help="Only report on this contract (may be given more than once)",
        action="append",
        dest="contracts",
    )
    parser.add_argument(
        "--skip-invalid",
        help="Skip state variables of unsupported type instead of failing",
        action="store_true",
    )
    parser.add_argument(
        "--traceback-limit",
        help="Set the traceback limit for error messages",
        type=int,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        help="Turn on verbose output (debug logging and full tracebacks)",
        action="store_true",
    )
    parser.add_argument("-o", help="Set the output path", dest="output_path")

    args = parser.parse_args(argv)

    if args.traceback_limit is not None:
        sys.tracebacklimit = args.traceback_limit
    elif SOLLAYOUT_TRACEBACK_LIMIT is not None:
        sys.tracebacklimit = SOLLAYOUT_TRACEBACK_LIMIT
    elif args.verbose:
        sys.tracebacklimit = 1000
    else:
        # errors point at AST declarations, a python traceback adds nothing
        sys.tracebacklimit = 0

    logging.basicConfig(
        level=get_log_level(args.verbose), format="%(levelname)s %(name)s: %(message)s"
    )

    output_formats = tuple(uniq(args.format.split(",")))

    settings = Settings(skip_invalid=args.skip_invalid, contract_names=args.contracts or [])

    if args.verbose:
        print(f"cli specified: `{settings}`", file=sys.stderr)

    compiled = compile_files(args.input_files, output_formats, settings)

    if args.output_path:
        with open(args.output_path, "w") as f:
            _cli_helper(f, output_formats, compiled)
    else:
        f = sys.stdout
        _cli_helper(f, output_formats, compiled)


def uniq(seq: Iterable[T]) -> Iterator[T]:
    """
    Yield unique items in ``seq`` in order.
    """
    seen: Set[T] = set()

    for x in seq:
        if x in seen:
            continue

        seen.add(x)
        yield x


def exc_handler(contract_name: ContractName, exception: Exception) -> None:
    print(f"Error laying out: {contract_name}", file=sys.stderr)
    raise exception


def compile_files(
    input_files: list[AstPath],
    output_formats: OutputFormats,
    settings: Optional[Settings] = None,
) -> dict:
    for output_format in output_formats:
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported format type {repr(output_format)}")

    ret: dict[Path, dict] = {}

    for file_name in input_files:
        file_path = Path(file_name)

        output = sollayout.compile_file(
            file_path,
            output_formats=output_formats,
            settings=settings,
            exc_handler=exc_handler,
        )

        ret[file_path] = output

    return ret


if __name__ == "__main__":
    _parse_args(sys.argv[1:])
