"""
Command line entry point.

Usage:
    txledger transactions.csv > accounts.csv
    python -m txledger transactions.csv --verbose
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from . import __version__
from .core import LedgerError
from .csv_io import load_transactions, write_accounts
from .processor import Processor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txledger",
        description="Replay a CSV log of transactions and print the final client balances",
    )
    parser.add_argument(
        "file",
        help="CSV file with a series of transactions",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="report skipped records on stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI and return the process exit code.

    The report is written only after the whole input was processed, so a
    fatal error leaves stdout empty.
    """
    args = build_parser().parse_args(argv)

    processor = Processor(verbose=args.verbose)
    try:
        registry = processor.run(load_transactions(args.file))
    except LedgerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: cannot read {args.file}: {e.strerror or e}", file=sys.stderr)
        return 1

    write_accounts(registry.snapshot(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
