import argparse
import logging
import sys
from typing import Optional, Sequence

from config import EngineConfig
from csv_accounts import write_accounts
from errors import FatalLedgerError, TransactionFormatError
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

EXIT_INPUT_ERROR = 1
EXIT_FATAL_REJECTION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Apply a CSV of transactions and print the resulting client accounts as CSV",
    )
    parser.add_argument("input", help="Path to the transactions CSV (type, client, tx, amount)")
    parser.add_argument(
        "--fail-on",
        action="append",
        default=[],
        metavar="KIND",
        help="Abort when a transaction is rejected with this error kind, e.g. insufficient_funds, or 'all'. Repeatable.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log rejected transactions and a summary to stderr")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = EngineConfig.from_kind_names(args.fail_on, verbose=args.verbose)
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(config)
    try:
        accounts = engine.process_file(args.input)
    except (OSError, TransactionFormatError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except FatalLedgerError as e:
        print(f"error: transaction rejected: {e}", file=sys.stderr)
        return EXIT_FATAL_REJECTION

    write_accounts(accounts.values(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
