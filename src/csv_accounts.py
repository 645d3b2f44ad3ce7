import csv
from decimal import Decimal
from typing import Iterable, TextIO

from models import ClientAccount

HEADER = ("client", "available", "held", "total", "locked")


def format_decimal(value: Decimal) -> str:
    """Format decimal at its natural precision, removing trailing zeros and never using an exponent."""
    normalized = value.normalize()
    if normalized.is_zero():
        return "0"
    return f"{normalized:f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    """Write the account table as CSV, one row per client, sorted by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    for account in sorted(accounts, key=lambda a: a.client_id):
        writer.writerow(
            (
                account.client_id,
                format_decimal(account.available),
                format_decimal(account.held),
                format_decimal(account.total),
                str(account.locked).lower(),
            )
        )
