import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, List, Optional

from errors import AmountNotSpecifiedError, AmountUnexpectedError, MalformedRowError
from models import DisputeTransaction, StandardTransaction, Transaction, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx", "amount")
MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
# Integer digits plus decimal places an amount may carry and still add up exactly.
MAX_AMOUNT_DIGITS = 28


def read_transactions(filepath: str) -> Iterator[Transaction]:
    """
    Yield transactions from a CSV file in file order.
    Raises TransactionFormatError on the first row that cannot be decoded.
    """
    with open(filepath, "r", newline="") as f:
        yield from parse_transactions(f)


def parse_transactions(lines: Iterable[str]) -> Iterator[Transaction]:
    """Yield transactions from CSV text. The first non-blank row is the header."""
    reader = csv.reader(lines)

    columns: Optional[List[str]] = None
    for fields in reader:
        if not fields:
            continue

        fields = [field.strip() for field in fields]
        if columns is None:
            columns = _parse_header(fields, reader.line_num)
            continue

        if len(fields) != len(columns):
            raise MalformedRowError(
                f"expected {len(columns)} fields, found {len(fields)}",
                line_number=reader.line_num,
            )

        yield parse_row(dict(zip(columns, fields)), reader.line_num)


def parse_row(row: Dict[str, str], line_number: Optional[int] = None) -> Transaction:
    """Parse a header-keyed CSV row into a StandardTransaction or DisputeTransaction."""
    try:
        transaction_type = TransactionType(row["type"].lower())
    except ValueError:
        raise MalformedRowError(f"unknown transaction type {row['type']!r}", line_number=line_number) from None

    client_id = _parse_id(row["client"], "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(row["tx"], "tx", MAX_TRANSACTION_ID, line_number)
    amount = _parse_amount(row["amount"], line_number)

    if transaction_type.is_standard:
        if amount is None:
            raise AmountNotSpecifiedError(
                f"amount not specified for {transaction_type.value} {transaction_id}",
                line_number=line_number,
            )
        return StandardTransaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )

    if amount is not None:
        raise AmountUnexpectedError(
            f"amount should not be specified for {transaction_type.value} {transaction_id}",
            line_number=line_number,
        )
    return DisputeTransaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
    )


def _parse_header(fields: List[str], line_number: int) -> List[str]:
    missing = [column for column in REQUIRED_COLUMNS if column not in fields]
    if missing:
        raise MalformedRowError(f"header is missing columns: {', '.join(missing)}", line_number=line_number)
    if len(set(fields)) != len(fields):
        raise MalformedRowError("header contains duplicate columns", line_number=line_number)
    logger.debug(f"CSV columns: {fields}")
    return fields


def _parse_id(value: str, column: str, maximum: int, line_number: Optional[int]) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise MalformedRowError(f"invalid {column} id {value!r}", line_number=line_number) from None

    if not 0 <= parsed <= maximum:
        raise MalformedRowError(f"{column} id {parsed} out of range 0..{maximum}", line_number=line_number)
    return parsed


def _parse_amount(value: str, line_number: Optional[int]) -> Optional[Decimal]:
    if not value:
        return None

    if "_" in value:
        raise MalformedRowError(f"invalid amount {value!r}", line_number=line_number)

    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise MalformedRowError(f"invalid amount {value!r}", line_number=line_number) from None

    if not amount.is_finite():
        raise MalformedRowError(f"invalid amount {value!r}", line_number=line_number)
    if _amount_width(amount) > MAX_AMOUNT_DIGITS:
        raise MalformedRowError(
            f"amount {value!r} exceeds {MAX_AMOUNT_DIGITS} digits of precision",
            line_number=line_number,
        )
    return amount


def _amount_width(amount: Decimal) -> int:
    """Digits needed to write amount in fixed point, ignoring trailing zeros after the point."""
    _, digits, exponent = amount.as_tuple()
    if not any(digits):
        return 1
    while digits[-1] == 0 and exponent < 0:
        digits = digits[:-1]
        exponent += 1
    integer_digits = max(len(digits) + exponent, 0)
    decimal_places = max(-exponent, 0)
    return integer_digits + decimal_places
