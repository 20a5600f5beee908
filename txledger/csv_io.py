"""
csv_io.py - CSV Input and Output

Decodes transaction records from CSV and renders account balances as CSV.

Input format (header row required, columns located by name):
    type,       client, tx, amount
    deposit,         1,  1,    1.0
    dispute,         1,  1,

Every field, header names included, is trimmed of surrounding whitespace.
The amount column is optional per row: an empty, missing or unparsable
amount decodes as absent. Any other decode failure is a MalformedRecord.

Output format:
    client,available,held,total,locked
    1,1.5,0,1.5,false
"""

from __future__ import annotations
import csv
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, TextIO, Union

from .account import Account
from .core import (
    INPUT_FIELDS, MAX_CLIENT_ID, MAX_TX_ID, OUTPUT_FIELDS,
    MalformedRecord, Transaction, TransactionType,
)


_UNSIGNED_INT = re.compile(r"\+?[0-9]+")

# Plain decimal notation only, no exponent
_PLAIN_DECIMAL = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")

_REQUIRED_COLUMNS = ("type", "client", "tx")


# ============================================================================
# FIELD PARSING
# ============================================================================

def parse_amount(text: str) -> Optional[Decimal]:
    """
    Parse an amount field.

    Returns None for empty text and for anything that is not a number in
    plain decimal notation ("abc", "NaN", "Infinity", "1e3").
    """
    text = text.strip()
    if not _PLAIN_DECIMAL.fullmatch(text):
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def parse_unsigned(text: str, maximum: int, field_name: str, line: Optional[int] = None) -> int:
    """
    Parse an unsigned integer field bounded by maximum.

    Raises:
        MalformedRecord: If the text is not an integer in [0, maximum]
    """
    text = text.strip()
    if not _UNSIGNED_INT.fullmatch(text):
        raise MalformedRecord(f"invalid {field_name} `{text}`", line)
    value = int(text)
    if value > maximum:
        raise MalformedRecord(f"{field_name} `{text}` out of range (max {maximum})", line)
    return value


def format_amount(value: Decimal) -> str:
    """Render a decimal at its own scale, never in scientific notation."""
    return format(value, "f")


# ============================================================================
# READING
# ============================================================================

def _column_index(header: List[str]) -> Dict[str, int]:
    columns = [name.strip().lower() for name in header]
    missing = [name for name in _REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise MalformedRecord(f"header is missing column(s): {', '.join(missing)}", 1)
    return {name: columns.index(name) for name in INPUT_FIELDS if name in columns}


def decode_record(row: List[str], index: Dict[str, int], line: Optional[int] = None) -> Transaction:
    """
    Decode one CSV row into a Transaction.

    Args:
        row: Raw fields of the row
        index: Column name -> position, as read from the header
        line: Line number for error messages

    Raises:
        MalformedRecord: If the row cannot be decoded
    """
    def field(name: str) -> str:
        position = index.get(name)
        if position is None or position >= len(row):
            return ""
        return row[position].strip()

    token = field("type")
    try:
        tx_type = TransactionType.parse(token)
    except ValueError:
        raise MalformedRecord(f"unknown transaction type `{token}`", line) from None

    client = parse_unsigned(field("client"), MAX_CLIENT_ID, "client", line)
    tx = parse_unsigned(field("tx"), MAX_TX_ID, "tx", line)
    amount = parse_amount(field("amount"))

    return Transaction(tx_type, client, tx, amount)


def _rows(reader) -> Iterator[List[str]]:
    """Iterate CSV rows, turning unreadable input into MalformedRecord."""
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except UnicodeDecodeError as e:
            # Text streams decode ahead of the reader, so no exact line
            raise MalformedRecord(f"input is not valid UTF-8: {e}") from e
        except csv.Error as e:
            raise MalformedRecord(f"unreadable record: {e}", reader.line_num) from e
        yield row


def read_transactions(source: Iterable[str]) -> Iterator[Transaction]:
    """
    Lazily decode transactions from CSV text.

    Args:
        source: An open text stream or any iterable of lines

    Yields:
        Transactions in input order. Empty lines are skipped; a row of
        empty fields such as ",,," is a record and fails to decode.

    Raises:
        MalformedRecord: On the first record that cannot be read or decoded
    """
    reader = csv.reader(source)
    rows = _rows(reader)
    header = next(rows, None)
    if header is None:
        return
    index = _column_index(header)

    for row in rows:
        if not row:
            continue
        yield decode_record(row, index, reader.line_num)


def load_transactions(path: Union[str, Path]) -> Iterator[Transaction]:
    """Lazily decode transactions from a UTF-8 CSV file."""
    with open(path, newline="", encoding="utf-8") as f:
        yield from read_transactions(f)


# ============================================================================
# WRITING
# ============================================================================

def write_accounts(accounts: Iterable[Account], out: TextIO) -> None:
    """Write the balance report, one row per account, in the given order."""
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(OUTPUT_FIELDS)
    for account in accounts:
        client, available, held, total, locked = account.as_row()
        writer.writerow([
            client,
            format_amount(available),
            format_amount(held),
            format_amount(total),
            "true" if locked else "false",
        ])
