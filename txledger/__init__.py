"""
txledger - Client Account Transaction Ledger

Replays an ordered log of deposits, withdrawals, disputes, resolves and
chargebacks against per-client accounts and reports the final balances.

Usage:
    from decimal import Decimal
    from txledger import Processor, Transaction, TransactionType

    processor = Processor()
    registry = processor.run([
        Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("2.0")),
        Transaction(TransactionType.WITHDRAWAL, 1, 2, Decimal("0.5")),
    ])
    registry.get(1).available  # Decimal("1.5")

    # From a CSV file
    from txledger import load_transactions, write_accounts
    registry = Processor().run(load_transactions("transactions.csv"))
    write_accounts(registry.snapshot(), sys.stdout)
"""

__version__ = '1.0.0'

# Core types
from .core import (
    Transaction,
    TransactionType,
    ExecuteResult,
    ErrorKind,
    LedgerError,
    MalformedRecord,
    InsufficientFunds,
    TransactionNotFound,
    TransactionNotDisputed,
    AccountLocked,
    MissingAmount,
    UnexpectedAmount,
    TransactionNotReferrable,
    MAX_CLIENT_ID,
    MAX_TX_ID,
)

# State machine and registry
from .account import Account
from .registry import Registry

# Stream processing
from .processor import Processor, process, is_recoverable

# CSV adapter
from .csv_io import (
    read_transactions,
    load_transactions,
    decode_record,
    parse_amount,
    format_amount,
    write_accounts,
)

__all__ = [
    # Core
    'Transaction', 'TransactionType', 'ExecuteResult', 'ErrorKind',
    'LedgerError', 'MalformedRecord', 'InsufficientFunds', 'TransactionNotFound',
    'TransactionNotDisputed', 'AccountLocked', 'MissingAmount', 'UnexpectedAmount',
    'TransactionNotReferrable',
    'MAX_CLIENT_ID', 'MAX_TX_ID',
    # State
    'Account', 'Registry',
    # Processing
    'Processor', 'process', 'is_recoverable',
    # CSV
    'read_transactions', 'load_transactions', 'decode_record',
    'parse_amount', 'format_amount', 'write_accounts',
]
