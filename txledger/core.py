"""
Core types for the transaction ledger.

This module provides the foundational data structures shared by the account
state machine, the registry and the stream processor:
1. Decimal context configuration
2. TransactionType and the Transaction record
3. ErrorKind and the LedgerError exception hierarchy
4. ExecuteResult for per-record outcomes

Amounts are always Decimal. Floats are rejected at construction time.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from enum import Enum
from typing import Optional


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Balances are only ever added to and subtracted from, so no rounding should
# occur in practice. The precision is set well above the 28 significant
# digits the input amounts can carry.
#
_LEDGER_DECIMAL_CONTEXT = getcontext()
_LEDGER_DECIMAL_CONTEXT.prec = 50
_LEDGER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

ZERO = Decimal("0")

# Client ids are unsigned 16-bit, transaction ids unsigned 32-bit.
MAX_CLIENT_ID = 2**16 - 1
MAX_TX_ID = 2**32 - 1

# Column names of the input records and of the balance report.
INPUT_FIELDS = ("type", "client", "tx", "amount")
OUTPUT_FIELDS = ("client", "available", "held", "total", "locked")


# ============================================================================
# ENUMS
# ============================================================================

class TransactionType(str, Enum):
    """Kind of a transaction record."""
    DEPOSIT = "deposit"           # Credit to the client's account
    WITHDRAWAL = "withdrawal"     # Debit from the client's account
    DISPUTE = "dispute"           # Claim that a deposit/withdrawal was erroneous
    RESOLVE = "resolve"           # Dispute settled, held funds released
    CHARGEBACK = "chargeback"     # Dispute lost, funds reversed, account locked

    @classmethod
    def parse(cls, token: str) -> TransactionType:
        """
        Parse a type token, ignoring case and surrounding whitespace.

        Raises:
            ValueError: If the token names no known transaction type
        """
        return cls(token.strip().lower())

    @property
    def carries_amount(self) -> bool:
        """True for the kinds that must carry an amount."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)

    @property
    def referrable(self) -> bool:
        """True for the kinds a dispute, resolve or chargeback may target."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ExecuteResult(Enum):
    """
    Outcome of processing a single record.

    APPLIED: The record was valid and the account was updated.
    REJECTED: The record failed a recoverable check and was skipped; the
              account is unchanged.
    """
    APPLIED = "applied"
    REJECTED = "rejected"


class ErrorKind(Enum):
    """
    Tag carried by every LedgerError.

    The stream processor decides whether to skip a record or abort the run
    by matching on this tag.
    """
    MALFORMED_RECORD = "malformed_record"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    TRANSACTION_NOT_FOUND = "transaction_not_found"
    NOT_DISPUTED = "not_disputed"
    ACCOUNT_LOCKED = "account_locked"
    MISSING_AMOUNT = "missing_amount"
    UNEXPECTED_AMOUNT = "unexpected_amount"
    NOT_REFERRABLE = "not_referrable"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    kind: ErrorKind


class MalformedRecord(LedgerError):
    """Raised when an input record cannot be decoded into a Transaction."""
    kind = ErrorKind.MALFORMED_RECORD

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class InsufficientFunds(LedgerError):
    """Raised when a withdrawal exceeds the available funds."""
    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, client: int, available: Decimal, requested: Decimal):
        self.client = client
        self.available = available
        self.requested = requested
        super().__init__(
            f"no funds available (requested {requested} from client {client} "
            f"with {available} available)"
        )


class TransactionNotFound(LedgerError):
    """Raised when a dispute, resolve or chargeback references an unknown tx."""
    kind = ErrorKind.TRANSACTION_NOT_FOUND

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(f"transaction {tx_id} not found")


class TransactionNotDisputed(LedgerError):
    """Raised when resolving or charging back a transaction not under dispute."""
    kind = ErrorKind.NOT_DISPUTED

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(f"transaction {tx_id} is not disputed, cannot resolve/chargeback")


class AccountLocked(LedgerError):
    """Raised when operating on an account frozen by a chargeback."""
    kind = ErrorKind.ACCOUNT_LOCKED

    def __init__(self, client: int):
        self.client = client
        super().__init__(f"account of client {client} is locked")


class MissingAmount(LedgerError):
    """Raised when a deposit or withdrawal has no amount."""
    kind = ErrorKind.MISSING_AMOUNT

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(f"deposit/withdrawal transaction {tx_id} has to specify amount")


class UnexpectedAmount(LedgerError):
    """Raised when a dispute, resolve or chargeback specifies an amount."""
    kind = ErrorKind.UNEXPECTED_AMOUNT

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(
            f"dispute/resolve/chargeback transaction {tx_id} must not specify amount"
        )


class TransactionNotReferrable(LedgerError):
    """Raised when a dispute, resolve or chargeback targets a non deposit/withdrawal."""
    kind = ErrorKind.NOT_REFERRABLE

    def __init__(self, tx_id: int, tx_type: TransactionType):
        self.tx_id = tx_id
        self.tx_type = tx_type
        super().__init__(
            f"invalid transaction type `{tx_type.value}` for tx {tx_id}, "
            f"only deposit/withdrawal can be referred"
        )


# ============================================================================
# TRANSACTION
# ============================================================================

@dataclass(slots=True)
class Transaction:
    """
    A single record of the input log.

    Attributes:
        tx_type: Kind of the record.
        client: Client id (unsigned 16-bit).
        tx: Transaction id (unsigned 32-bit). For deposits and withdrawals it
            identifies the record itself; for disputes, resolves and
            chargebacks it references an earlier deposit or withdrawal.
        amount: Decimal amount, or None when absent.
        disputed: Whether the record is currently under dispute. This is the
            only field that changes after construction.

    Amount presence is deliberately not enforced here: a record violating
    it must still reach Account.apply(), which rejects it with a typed error.
    """
    tx_type: TransactionType
    client: int
    tx: int
    amount: Optional[Decimal] = None
    disputed: bool = False

    def __post_init__(self):
        if not isinstance(self.tx_type, TransactionType):
            raise ValueError(f"Transaction type must be TransactionType, got {type(self.tx_type)}")
        if isinstance(self.client, bool) or not isinstance(self.client, int):
            raise ValueError(f"Transaction client must be int, got {type(self.client)}")
        if not 0 <= self.client <= MAX_CLIENT_ID:
            raise ValueError(f"Transaction client out of range: {self.client}")
        if isinstance(self.tx, bool) or not isinstance(self.tx, int):
            raise ValueError(f"Transaction tx must be int, got {type(self.tx)}")
        if not 0 <= self.tx <= MAX_TX_ID:
            raise ValueError(f"Transaction tx out of range: {self.tx}")
        if self.amount is not None:
            if not isinstance(self.amount, Decimal):
                raise ValueError(f"Transaction amount must be Decimal, got {type(self.amount)}")
            if not self.amount.is_finite():
                raise ValueError(f"Transaction amount must be finite, got {self.amount}")

    def dispute(self) -> None:
        """Mark the transaction as under dispute."""
        self.disputed = True

    def require_amount(self) -> Decimal:
        """
        Return the amount, or raise MissingAmount if there is none.

        Only deposits and withdrawals are stored in an account's history,
        and they are stored only after their amount was checked, so this
        never fails for a referenced transaction.
        """
        if self.amount is None:
            raise MissingAmount(self.tx)
        return self.amount

    def __repr__(self) -> str:
        amount = "" if self.amount is None else f" {self.amount}"
        flag = " [disputed]" if self.disputed else ""
        return f"Transaction({self.tx_type.value} client={self.client} tx={self.tx}{amount}{flag})"
