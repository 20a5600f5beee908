"""
processor.py - Transaction Stream Processor

Folds an ordered sequence of transactions into a Registry.

For each record, in input order:
1. Look up (or create) the client's account
2. Apply the record to the account
3. On failure, match on the error kind:
   - recoverable kinds: record the rejection and continue
   - fatal kinds: stop and re-raise to the caller

Order is the only sequencing signal. Records are never reordered or
batched, and the input is consumed in a single forward pass.
"""

from __future__ import annotations
import sys
from typing import Iterable, List, Optional, Tuple

from .core import (
    ErrorKind, ExecuteResult, LedgerError, Transaction,
)
from .registry import Registry


def is_recoverable(error: LedgerError) -> bool:
    """
    Return True if processing may continue after this error.

    Recoverable: insufficient funds, unknown transaction reference, and
    resolve/chargeback of a transaction that is not disputed. Everything
    else aborts the run.
    """
    match error.kind:
        case (ErrorKind.INSUFFICIENT_FUNDS
              | ErrorKind.TRANSACTION_NOT_FOUND
              | ErrorKind.NOT_DISPUTED):
            return True
        case (ErrorKind.MALFORMED_RECORD
              | ErrorKind.ACCOUNT_LOCKED
              | ErrorKind.MISSING_AMOUNT
              | ErrorKind.UNEXPECTED_AMOUNT
              | ErrorKind.NOT_REFERRABLE):
            return False


class Processor:
    """
    Stream processor applying the per-record error policy.

    Attributes:
        registry: The registry being folded into (owned by the caller or
                  created per processor)
        rejected: Skipped records with the error that caused the skip
        applied_count: Number of records applied successfully
        verbose: Print one line per skipped record to stderr

    Example:
        processor = Processor()
        registry = processor.run(transactions)
        for account in registry.snapshot():
            print(account.as_row())
    """

    def __init__(self, registry: Optional[Registry] = None, verbose: bool = False):
        self.registry = registry if registry is not None else Registry()
        self.verbose = verbose
        self.rejected: List[Tuple[Transaction, LedgerError]] = []
        self.applied_count: int = 0

    def step(self, tx: Transaction) -> ExecuteResult:
        """
        Process a single record.

        Returns:
            ExecuteResult.APPLIED if the account was updated
            ExecuteResult.REJECTED if the record failed a recoverable check

        Raises:
            LedgerError: If the record failed a fatal check
        """
        account = self.registry.get_or_create(tx.client)
        try:
            account.apply(tx)
        except LedgerError as e:
            if not is_recoverable(e):
                if self.verbose:
                    print(f"✗ FATAL: {tx!r}: {e}", file=sys.stderr)
                raise
            self.rejected.append((tx, e))
            if self.verbose:
                print(f"⚠️  SKIPPED: {tx!r}: {e}", file=sys.stderr)
            return ExecuteResult.REJECTED

        self.applied_count += 1
        return ExecuteResult.APPLIED

    def run(self, transactions: Iterable[Transaction]) -> Registry:
        """
        Fold all transactions into the registry, in order.

        Args:
            transactions: Ordered, finite sequence of records. Consumed once.

        Returns:
            The registry holding the final account states

        Raises:
            LedgerError: The first fatal error; processing stops there
        """
        for tx in transactions:
            self.step(tx)
        return self.registry


def process(transactions: Iterable[Transaction], verbose: bool = False) -> Registry:
    """Run a fresh Processor over the transactions and return its registry."""
    return Processor(verbose=verbose).run(transactions)
