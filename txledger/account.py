"""
account.py - Per-client Account State Machine

The Account class owns a client's balances and the part of the transaction
history needed to service disputes. It is the only place balances change.

Balance rules:
    - deposit:    available += amount, total += amount
    - withdrawal: available -= amount, total -= amount
    - dispute:    available -= amount, held += amount
    - resolve:    available += amount, held -= amount
    - chargeback: held -= amount, total -= amount, account locked

Every operation checks all of its preconditions before touching any balance,
so a failed operation leaves the account unchanged.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, Tuple

from .core import (
    ZERO,
    Transaction, TransactionType,
    AccountLocked, InsufficientFunds, MissingAmount, UnexpectedAmount,
    TransactionNotDisputed, TransactionNotFound, TransactionNotReferrable,
)


class Account:
    """
    Balances and dispute history of a single client.

    Invariants:
        - total == available + held after every operation
        - locked never goes from True back to False

    Once locked, deposits, withdrawals, disputes and resolves are rejected
    with AccountLocked. Chargebacks are not gated by the lock.

    Example:
        account = Account(1)
        account.apply(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("1.5")))
        account.available  # Decimal("1.5")
    """

    def __init__(self, client: int):
        self.client = client
        self.available: Decimal = ZERO
        self.held: Decimal = ZERO
        self.total: Decimal = ZERO
        self.locked: bool = False
        # Deposits and withdrawals by tx id, for later disputes
        self.transactions: Dict[int, Transaction] = {}

    # ========================================================================
    # PRECONDITIONS
    # ========================================================================

    def _ensure_unlocked(self) -> None:
        if self.locked:
            raise AccountLocked(self.client)

    def _get_tx(self, tx_id: int) -> Transaction:
        tx = self.transactions.get(tx_id)
        if tx is None:
            raise TransactionNotFound(tx_id)
        return tx

    def _get_referrable_tx(self, tx_id: int) -> Transaction:
        """Return the referenced transaction if it is a deposit or withdrawal."""
        tx = self._get_tx(tx_id)
        if not tx.tx_type.referrable:
            raise TransactionNotReferrable(tx_id, tx.tx_type)
        return tx

    def _get_disputed_tx(self, tx_id: int) -> Transaction:
        tx = self._get_referrable_tx(tx_id)
        if not tx.disputed:
            raise TransactionNotDisputed(tx_id)
        return tx

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def deposit(self, amount: Decimal) -> None:
        """Credit the given amount to the account."""
        self._ensure_unlocked()

        self.available += amount
        self.total += amount

    def withdraw(self, amount: Decimal) -> None:
        """
        Debit the given amount from the account.

        Raises:
            AccountLocked: If the account is locked
            InsufficientFunds: If the available funds do not cover the amount
        """
        self._ensure_unlocked()

        if self.available - amount < ZERO:
            raise InsufficientFunds(self.client, self.available, amount)

        self.available -= amount
        self.total -= amount

    def dispute(self, tx_id: int) -> None:
        """
        Put a deposit or withdrawal under dispute and hold its amount.

        Disputing an already disputed transaction holds the amount again.

        Raises:
            AccountLocked: If the account is locked
            TransactionNotFound: If tx_id is not in the history
            TransactionNotReferrable: If tx_id is not a deposit or withdrawal
        """
        self._ensure_unlocked()
        tx = self._get_referrable_tx(tx_id)
        amount = tx.require_amount()

        tx.dispute()
        self.available -= amount
        self.held += amount

    def resolve(self, tx_id: int) -> None:
        """
        Release the funds held by a dispute.

        The disputed flag is left set, so the same transaction can be
        resolved or charged back again later.

        Raises:
            AccountLocked: If the account is locked
            TransactionNotFound: If tx_id is not in the history
            TransactionNotReferrable: If tx_id is not a deposit or withdrawal
            TransactionNotDisputed: If the transaction is not under dispute
        """
        self._ensure_unlocked()
        tx = self._get_disputed_tx(tx_id)
        amount = tx.require_amount()

        self.available += amount
        self.held -= amount

    def chargeback(self, tx_id: int) -> None:
        """
        Reverse a disputed transaction and lock the account.

        The held amount is removed from held and total for disputed
        withdrawals as well as deposits. The disputed flag is cleared so the
        same transaction cannot be charged back twice.

        Raises:
            TransactionNotFound: If tx_id is not in the history
            TransactionNotReferrable: If tx_id is not a deposit or withdrawal
            TransactionNotDisputed: If the transaction is not under dispute
        """
        tx = self._get_disputed_tx(tx_id)
        amount = tx.require_amount()

        tx.disputed = False
        self.held -= amount
        self.total -= amount
        self.locked = True

    def apply(self, tx: Transaction) -> None:
        """
        Apply a transaction record to the account.

        Validates amount presence, dispatches on the record kind and stores
        deposits and withdrawals in the history once they succeeded.

        Raises:
            LedgerError: The typed failure of the operation. The account is
                         unchanged when this is raised.
        """
        if tx.tx_type is not TransactionType.CHARGEBACK:
            self._ensure_unlocked()

        if tx.tx_type.carries_amount and tx.amount is None:
            raise MissingAmount(tx.tx)
        if not tx.tx_type.carries_amount and tx.amount is not None:
            raise UnexpectedAmount(tx.tx)

        match tx.tx_type:
            case TransactionType.DEPOSIT:
                self.deposit(tx.amount)
                self._save_tx(tx)
            case TransactionType.WITHDRAWAL:
                self.withdraw(tx.amount)
                self._save_tx(tx)
            case TransactionType.DISPUTE:
                self.dispute(tx.tx)
            case TransactionType.RESOLVE:
                self.resolve(tx.tx)
            case TransactionType.CHARGEBACK:
                self.chargeback(tx.tx)

    def _save_tx(self, tx: Transaction) -> None:
        self.transactions[tx.tx] = tx

    # ========================================================================
    # QUERIES
    # ========================================================================

    def check_balances(self) -> bool:
        """Return True if total equals available plus held."""
        return self.total == self.available + self.held

    def as_row(self) -> Tuple[int, Decimal, Decimal, Decimal, bool]:
        """Return (client, available, held, total, locked) for reporting."""
        return (self.client, self.available, self.held, self.total, self.locked)

    def __repr__(self) -> str:
        lock = " locked" if self.locked else ""
        return (
            f"Account(client={self.client}, available={self.available}, "
            f"held={self.held}, total={self.total}{lock})"
        )
