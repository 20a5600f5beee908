"""
registry.py - Client Account Registry

Maps client ids to their Account, creating accounts on first reference.
Iteration follows the order in which clients were first seen, so reports
are deterministic for a given input.
"""

from __future__ import annotations
from typing import Any, Dict, Iterator, List, Optional

from .account import Account


class Registry:
    """
    Owner of all client accounts for a run.

    Not thread-safe. A registry is mutated only by the processor folding an
    ordered input.
    """

    def __init__(self):
        self._accounts: Dict[int, Account] = {}

    def get_or_create(self, client: int) -> Account:
        """
        Return the account of a client, creating a zero-balance unlocked one
        if the client has not been seen before.
        """
        account = self._accounts.get(client)
        if account is None:
            account = Account(client)
            self._accounts[client] = account
        return account

    def get(self, client: int) -> Optional[Account]:
        """Return the account of a client, or None if never seen."""
        return self._accounts.get(client)

    def snapshot(self) -> List[Account]:
        """Return all accounts in first-seen client order."""
        return list(self._accounts.values())

    def verify_balances(self) -> Dict[str, Any]:
        """
        Verify that total == available + held for every account.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every account balances
            - 'discrepancies': List[Dict] - one entry per failing account with
              client, available, held, total and difference
        """
        discrepancies = []
        for account in self._accounts.values():
            if not account.check_balances():
                discrepancies.append({
                    'client': account.client,
                    'available': account.available,
                    'held': account.held,
                    'total': account.total,
                    'difference': account.total - (account.available + account.held),
                })
        return {
            'valid': len(discrepancies) == 0,
            'discrepancies': discrepancies,
        }

    def __contains__(self, client: object) -> bool:
        return client in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts.values())

    def __repr__(self) -> str:
        return f"Registry({len(self._accounts)} accounts)"
