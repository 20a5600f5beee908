"""
conftest.py - Shared pytest fixtures for txledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Empty and funded accounts
- Fresh registries and processors
- CSV file helpers for the adapter and CLI tests
"""

import pytest
from decimal import Decimal
from pathlib import Path
from typing import Callable

from txledger import (
    Account, Registry, Processor,
    Transaction, TransactionType,
)


# =============================================================================
# ACCOUNT FIXTURES
# =============================================================================

@pytest.fixture
def account() -> Account:
    """Empty, unlocked account for client 1."""
    return Account(1)


@pytest.fixture
def funded_account() -> Account:
    """Account for client 1 with a 10.0 deposit (tx 1) and a 2.5 withdrawal (tx 2)."""
    acct = Account(1)
    acct.apply(Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("10.0")))
    acct.apply(Transaction(TransactionType.WITHDRAWAL, 1, 2, Decimal("2.5")))
    return acct


# =============================================================================
# PROCESSING FIXTURES
# =============================================================================

@pytest.fixture
def registry() -> Registry:
    return Registry()


@pytest.fixture
def processor() -> Processor:
    return Processor(verbose=False)


# =============================================================================
# CSV FIXTURES
# =============================================================================

@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str], Path]:
    """Factory writing CSV text to a temporary file and returning its path."""
    counter = {"n": 0}

    def _write(content: str) -> Path:
        counter["n"] += 1
        path = tmp_path / f"transactions_{counter['n']}.csv"
        path.write_text(content)
        return path

    return _write
