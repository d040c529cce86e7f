"""
conftest.py - Shared pytest fixtures for token ledger tests

Provides common fixtures used across unit, conformance and scenario tests:
- Named accounts (deployer, receiver, another_account)
- A freshly deployed Mock Token per test
- A bare ledger for engine-level tests
"""

import pytest

from token_ledger import Ledger, Token

from tests.helpers import DECIMALS, INITIAL_SUPPLY, EventRecorder


# =============================================================================
# ACCOUNT FIXTURES
# =============================================================================

@pytest.fixture
def deployer():
    return "0x1111111111111111111111111111111111111111"


@pytest.fixture
def receiver():
    return "0x2222222222222222222222222222222222222222"


@pytest.fixture
def another_account():
    return "0x3333333333333333333333333333333333333333"


@pytest.fixture
def fourth_account():
    return "0x4444444444444444444444444444444444444444"


# =============================================================================
# TOKEN FIXTURES
# =============================================================================

@pytest.fixture
def mtkn(deployer):
    """Mock Token deployed with 100000 display units at 18 decimals."""
    return Token.deploy("Mock Token", "MTKN", DECIMALS, INITIAL_SUPPLY, deployer, verbose=False)


@pytest.fixture
def recorder(mtkn):
    """EventRecorder subscribed to every mtkn event."""
    rec = EventRecorder()
    mtkn.subscribe(rec)
    return rec


@pytest.fixture
def basic_ledger():
    """Ledger with alice holding the whole supply of 10,000 base units."""
    return Ledger("test", "alice", 10_000, verbose=False)
