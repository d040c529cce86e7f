"""
helpers.py - Shared test helpers

Conversion and invariant helpers imported by test modules and conftest.py.
"""

from decimal import Decimal
from typing import List, Union

from token_ledger import Ledger, TokenEvent, to_base_units


DECIMALS = 18
INITIAL_SUPPLY = 100000


def convert(n: Union[int, str, Decimal]) -> int:
    """Display units to base units at 18 decimals (like toWei)."""
    return to_base_units(n, DECIMALS)


def assert_invariants(ledger: Ledger) -> None:
    """Assert conservation and non-negativity on a ledger."""
    result = ledger.verify_conservation()
    assert result['valid'], f"Invariant violated: {result}"


class EventRecorder:
    """Subscriber that keeps every event it receives."""

    def __init__(self):
        self.events: List[TokenEvent] = []

    def __call__(self, event: TokenEvent) -> None:
        self.events.append(event)
