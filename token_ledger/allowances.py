"""
allowances.py - Allowance Registry

Durable mapping from (owner, spender) to the quantity spender may still move
out of owner's balance. Unknown pairs read as zero. Entries are only written
by Ledger.execute() while applying an AllowanceChange.
"""

from __future__ import annotations
from typing import Dict, Tuple

from .core import Account, AllowanceMap, require_amount


class AllowanceRegistry:
    """
    Remaining delegated-spend quantities keyed by (owner, spender).

    Reads never create entries. Writes are absolute (overwrite).
    """

    def __init__(self, entries: AllowanceMap = None):
        self._allowances: Dict[Tuple[Account, Account], int] = dict(entries or {})

    def get(self, owner: Account, spender: Account) -> int:
        """Return the remaining allowance (0 for unknown pairs)."""
        return self._allowances.get((owner, spender), 0)

    def _set(self, owner: Account, spender: Account, value: int) -> None:
        require_amount(value, "allowance")
        self._allowances[(owner, spender)] = value

    def entries(self) -> AllowanceMap:
        """Return a copy of every recorded entry, zero entries included."""
        return dict(self._allowances)

    def copy(self) -> AllowanceRegistry:
        return AllowanceRegistry(self._allowances)

    def __repr__(self) -> str:
        return f"AllowanceRegistry({len(self._allowances)} entries)"
