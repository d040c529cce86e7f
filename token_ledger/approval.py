"""
approval.py - Allowance Approvals

Pure function that validates an approval and returns the PendingTransaction
that overwrites the (owner, spender) allowance entry.
"""

from __future__ import annotations

from .core import (
    Account, LedgerView, AllowanceChange, PendingTransaction, TransactionOrigin,
    ZERO_ADDRESS, SelfApproval, ZeroAddressApproval,
    build_transaction, format_account, require_account, require_amount,
)
from .events import ApprovalEvent


def compute_approval(
    view: LedgerView,
    owner: Account,
    spender: Account,
    amount: int,
) -> PendingTransaction:
    """
    Stage setting allowance(owner, spender) to exactly amount.

    The new value replaces any previous one; it is not added to it. Approving
    the same value again is still a full approval and emits its event again.

    Raises:
        InvalidAmount: If amount is not a valid quantity
        SelfApproval: If spender == owner
        ZeroAddressApproval: If spender is the zero address
    """
    require_amount(amount)
    require_account(owner, "owner")
    require_account(spender, "spender")

    if spender == owner:
        raise SelfApproval(f"owner {format_account(owner)}")
    if spender is ZERO_ADDRESS:
        raise ZeroAddressApproval(f"owner {format_account(owner)}")

    change = AllowanceChange(
        owner=owner,
        spender=spender,
        old_value=view.allowance(owner, spender),
        new_value=amount,
    )
    return build_transaction(
        [],
        allowance_changes=[change],
        events=[ApprovalEvent(owner, spender, amount)],
        origin=TransactionOrigin("approve", owner),
    )
