"""
delegated.py - Delegated Transfers

Pure function that validates a transfer made by a spender out of an owner's
balance under an allowance, and returns the PendingTransaction that spends
the allowance and moves the funds together.

Check order determines which rejection a caller sees: allowance first, then
balance, then destination. A caller without enough allowance always gets
InsufficientAllowance, even when the destination is also invalid.
"""

from __future__ import annotations
from typing import List

from .core import (
    Account, LedgerView, Move, AllowanceChange, PendingTransaction,
    TransactionOrigin, ZERO_ADDRESS,
    InsufficientAllowance, InsufficientBalance, ZeroAddressTransfer,
    build_transaction, format_account, require_account, require_amount,
)
from .events import TransferEvent


def compute_transfer_from(
    view: LedgerView,
    spender: Account,
    owner: Account,
    recipient: Account,
    amount: int,
) -> PendingTransaction:
    """
    Stage a delegated transfer of amount base units from owner to recipient.

    Args:
        view: Read-only ledger view
        spender: The caller, spending its allowance
        owner: Account whose funds move
        recipient: Account credited
        amount: Base units to move

    Returns:
        PendingTransaction with the allowance decrement, the move (if amount
        is non-zero) and a TransferEvent(owner, recipient, amount)

    Raises:
        InvalidAmount: If amount is not a valid quantity
        InsufficientAllowance: If allowance(owner, spender) < amount
        InsufficientBalance: If owner's balance is below amount
        ZeroAddressTransfer: If recipient is the zero address
    """
    require_amount(amount)
    require_account(spender, "spender")
    require_account(owner, "owner")
    require_account(recipient, "recipient")

    allowance = view.allowance(owner, spender)
    if allowance < amount:
        raise InsufficientAllowance(
            f"{format_account(spender)} may spend {allowance} of "
            f"{format_account(owner)}'s tokens, needs {amount}"
        )

    balance = view.balance_of(owner)
    if balance < amount:
        raise InsufficientBalance(
            f"{format_account(owner)} holds {balance}, needs {amount}"
        )

    if recipient is ZERO_ADDRESS:
        raise ZeroAddressTransfer(f"{format_account(owner)} → zero address")

    moves: List[Move] = []
    allowance_changes: List[AllowanceChange] = []
    if amount > 0:
        moves.append(Move(amount, owner, recipient))
        allowance_changes.append(AllowanceChange(
            owner=owner,
            spender=spender,
            old_value=allowance,
            new_value=allowance - amount,
        ))

    return build_transaction(
        moves,
        allowance_changes=allowance_changes,
        events=[TransferEvent(owner, recipient, amount)],
        origin=TransactionOrigin("transfer_from", spender),
    )
