"""
transfer.py - Direct Transfers

Pure function that validates a direct balance movement and returns the
PendingTransaction that applies it. Nothing here mutates the ledger.
"""

from __future__ import annotations
from typing import List

from .core import (
    Account, LedgerView, Move, PendingTransaction, TransactionOrigin,
    ZERO_ADDRESS, InsufficientBalance, ZeroAddressTransfer,
    build_transaction, format_account, require_account, require_amount,
)
from .events import TransferEvent


def compute_transfer(
    view: LedgerView,
    sender: Account,
    recipient: Account,
    amount: int,
) -> PendingTransaction:
    """
    Stage a transfer of amount base units from sender to recipient.

    Checks, in order:
    1. amount is a valid base-unit quantity
    2. recipient is not the zero address
    3. sender holds at least amount

    A zero amount is a valid transfer: no move is staged but the Transfer
    event still is. sender == recipient is not special-cased.

    Args:
        view: Read-only ledger view
        sender: Account whose balance is debited (the caller)
        recipient: Account credited
        amount: Base units to move

    Returns:
        PendingTransaction with at most one move and one TransferEvent

    Raises:
        InvalidAmount: If amount is not a valid quantity
        ZeroAddressTransfer: If recipient is the zero address
        InsufficientBalance: If sender's balance is below amount
    """
    require_amount(amount)
    require_account(sender, "sender")
    require_account(recipient, "recipient")

    if recipient is ZERO_ADDRESS:
        raise ZeroAddressTransfer(f"{format_account(sender)} → zero address")

    balance = view.balance_of(sender)
    if balance < amount:
        raise InsufficientBalance(
            f"{format_account(sender)} holds {balance}, needs {amount}"
        )

    moves: List[Move] = []
    if amount > 0:
        moves.append(Move(amount, sender, recipient))

    return build_transaction(
        moves,
        events=[TransferEvent(sender, recipient, amount)],
        origin=TransactionOrigin("transfer", sender),
    )
