"""
Core types and pure functions for the token ledger.

This module provides the foundational data structures and protocols for the ledger:
1. Sentinel: the ZERO_ADDRESS "no account" value and account intake helpers
2. Protocols: LedgerView for read-only ledger access
3. Immutable data structures: Move, AllowanceChange, PendingTransaction, Transaction
4. Exceptions: LedgerError and the rejection taxonomy
5. Amount validation and base-unit conversion

All functions in this module are pure and operate on read-only views.
No function can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import (
    Any, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from .events import TokenEvent


# ============================================================================
# CONSTANTS
# ============================================================================

# Amounts are unsigned 256-bit integers.
MAX_UINT256 = 2**256 - 1

# 10**77 is the largest power of ten that still fits in MAX_UINT256.
MAX_DECIMALS = 77

DEFAULT_DECIMALS = 18

# Conventional textual form of the "no account" identity. Only accepted at
# intake (parse_account); internally the Sentinel enum is used.
ZERO_ADDRESS_HEX = "0x" + "0" * 40

# Precision large enough to scale any uint256 by 10**MAX_DECIMALS exactly.
_CONVERSION_PRECISION = 200


# ============================================================================
# SENTINEL AND ACCOUNTS
# ============================================================================

class Sentinel(Enum):
    """
    Reserved identities that are not real accounts.

    ZERO_ADDRESS stands for "no account". It is never a valid transfer
    destination or approval spender, and it cannot collide with any string
    account identifier.
    """
    ZERO_ADDRESS = "zero_address"

    def __repr__(self) -> str:
        return self.name


ZERO_ADDRESS = Sentinel.ZERO_ADDRESS

# An account is an opaque string identifier or the ZERO_ADDRESS sentinel.
Account = Union[str, Sentinel]

# Mapping from account to balance in base units.
BalanceMap = Dict[Account, int]

# Mapping from (owner, spender) to remaining allowance in base units.
AllowanceMap = Dict[Tuple[Account, Account], int]


def is_zero_address(account: Account) -> bool:
    """Return True if account is the ZERO_ADDRESS sentinel."""
    return account is ZERO_ADDRESS


def require_account(account: Account, role: str = "account") -> Account:
    """
    Validate an account identifier.

    Raises:
        ValueError: If account is neither a non-empty string nor the sentinel.
    """
    if account is ZERO_ADDRESS:
        return account
    if not isinstance(account, str) or not account.strip():
        raise ValueError(f"{role} must be a non-empty string, got {account!r}")
    return account


def parse_account(raw: Any) -> Account:
    """
    Convert an externally supplied identifier into an Account.

    The textual zero address (0x followed by forty zeros, any case) maps to
    the ZERO_ADDRESS sentinel; every other non-empty string passes through
    unchanged.
    """
    if raw is ZERO_ADDRESS:
        return raw
    account = require_account(raw)
    if account.lower() == ZERO_ADDRESS_HEX:
        return ZERO_ADDRESS
    return account


def format_account(account: Account) -> str:
    """Render an account for display."""
    return ZERO_ADDRESS_HEX if account is ZERO_ADDRESS else str(account)


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to ledger state.

    The transfer, approval and delegated-transfer engines receive a LedgerView
    and can only query state through it. The Ledger class implements this
    protocol; tests use FakeView.
    """

    def balance_of(self, account: Account) -> int:
        """Return the balance of account in base units (0 if unknown)."""
        ...

    def allowance(self, owner: Account, spender: Account) -> int:
        """Return what spender may still move out of owner's balance."""
        ...

    def total_supply(self) -> int:
        """Return the fixed total supply in base units."""
        ...


# ============================================================================
# ENUMS
# ============================================================================

class ExecuteResult(Enum):
    """
    Outcome of a transaction execution attempt.

    APPLIED: Transaction was validated and applied to the ledger.
    NOOP: Transaction carried nothing to apply and was not logged.

    Rejections are not a result value: they raise a LedgerError subclass.
    """
    APPLIED = "applied"
    NOOP = "noop"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """
    Base exception for all ledger-related errors.

    Every subclass carries a stable ``reason``; ``str(exc)`` starts with it
    and optionally appends a detail after ``": "``.
    """
    reason = "Ledger error"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.reason}: {detail}" if detail else self.reason)


class InsufficientBalance(LedgerError):
    """Raised when a debit would make a balance negative."""
    reason = "Not enough tokens"


class InsufficientAllowance(LedgerError):
    """Raised when a delegated spend exceeds the remaining allowance."""
    reason = "Not enough allowance"


class ZeroAddressTransfer(LedgerError):
    """Raised when the destination of a transfer is the ZERO_ADDRESS sentinel."""
    reason = "Transfer of tokens to zero address is not allowed"


class ZeroAddressApproval(LedgerError):
    """Raised when the spender of an approval is the ZERO_ADDRESS sentinel."""
    reason = "Approval of tokens to zero address is not allowed"


class SelfApproval(LedgerError):
    """Raised when an owner tries to approve itself as spender."""
    reason = "_spender and _owner cannot be a same address"


class InvalidAmount(LedgerError, ValueError):
    """Raised when an amount is not an integer in [0, MAX_UINT256]."""
    reason = "Amount must be an integer between 0 and 2**256 - 1"


# ============================================================================
# AMOUNTS AND UNITS
# ============================================================================

def require_amount(amount: Any, name: str = "amount") -> int:
    """
    Validate a base-unit amount.

    Args:
        amount: Candidate amount
        name: Label used in the error detail

    Returns:
        The amount, unchanged

    Raises:
        InvalidAmount: If amount is not an int (bool excluded) in [0, MAX_UINT256]
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"{name}={amount!r} is not an integer")
    if amount < 0 or amount > MAX_UINT256:
        raise InvalidAmount(f"{name}={amount} is out of range")
    return amount


def require_decimals(decimals: Any) -> int:
    """
    Validate a decimal count.

    Raises:
        ValueError: If decimals is not an int in [0, MAX_DECIMALS]
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise ValueError(f"decimals must be an integer, got {decimals!r}")
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise ValueError(f"decimals must be between 0 and {MAX_DECIMALS}, got {decimals}")
    return decimals


def to_base_units(display_amount: Union[int, Decimal, str], decimals: int) -> int:
    """
    Convert a display amount into base units (display * 10**decimals).

    Args:
        display_amount: Amount in display units (int, Decimal or decimal string)
        decimals: Decimal count of the token

    Returns:
        Amount in base units

    Raises:
        InvalidAmount: If the amount is negative, not a number, finer than one
                       base unit, or larger than MAX_UINT256 once scaled

    Example:
        to_base_units("1.5", 18)  # 1500000000000000000
    """
    require_decimals(decimals)
    if isinstance(display_amount, bool):
        raise InvalidAmount(f"display amount {display_amount!r} is not a number")
    if isinstance(display_amount, (int, Decimal)):
        value = Decimal(display_amount)
    elif isinstance(display_amount, str):
        try:
            value = Decimal(display_amount.strip())
        except InvalidOperation:
            raise InvalidAmount(f"display amount {display_amount!r} is not a number") from None
    else:
        raise InvalidAmount(f"display amount {display_amount!r} is not a number")

    if not value.is_finite() or value < 0:
        raise InvalidAmount(f"display amount {display_amount!r} must be finite and non-negative")

    if value.is_zero():
        return 0
    # 10**78 > MAX_UINT256, so anything this large cannot fit once scaled
    if value.adjusted() + decimals > MAX_DECIMALS:
        raise InvalidAmount(f"display amount {display_amount!r} exceeds MAX_UINT256 once scaled")

    # Exact scaling on the coefficient: no context precision, no rounding
    _, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits)))
    shift = exponent + decimals
    if shift >= 0:
        base = coefficient * 10 ** shift
    elif -shift > len(digits) or coefficient % 10 ** -shift:
        raise InvalidAmount(
            f"display amount {display_amount!r} is finer than one base unit "
            f"at {decimals} decimals"
        )
    else:
        base = coefficient // 10 ** -shift
    return require_amount(base, "base amount")


def from_base_units(amount: int, decimals: int) -> Decimal:
    """Convert a base-unit amount into display units."""
    require_amount(amount)
    require_decimals(decimals)
    with localcontext() as ctx:
        ctx.prec = _CONVERSION_PRECISION
        return Decimal(amount).scaleb(-decimals)


# ============================================================================
# METADATA
# ============================================================================

@dataclass(frozen=True, slots=True)
class TokenMetadata:
    """
    Immutable descriptive data fixed at construction.

    Attributes:
        name: Display name (e.g., "Mock Token")
        symbol: Ticker symbol (e.g., "MTKN")
        decimals: Number of decimals between display and base units
    """
    name: str
    symbol: str
    decimals: int = DEFAULT_DECIMALS

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Token name cannot be empty")
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise ValueError("Token symbol cannot be empty")
        require_decimals(self.decimals)


# ============================================================================
# TRANSACTION ORIGIN
# ============================================================================

@dataclass(frozen=True, slots=True)
class TransactionOrigin:
    """
    Record of which public operation produced a transaction and who called it.

    Attributes:
        operation: "transfer", "approve" or "transfer_from"
        caller: The implicit caller (sender, owner or spender respectively)
    """
    operation: str
    caller: Account

    def __repr__(self) -> str:
        return f"Origin({self.operation}:{format_account(self.caller)})"


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Move:
    """
    A single transfer of base units between two accounts.

    Attributes:
        quantity: Base units to move (positive integer)
        source: Account debited
        dest: Account credited

    Moves with source == dest are allowed; they net to zero when applied.
    A ZERO_ADDRESS dest is representable here and rejected by the ledger.
    """
    quantity: int
    source: Account
    dest: Account

    def __post_init__(self):
        require_amount(self.quantity, "quantity")
        if self.quantity == 0:
            raise ValueError("Move quantity is zero")
        require_account(self.source, "Move source")
        require_account(self.dest, "Move dest")
        if self.source is ZERO_ADDRESS:
            raise ValueError("Move source cannot be the zero address")

    def __repr__(self) -> str:
        return f"Move({self.quantity}: {format_account(self.source)}→{format_account(self.dest)})"


@dataclass(frozen=True, slots=True)
class AllowanceChange:
    """
    Record of an allowance entry change.

    Stores both values so the ledger can check that old_value still matches
    live state before applying new_value.
    """
    owner: Account
    spender: Account
    old_value: int
    new_value: int

    def __post_init__(self):
        require_account(self.owner, "owner")
        require_account(self.spender, "spender")
        require_amount(self.old_value, "old_value")
        require_amount(self.new_value, "new_value")

    @property
    def delta(self) -> int:
        return self.new_value - self.old_value


@dataclass(frozen=True, slots=True)
class PendingTransaction:
    """
    A transaction description before execution - represents INTENT.

    Created by the engines and submitted to Ledger.execute(). Every mutation
    and event an operation needs is staged here, so nothing touches the
    ledger until the whole transaction has been validated.

    Attributes:
        moves: Balance movements
        allowance_changes: Allowance entry overwrites
        events: Notifications to deliver once the transaction is applied
        origin: Operation and caller
    """
    moves: Tuple[Move, ...]
    allowance_changes: Tuple[AllowanceChange, ...]
    events: Tuple['TokenEvent', ...]
    origin: TransactionOrigin

    def is_empty(self) -> bool:
        """Return True if there is nothing to apply and nothing to notify."""
        return not self.moves and not self.allowance_changes and not self.events

    def __repr__(self) -> str:
        return (f"PendingTransaction({len(self.moves)} moves, "
                f"{len(self.allowance_changes)} allowance changes, "
                f"{len(self.events)} events, {self.origin})")


def build_transaction(
    moves: List[Move],
    allowance_changes: Optional[List[AllowanceChange]] = None,
    events: Optional[List['TokenEvent']] = None,
    origin: Optional[TransactionOrigin] = None,
) -> PendingTransaction:
    """
    Build a PendingTransaction from staged moves, allowance changes and events.

    This is the standard way to create transactions.

    Example:
        pending = build_transaction(
            [Move(100, "alice", "bob")],
            events=[TransferEvent("alice", "bob", 100)],
            origin=TransactionOrigin("transfer", "alice"),
        )
        ledger.execute(pending)
    """
    if origin is None:
        origin = TransactionOrigin(operation="system", caller="system")
    return PendingTransaction(
        moves=tuple(moves),
        allowance_changes=tuple(allowance_changes or ()),
        events=tuple(events or ()),
        origin=origin,
    )


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An executed, immutable record of ledger state changes - represents FACT.

    Created by the ledger when executing a PendingTransaction. Returned to
    callers of the public operations as the receipt of the call.

    Attributes:
        moves: Balance movements applied
        allowance_changes: Allowance overwrites applied
        events: Notifications delivered after the changes were applied
        origin: Operation and caller
        exec_id: Unique execution identifier (ledger + sequence)
        ledger_name: Name of the ledger that executed this
        sequence_number: Monotonic sequence within the ledger
    """
    moves: Tuple[Move, ...]
    allowance_changes: Tuple[AllowanceChange, ...]
    events: Tuple['TokenEvent', ...]
    origin: TransactionOrigin
    exec_id: str
    ledger_name: str
    sequence_number: int

    def __repr__(self) -> str:
        w = 100  # Inner content width
        bar = "─" * w

        def pad(text: str) -> str:
            """Pad or truncate text to exactly w characters."""
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        lines = [
            "",
            f"┌{bar}┐",
            f"│{pad(' Transaction: ' + self.exec_id)}│",
            f"├{bar}┤",
            f"│{pad('   ledger_name    : ' + self.ledger_name)}│",
            f"│{pad('   sequence       : ' + str(self.sequence_number))}│",
            f"│{pad('   origin         : ' + repr(self.origin))}│",
            f"├{bar}┤",
            f"│{pad(' Moves (' + str(len(self.moves)) + '):')}│",
        ]
        for i, move in enumerate(self.moves):
            move_str = (f"   [{i}] {move.quantity}: "
                        f"{format_account(move.source)} → {format_account(move.dest)}")
            lines.append(f"│{pad(move_str)}│")
        if self.allowance_changes:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Allowance Changes (' + str(len(self.allowance_changes)) + '):')}│")
            for ac in self.allowance_changes:
                ac_str = (f"   {format_account(ac.owner)} → {format_account(ac.spender)}: "
                          f"{ac.old_value} → {ac.new_value}")
                lines.append(f"│{pad(ac_str)}│")
        if self.events:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Events (' + str(len(self.events)) + '):')}│")
            for event in self.events:
                lines.append(f"│{pad('   ' + repr(event))}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)
