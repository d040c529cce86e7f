"""
token_ledger - Fixed-Supply Fungible Token Ledger

Tracks ownership of a fixed supply of divisible units across accounts, with
direct transfers and delegated (allowance-based) transfers. Every operation is
validated, applied atomically, logged, and only then announced to observers.

Usage:
    from token_ledger import Token, ZERO_ADDRESS, InsufficientBalance

    token = Token.deploy("Mock Token", "MTKN", 18, 100000, "alice", verbose=False)
    token.subscribe(print, "Transfer")

    receipt = token.transfer("alice", "bob", 5000 * 10**18)
    receipt.events  # (Transfer(from=alice, to=bob, value=5000000000000000000000),)

    token.approve("alice", "carol", 2000 * 10**18)
    token.transfer_from("carol", "alice", "dave", 750 * 10**18)
    token.allowance("alice", "carol")  # 1250 * 10**18

Lower level, the engines are pure functions over a read-only LedgerView:
    from token_ledger import Ledger, compute_transfer

    ledger = Ledger("MTKN", "alice", 1_000, verbose=False)
    ledger.execute(compute_transfer(ledger, "alice", "bob", 100))
"""

# Core types
from .core import (
    LedgerView,
    Sentinel,
    Account,
    Move,
    AllowanceChange,
    PendingTransaction,
    Transaction,
    TransactionOrigin,
    TokenMetadata,
    ExecuteResult,
    build_transaction,
    LedgerError,
    InsufficientBalance,
    InsufficientAllowance,
    ZeroAddressTransfer,
    ZeroAddressApproval,
    SelfApproval,
    InvalidAmount,
    ZERO_ADDRESS,
    ZERO_ADDRESS_HEX,
    MAX_UINT256,
    MAX_DECIMALS,
    DEFAULT_DECIMALS,
    is_zero_address,
    parse_account,
    format_account,
    require_amount,
    to_base_units,
    from_base_units,
)

# Events
from .events import (
    TransferEvent,
    ApprovalEvent,
    TokenEvent,
    EventNotifier,
    EVENT_TRANSFER,
    EVENT_APPROVAL,
)

# State
from .allowances import AllowanceRegistry
from .ledger import Ledger

# Engines
from .transfer import compute_transfer
from .approval import compute_approval
from .delegated import compute_transfer_from

# Token
from .fungible import Token, TokenConfig

__all__ = [
    # Core
    'LedgerView', 'Sentinel', 'Account',
    'Move', 'AllowanceChange', 'PendingTransaction', 'Transaction', 'TransactionOrigin',
    'TokenMetadata', 'ExecuteResult', 'build_transaction',
    'LedgerError', 'InsufficientBalance', 'InsufficientAllowance',
    'ZeroAddressTransfer', 'ZeroAddressApproval', 'SelfApproval', 'InvalidAmount',
    'ZERO_ADDRESS', 'ZERO_ADDRESS_HEX', 'MAX_UINT256', 'MAX_DECIMALS', 'DEFAULT_DECIMALS',
    'is_zero_address', 'parse_account', 'format_account', 'require_amount',
    'to_base_units', 'from_base_units',
    # Events
    'TransferEvent', 'ApprovalEvent', 'TokenEvent', 'EventNotifier',
    'EVENT_TRANSFER', 'EVENT_APPROVAL',
    # State
    'AllowanceRegistry', 'Ledger',
    # Engines
    'compute_transfer', 'compute_approval', 'compute_transfer_from',
    # Token
    'Token', 'TokenConfig',
]

__version__ = '1.0.0'
