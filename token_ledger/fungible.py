"""
fungible.py - Caller-facing Token

Token wires a Ledger, its EventNotifier and the three engines behind the
public operations of a fungible token. Mutating operations take the caller
explicitly; each either returns the executed Transaction (the receipt) or
raises a LedgerError subclass having changed nothing.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional, Union

from .approval import compute_approval
from .core import (
    Account, ZERO_ADDRESS, DEFAULT_DECIMALS,
    PendingTransaction, Transaction, TokenMetadata,
    parse_account, to_base_units,
)
from .delegated import compute_transfer_from
from .events import EventNotifier, Subscriber, TokenEvent
from .ledger import Ledger
from .transfer import compute_transfer


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Construction parameters for a Token.

    Attributes:
        name: Display name
        symbol: Ticker symbol
        decimals: Decimal count, immutable after construction
        initial_supply: Supply in display units, converted to base units as
                        initial_supply * 10**decimals
    """
    name: str
    symbol: str
    decimals: int = DEFAULT_DECIMALS
    initial_supply: Union[int, Decimal, str] = 0

    def __post_init__(self):
        # Raises ValueError / InvalidAmount early rather than at deploy time
        TokenMetadata(self.name, self.symbol, self.decimals)
        to_base_units(self.initial_supply, self.decimals)

    @property
    def metadata(self) -> TokenMetadata:
        return TokenMetadata(self.name, self.symbol, self.decimals)

    @property
    def base_supply(self) -> int:
        """Initial supply in base units."""
        return to_base_units(self.initial_supply, self.decimals)


# ============================================================================
# TOKEN
# ============================================================================

class Token:
    """
    Fixed-supply fungible token.

    The whole supply is credited to the deployer at construction.

    Example:
        token = Token.deploy("Mock Token", "MTKN", 18, 100000, "alice")
        token.transfer("alice", "bob", 5 * 10**18)
        token.approve("alice", "carol", 10**18)
        token.transfer_from("carol", "alice", "dave", 10**18)
    """

    def __init__(self, config: TokenConfig, deployer: Any, verbose: bool = True):
        """
        Create a token.

        Args:
            config: Construction parameters
            deployer: Account credited with the entire supply
            verbose: Print every applied or rejected transaction

        Raises:
            ValueError: If deployer is invalid or the zero address
        """
        deployer = parse_account(deployer)
        if deployer is ZERO_ADDRESS:
            raise ValueError("deployer cannot be the zero address")
        self.config = config
        self.metadata = config.metadata
        self.deployer = deployer
        self.notifier = EventNotifier()
        self.ledger = Ledger(
            name=config.symbol,
            genesis_account=deployer,
            total_supply=config.base_supply,
            notifier=self.notifier,
            verbose=verbose,
        )

    @classmethod
    def deploy(
        cls,
        name: str,
        symbol: str,
        decimals: int,
        initial_supply: Union[int, Decimal, str],
        deployer: Any,
        verbose: bool = True,
    ) -> Token:
        """Create a token from positional construction parameters."""
        return cls(TokenConfig(name, symbol, decimals, initial_supply), deployer, verbose=verbose)

    # ========================================================================
    # METADATA
    # ========================================================================

    def name(self) -> str:
        return self.metadata.name

    def symbol(self) -> str:
        return self.metadata.symbol

    def decimals(self) -> int:
        return self.metadata.decimals

    # ========================================================================
    # READS
    # ========================================================================

    def total_supply(self) -> int:
        return self.ledger.total_supply()

    def balance_of(self, account: Any) -> int:
        return self.ledger.balance_of(parse_account(account))

    def allowance(self, owner: Any, spender: Any) -> int:
        return self.ledger.allowance(parse_account(owner), parse_account(spender))

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def transfer(self, caller: Any, recipient: Any, amount: int) -> Transaction:
        """
        Move amount base units from caller to recipient.

        Raises:
            ZeroAddressTransfer, InsufficientBalance, InvalidAmount
        """
        sender = self._caller(caller)
        pending = compute_transfer(self.ledger, sender, parse_account(recipient), amount)
        return self._submit(pending)

    def approve(self, caller: Any, spender: Any, amount: int) -> Transaction:
        """
        Set the amount spender may move out of caller's balance.

        Raises:
            SelfApproval, ZeroAddressApproval, InvalidAmount
        """
        owner = self._caller(caller)
        pending = compute_approval(self.ledger, owner, parse_account(spender), amount)
        return self._submit(pending)

    def transfer_from(self, caller: Any, owner: Any, recipient: Any, amount: int) -> Transaction:
        """
        Move amount base units from owner to recipient, spending caller's
        allowance over owner's balance.

        Raises:
            InsufficientAllowance, InsufficientBalance, ZeroAddressTransfer,
            InvalidAmount
        """
        spender = self._caller(caller)
        pending = compute_transfer_from(
            self.ledger, spender, parse_account(owner), parse_account(recipient), amount
        )
        return self._submit(pending)

    def _caller(self, caller: Any) -> Account:
        account = parse_account(caller)
        if account is ZERO_ADDRESS:
            raise ValueError("caller cannot be the zero address")
        return account

    def _submit(self, pending: PendingTransaction) -> Transaction:
        # Every pending transaction from the engines carries an event, so it
        # is never empty and always lands in the log.
        self.ledger.execute(pending)
        return self.ledger.transaction_log[-1]

    # ========================================================================
    # OBSERVERS AND AUDIT
    # ========================================================================

    def subscribe(self, callback: Subscriber, event_type: Optional[str] = None) -> int:
        return self.notifier.subscribe(callback, event_type)

    def unsubscribe(self, token: int) -> None:
        self.notifier.unsubscribe(token)

    @property
    def events(self) -> List[TokenEvent]:
        """Every event emitted so far, in emission order."""
        return list(self.notifier.history)

    @property
    def transaction_log(self) -> List[Transaction]:
        return list(self.ledger.transaction_log)

    def __repr__(self) -> str:
        return (f"Token({self.metadata.name!r}, {self.metadata.symbol!r}, "
                f"decimals={self.metadata.decimals}, total_supply={self.total_supply()})")
