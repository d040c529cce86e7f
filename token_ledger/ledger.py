"""
ledger.py - Stateful Single-Asset Token Ledger

The Ledger class is the central state manager for the token ledger.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Implements LedgerView protocol for safe read-only access by the engines
    - Executes transactions atomically (all changes succeed or none do)
    - Maintains balances, the allowance registry and the fixed total supply
    - Notifies events only after a transaction is fully applied
    - Always validates and always logs - no exceptions
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from .allowances import AllowanceRegistry
from .core import (
    # Types
    Account, BalanceMap, AllowanceMap,
    PendingTransaction, Transaction,
    ExecuteResult,
    # Constants
    ZERO_ADDRESS,
    # Exceptions
    LedgerError, InsufficientBalance, ZeroAddressTransfer,
    ZeroAddressApproval, SelfApproval,
    # Helper functions
    format_account, require_account, require_amount,
)
from .events import EventNotifier


class Ledger:
    """
    Balance and allowance store for one fungible asset, with full validation
    and an audit trail.

    Implements the LedgerView protocol, allowing the ledger to be passed to the
    pure engine functions, which access only read-only methods.

    Design Principles:
        - Always validates: every transaction is re-checked against live
          balances and allowances before anything is written.
        - Always logs: every applied transaction is recorded in the audit
          trail, enabling replay() for state reconstruction.
        - Conservation: the entire supply is credited to the genesis account
          at construction and only ever moves between accounts afterwards.

    Thread Safety:
        Not thread-safe. Each thread should maintain its own Ledger instance.

    Example:
        ledger = Ledger("MTKN", "alice", 1_000)
        pending = compute_transfer(ledger, "alice", "bob", 100)
        ledger.execute(pending)
        ledger.balance_of("bob")  # 100
    """

    def __init__(
        self,
        name: str,
        genesis_account: Account,
        total_supply: int,
        notifier: Optional[EventNotifier] = None,
        verbose: bool = True,
    ):
        """
        Create a ledger holding the whole supply in one account.

        Args:
            name: Ledger identifier
            genesis_account: Account credited with the entire supply
            total_supply: Fixed supply in base units
            notifier: Event notifier (default: a fresh EventNotifier)
            verbose: Enable debug output (default: True)

        Raises:
            ValueError: If genesis_account is invalid or the zero address
            InvalidAmount: If total_supply is not a valid amount
        """
        require_account(genesis_account, "genesis_account")
        if genesis_account is ZERO_ADDRESS:
            raise ValueError("genesis_account cannot be the zero address")
        require_amount(total_supply, "total_supply")

        self.name = name
        self.genesis_account = genesis_account
        self._total_supply = total_supply
        self.balances: BalanceMap = {genesis_account: total_supply}
        self.allowances = AllowanceRegistry()
        self.notifier = notifier if notifier is not None else EventNotifier()
        self.transaction_log: List[Transaction] = []
        self.verbose = verbose
        # Monotonic sequence counter for execution ordering
        self._next_sequence: int = 0

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    def balance_of(self, account: Account) -> int:
        """
        Get the balance of an account in base units.

        Never raises and never creates an entry: unknown accounts, including
        the zero address, read as 0.
        """
        return self.balances.get(account, 0)

    def allowance(self, owner: Account, spender: Account) -> int:
        """Get what spender may still move out of owner's balance."""
        return self.allowances.get(owner, spender)

    def total_supply(self) -> int:
        """The fixed total supply, in base units."""
        return self._total_supply

    def get_balances(self) -> BalanceMap:
        """Get all non-zero balances."""
        return {a: q for a, q in self.balances.items() if q != 0}

    def get_allowances(self) -> AllowanceMap:
        """Get every allowance entry that has been set."""
        return self.allowances.entries()

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Verify that the ledger invariants hold.

        Checks:
        - sum of all balances equals the total supply
        - no balance is negative
        - no allowance is negative

        Returns:
            Dict with keys:
            - 'valid': bool - True if every invariant holds
            - 'total_supply': int
            - 'sum_of_balances': int
            - 'negative_balances': Dict[Account, int]
            - 'negative_allowances': Dict[Tuple[Account, Account], int]

        Example:
            result = ledger.verify_conservation()
            assert result['valid'], result
        """
        sum_of_balances = sum(self.balances.values())
        negative_balances = {a: q for a, q in self.balances.items() if q < 0}
        negative_allowances = {k: v for k, v in self.allowances.entries().items() if v < 0}
        return {
            'valid': (sum_of_balances == self._total_supply
                      and not negative_balances and not negative_allowances),
            'total_supply': self._total_supply,
            'sum_of_balances': sum_of_balances,
            'negative_balances': negative_balances,
            'negative_allowances': negative_allowances,
        }

    # ========================================================================
    # TRANSACTION EXECUTION (Mutating)
    # ========================================================================

    def _generate_exec_id(self, sequence: int) -> str:
        """
        Generate a unique execution ID.

        Format: exec:{ledger_name}:{sequence:012d}
        """
        return f"exec:{self.name}:{sequence:012d}"

    def execute(self, pending: PendingTransaction) -> ExecuteResult:
        """
        Execute a PendingTransaction atomically.

        All changes succeed together or all fail together. Events are handed
        to the notifier only after every change has been applied.

        All transactions are fully validated against:
        - Destination validity (no transfer to the zero address)
        - Balance sufficiency (no balance may go negative)
        - Allowance entry rules and freshness

        Args:
            pending: PendingTransaction to execute

        Returns:
            ExecuteResult.APPLIED if successful
            ExecuteResult.NOOP if the transaction was empty

        Raises:
            LedgerError: The matching subclass if validation failed.
                         Nothing is mutated, logged or notified.
        """
        if pending.is_empty():
            return ExecuteResult.NOOP

        try:
            net = self._validate_pending(pending)
        except LedgerError as e:
            if self.verbose:
                print(f"✗ REJECTED: {e}")
            raise

        # Validation passed - nothing below can fail

        sequence = self._next_sequence
        self._next_sequence += 1

        tx = Transaction(
            moves=pending.moves,
            allowance_changes=pending.allowance_changes,
            events=pending.events,
            origin=pending.origin,
            exec_id=self._generate_exec_id(sequence),
            ledger_name=self.name,
            sequence_number=sequence,
        )

        self._apply_net_changes(net)
        for change in tx.allowance_changes:
            self.allowances._set(change.owner, change.spender, change.new_value)

        # Log transaction (always - audit trail is mandatory)
        self.transaction_log.append(tx)

        if self.verbose:
            self._print_tx_result(tx, "APPLIED", "✓")

        for event in tx.events:
            self.notifier.notify(event)
        return ExecuteResult.APPLIED

    def _print_tx_result(self, tx: Transaction, result: str, icon: str) -> None:
        """
        Print transaction details and result.

        Uses Transaction.__repr__ and appends a result line.
        """
        lines = repr(tx).split('\n')
        w = 100
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        # Replace the closing line with a result section
        lines[-1] = f"├{bar}┤"
        lines.append(f"│{pad(' ' + icon + ' ' + result)}│")
        lines.append(f"└{bar}┘")
        print("\n".join(lines))

    def _validate_pending(self, pending: PendingTransaction) -> Dict[Account, int]:
        """
        Validate a pending transaction against live state.

        Checks performed:
        1. No move targets the zero address
        2. Allowance changes name a real spender other than the owner and
           were computed against the current allowance
        3. Net balance change per account leaves every balance >= 0

        Returns:
            Net balance change per account

        Raises:
            ZeroAddressTransfer, ZeroAddressApproval, SelfApproval,
            InsufficientBalance, or LedgerError for a stale allowance
        """
        net: Dict[Account, int] = {}
        for move in pending.moves:
            if move.dest is ZERO_ADDRESS:
                raise ZeroAddressTransfer(f"{format_account(move.source)} → zero address")
            net[move.source] = net.get(move.source, 0) - move.quantity
            net[move.dest] = net.get(move.dest, 0) + move.quantity

        for change in pending.allowance_changes:
            if change.spender is ZERO_ADDRESS:
                raise ZeroAddressApproval(f"owner {format_account(change.owner)}")
            if change.spender == change.owner:
                raise SelfApproval(f"owner {format_account(change.owner)}")
            current = self.allowances.get(change.owner, change.spender)
            if current != change.old_value:
                raise LedgerError(
                    f"stale allowance for {format_account(change.owner)} → "
                    f"{format_account(change.spender)}: expected {change.old_value}, "
                    f"found {current}"
                )

        for account, delta in net.items():
            balance = self.balance_of(account)
            if balance + delta < 0:
                raise InsufficientBalance(
                    f"{format_account(account)} holds {balance}, needs {-delta}"
                )

        return net

    def _apply_net_changes(self, net: Dict[Account, int]) -> None:
        """
        Apply validated net balance changes.

        Debits go first so a credit can never mask a shortfall; accounts whose
        moves cancel out are left untouched.
        """
        for account, delta in net.items():
            if delta < 0:
                self._debit(account, -delta)
        for account, delta in net.items():
            if delta > 0:
                self._credit(account, delta)

    def _debit(self, account: Account, amount: int) -> None:
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalance(
                f"{format_account(account)} holds {balance}, needs {amount}"
            )
        self.balances[account] = balance - amount

    def _credit(self, account: Account, amount: int) -> None:
        self.balances[account] = self.balance_of(account) + amount

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> Ledger:
        """
        Create a deep copy of this ledger.

        All state is fully independent: modifications to the clone will not
        affect the original ledger, and vice versa. The clone gets a fresh
        notifier, so subscribers of the original are not called.

        Returns:
            A new Ledger instance with identical balances, allowances and log
        """
        cloned = Ledger.__new__(Ledger)
        cloned.name = self.name
        cloned.genesis_account = self.genesis_account
        cloned._total_supply = self._total_supply
        cloned.balances = dict(self.balances)
        cloned.allowances = self.allowances.copy()
        cloned.notifier = EventNotifier()
        cloned.transaction_log = list(self.transaction_log)
        cloned.verbose = self.verbose
        cloned._next_sequence = self._next_sequence
        return cloned

    def replay(self) -> Ledger:
        """
        Create a new ledger by replaying the transaction log.

        The replay process:
        1. Create a new ledger with the same genesis allocation
        2. Re-execute each logged transaction in order (full validation)

        Returns:
            New Ledger instance with replayed state

        Raises:
            LedgerError: If a logged transaction no longer applies
        """
        new_ledger = Ledger(
            name=f"{self.name}_replayed",
            genesis_account=self.genesis_account,
            total_supply=self._total_supply,
            verbose=self.verbose,
        )

        for tx in self.transaction_log:
            pending = PendingTransaction(
                moves=tx.moves,
                allowance_changes=tx.allowance_changes,
                events=tx.events,
                origin=tx.origin,
            )
            try:
                new_ledger.execute(pending)
            except LedgerError as e:
                raise LedgerError(f"Replay failed at tx {tx.exec_id}") from e

        return new_ledger
