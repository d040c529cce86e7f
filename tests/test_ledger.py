"""
test_ledger.py - Unit tests for ledger.py

Tests:
- Ledger creation and genesis allocation
- Read methods (balance_of, allowance, total_supply)
- execute(): validation, rejection without mutation, logging, notification
- verify_conservation()
- clone() and replay()
- verbose output
"""

import pytest

from token_ledger import (
    Ledger, Move, AllowanceChange, ExecuteResult,
    TransferEvent, ApprovalEvent, EventNotifier,
    build_transaction, compute_transfer, compute_approval, compute_transfer_from,
    ZERO_ADDRESS,
    LedgerError, InsufficientBalance, ZeroAddressTransfer,
    ZeroAddressApproval, SelfApproval, InvalidAmount,
)

from tests.helpers import EventRecorder, assert_invariants


class TestLedgerCreation:
    """Tests for Ledger initialization."""

    def test_create_ledger(self):
        ledger = Ledger("test", "alice", 1000, verbose=False)
        assert ledger.name == "test"
        assert ledger.verbose is False
        assert ledger.genesis_account == "alice"

    def test_genesis_account_holds_supply(self):
        ledger = Ledger("test", "alice", 1000, verbose=False)
        assert ledger.total_supply() == 1000
        assert ledger.balance_of("alice") == 1000
        assert ledger.get_balances() == {"alice": 1000}

    def test_zero_supply(self):
        ledger = Ledger("test", "alice", 0, verbose=False)
        assert ledger.total_supply() == 0
        assert ledger.get_balances() == {}
        assert_invariants(ledger)

    def test_genesis_account_cannot_be_zero_address(self):
        with pytest.raises(ValueError, match="zero address"):
            Ledger("test", ZERO_ADDRESS, 1000, verbose=False)

    def test_genesis_account_cannot_be_empty(self):
        with pytest.raises(ValueError):
            Ledger("test", "", 1000, verbose=False)

    def test_negative_supply_rejected(self):
        with pytest.raises(InvalidAmount):
            Ledger("test", "alice", -1, verbose=False)

    def test_default_notifier(self):
        ledger = Ledger("test", "alice", 1, verbose=False)
        assert isinstance(ledger.notifier, EventNotifier)


class TestReads:
    """Read methods never fail and never mutate."""

    def test_unknown_account_reads_zero(self, basic_ledger):
        assert basic_ledger.balance_of("nobody") == 0
        assert basic_ledger.balance_of(ZERO_ADDRESS) == 0
        assert "nobody" not in basic_ledger.balances

    def test_unknown_allowance_reads_zero(self, basic_ledger):
        assert basic_ledger.allowance("alice", "bob") == 0
        assert basic_ledger.get_allowances() == {}


class TestExecute:
    """Tests for execute()."""

    def test_apply_transfer(self, basic_ledger):
        result = basic_ledger.execute(compute_transfer(basic_ledger, "alice", "bob", 100))
        assert result == ExecuteResult.APPLIED
        assert basic_ledger.balance_of("alice") == 9_900
        assert basic_ledger.balance_of("bob") == 100
        assert len(basic_ledger.transaction_log) == 1
        assert_invariants(basic_ledger)

    def test_empty_transaction_is_noop(self, basic_ledger):
        result = basic_ledger.execute(build_transaction([]))
        assert result == ExecuteResult.NOOP
        assert basic_ledger.transaction_log == []

    def test_exec_id_format(self, basic_ledger):
        basic_ledger.execute(compute_transfer(basic_ledger, "alice", "bob", 1))
        tx = basic_ledger.transaction_log[0]
        assert tx.exec_id == "exec:test:000000000000"
        assert tx.ledger_name == "test"
        assert tx.sequence_number == 0

    def test_events_notified_after_apply(self, basic_ledger):
        seen_balances = []
        basic_ledger.notifier.subscribe(
            lambda event: seen_balances.append(basic_ledger.balance_of("bob"))
        )
        basic_ledger.execute(compute_transfer(basic_ledger, "alice", "bob", 100))
        assert seen_balances == [100]

    def test_rejects_move_to_zero_address(self, basic_ledger):
        pending = build_transaction([Move(10, "alice", ZERO_ADDRESS)])
        with pytest.raises(ZeroAddressTransfer):
            basic_ledger.execute(pending)
        assert basic_ledger.balance_of("alice") == 10_000

    def test_rejects_overdraft(self, basic_ledger):
        pending = build_transaction([Move(10_001, "alice", "bob")])
        with pytest.raises(InsufficientBalance):
            basic_ledger.execute(pending)
        assert basic_ledger.balance_of("alice") == 10_000
        assert basic_ledger.balance_of("bob") == 0

    def test_rejects_self_approval_change(self, basic_ledger):
        pending = build_transaction(
            [], allowance_changes=[AllowanceChange("alice", "alice", 0, 5)]
        )
        with pytest.raises(SelfApproval):
            basic_ledger.execute(pending)

    def test_rejects_zero_address_approval_change(self, basic_ledger):
        pending = build_transaction(
            [], allowance_changes=[AllowanceChange("alice", ZERO_ADDRESS, 0, 5)]
        )
        with pytest.raises(ZeroAddressApproval):
            basic_ledger.execute(pending)

    def test_rejects_stale_allowance_change(self, basic_ledger):
        stale = compute_approval(basic_ledger, "alice", "bob", 50)
        basic_ledger.execute(compute_approval(basic_ledger, "alice", "bob", 70))
        with pytest.raises(LedgerError, match="stale allowance"):
            basic_ledger.execute(stale)
        assert basic_ledger.allowance("alice", "bob") == 70

    def test_stale_transfer_rejected_against_live_balance(self, basic_ledger):
        first = compute_transfer(basic_ledger, "alice", "bob", 6_000)
        second = compute_transfer(basic_ledger, "alice", "carol", 6_000)
        basic_ledger.execute(first)
        with pytest.raises(InsufficientBalance):
            basic_ledger.execute(second)
        assert basic_ledger.balance_of("carol") == 0
        assert_invariants(basic_ledger)

    def test_multi_move_net_validation(self, basic_ledger):
        # bob has nothing, but receives before paying on net
        pending = build_transaction([
            Move(100, "bob", "carol"),
            Move(100, "alice", "bob"),
        ])
        basic_ledger.execute(pending)
        assert basic_ledger.balance_of("alice") == 9_900
        assert basic_ledger.balance_of("bob") == 0
        assert basic_ledger.balance_of("carol") == 100

    def test_failing_move_rolls_back_all(self, basic_ledger):
        recorder = EventRecorder()
        basic_ledger.notifier.subscribe(recorder)
        pending = build_transaction(
            [Move(100, "alice", "bob"), Move(50, "carol", "dave")],
            events=[TransferEvent("alice", "bob", 100)],
        )
        with pytest.raises(InsufficientBalance):
            basic_ledger.execute(pending)
        assert basic_ledger.balance_of("alice") == 10_000
        assert basic_ledger.balance_of("bob") == 0
        assert basic_ledger.transaction_log == []
        assert recorder.events == []

    def test_delegated_transfer_applies_all_parts(self, basic_ledger):
        basic_ledger.execute(compute_approval(basic_ledger, "alice", "bob", 500))
        basic_ledger.execute(compute_transfer_from(basic_ledger, "bob", "alice", "carol", 200))
        assert basic_ledger.allowance("alice", "bob") == 300
        assert basic_ledger.balance_of("alice") == 9_800
        assert basic_ledger.balance_of("carol") == 200
        assert basic_ledger.notifier.history == [
            ApprovalEvent("alice", "bob", 500),
            TransferEvent("alice", "carol", 200),
        ]

    def test_subscriber_error_propagates_after_commit(self, basic_ledger):
        def boom(event):
            raise RuntimeError("observer failed")

        basic_ledger.notifier.subscribe(boom)
        with pytest.raises(RuntimeError, match="observer failed"):
            basic_ledger.execute(compute_transfer(basic_ledger, "alice", "bob", 1))
        assert basic_ledger.balance_of("bob") == 1
        assert len(basic_ledger.transaction_log) == 1


class TestVerifyConservation:
    """Tests for verify_conservation()."""

    def test_valid_after_activity(self, basic_ledger):
        basic_ledger.execute(compute_transfer(basic_ledger, "alice", "bob", 2_500))
        basic_ledger.execute(compute_transfer(basic_ledger, "bob", "carol", 500))
        result = basic_ledger.verify_conservation()
        assert result['valid']
        assert result['sum_of_balances'] == 10_000
        assert result['total_supply'] == 10_000
        assert result['negative_balances'] == {}

    def test_detects_tampering(self, basic_ledger):
        basic_ledger.balances["mallory"] = 1
        result = basic_ledger.verify_conservation()
        assert not result['valid']
        assert result['sum_of_balances'] == 10_001

    def test_detects_negative_balance(self, basic_ledger):
        basic_ledger.balances["alice"] = 10_001
        basic_ledger.balances["bob"] = -1
        result = basic_ledger.verify_conservation()
        assert not result['valid']
        assert result['negative_balances'] == {"bob": -1}


class TestCloneAndReplay:
    """Tests for clone() and replay()."""

    def test_clone_is_independent(self, basic_ledger):
        basic_ledger.execute(compute_approval(basic_ledger, "alice", "bob", 5))
        cloned = basic_ledger.clone()
        cloned.execute(compute_transfer(cloned, "alice", "bob", 100))
        cloned.execute(compute_approval(cloned, "alice", "bob", 9))

        assert basic_ledger.balance_of("bob") == 0
        assert basic_ledger.allowance("alice", "bob") == 5
        assert len(basic_ledger.transaction_log) == 1
        assert cloned.balance_of("bob") == 100
        assert cloned.allowance("alice", "bob") == 9

    def test_clone_has_fresh_notifier(self, basic_ledger):
        recorder = EventRecorder()
        basic_ledger.notifier.subscribe(recorder)
        cloned = basic_ledger.clone()
        cloned.execute(compute_transfer(cloned, "alice", "bob", 1))
        assert recorder.events == []

    def test_replay_reproduces_state(self, basic_ledger):
        basic_ledger.execute(compute_transfer(basic_ledger, "alice", "bob", 1_000))
        basic_ledger.execute(compute_approval(basic_ledger, "bob", "carol", 400))
        basic_ledger.execute(compute_transfer_from(basic_ledger, "carol", "bob", "dave", 250))
        basic_ledger.execute(compute_transfer(basic_ledger, "alice", "eve", 0))

        replayed = basic_ledger.replay()

        assert replayed.name == "test_replayed"
        assert replayed.get_balances() == basic_ledger.get_balances()
        assert replayed.get_allowances() == basic_ledger.get_allowances()
        assert len(replayed.transaction_log) == 4
        assert replayed.notifier.history == basic_ledger.notifier.history

    def test_replay_fails_on_corrupt_log(self, basic_ledger):
        basic_ledger.execute(compute_transfer(basic_ledger, "alice", "bob", 1_000))
        tx = basic_ledger.transaction_log[0]
        # Eleven transfers of 1,000 overdraw alice's 10,000
        basic_ledger.transaction_log.extend([tx] * 10)
        with pytest.raises(LedgerError, match="Replay failed"):
            basic_ledger.replay()


class TestVerbose:
    """Tests for verbose output."""

    def test_applied_transaction_printed(self, capsys):
        ledger = Ledger("loud", "alice", 100, verbose=True)
        ledger.execute(compute_transfer(ledger, "alice", "bob", 10))
        out = capsys.readouterr().out
        assert "exec:loud:000000000000" in out
        assert "APPLIED" in out
        assert "Transfer(from=alice, to=bob, value=10)" in out

    def test_rejection_printed(self, capsys):
        ledger = Ledger("loud", "alice", 100, verbose=True)
        with pytest.raises(InsufficientBalance):
            ledger.execute(build_transaction([Move(101, "alice", "bob")]))
        out = capsys.readouterr().out
        assert "REJECTED: Not enough tokens" in out

    def test_quiet_ledger_prints_nothing(self, capsys, basic_ledger):
        basic_ledger.execute(compute_transfer(basic_ledger, "alice", "bob", 10))
        assert capsys.readouterr().out == ""
