#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Token Ledger Step by Step

A pedagogical walkthrough of a fixed-supply fungible token. Each step builds
on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3: Foundation   - Deployment, base units, the first transfer
  4-5: Rejections   - Overdrafts and the zero address, state unchanged
  6-7: Delegation   - Approvals, overwrite semantics, transfer_from
  8-9: Audit        - Events, the transaction log, replay, conservation

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from token_ledger import (
    Token, TokenConfig, ZERO_ADDRESS, LedgerError,
    EVENT_TRANSFER, from_base_units,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    name: str = "Mock Token"
    symbol: str = "MTKN"
    decimals: int = 18
    initial_supply: int = 100_000

    # Display units moved in each step
    first_transfer: int = 300
    approval: int = 2_000
    reapproval: int = 1_000
    delegated_spend: int = 750

    # Print every applied or rejected transaction as it happens
    verbose: bool = False


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv

DEPLOYER = "0x1111111111111111111111111111111111111111"
RECEIVER = "0x2222222222222222222222222222222222222222"
SPENDER = "0x3333333333333333333333333333333333333333"


def units(n: int) -> int:
    """Display units to base units for the configured decimals."""
    return n * 10 ** CONFIG.decimals


def show(token: Token, amount: int) -> str:
    return f"{from_base_units(amount, token.decimals())} {token.symbol()}"


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    """Print a step header with learning objective."""
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    """Print a section header within a step."""
    print(f"\n--- {text} ---\n")


def print_balances(token: Token):
    for label, account in (("Deployer", DEPLOYER), ("Receiver", RECEIVER), ("Spender", SPENDER)):
        print(f"{label:<10} {show(token, token.balance_of(account))}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_deploy():
    step_header(1, "Deploying a Token",
        "The entire supply is credited to the deployer. It never grows or shrinks.")

    config = TokenConfig(CONFIG.name, CONFIG.symbol, CONFIG.decimals, CONFIG.initial_supply)
    print(f">>> token = Token(TokenConfig({config.name!r}, {config.symbol!r}, "
          f"{config.decimals}, {config.initial_supply}), DEPLOYER)")
    token = Token(config, DEPLOYER, verbose=CONFIG.verbose)

    section_header("Metadata")
    print(f"Name:         {token.name()}")
    print(f"Symbol:       {token.symbol()}")
    print(f"Decimals:     {token.decimals()}")
    print(f"Total supply: {token.total_supply()} base units")

    section_header("Balances")
    print_balances(token)

    wait_for_enter()
    return token


def step_02_base_units(token: Token):
    step_header(2, "Base Units",
        "Amounts are integers in base units. Decimals only affect display.")

    print(f"""
    With decimals = {token.decimals()}, one {token.symbol()} is 10**{token.decimals()} base units.
    {CONFIG.initial_supply} display units = {token.total_supply()} base units.

    Every operation takes base units. There is no fractional base unit.
    """)

    wait_for_enter()
    return token


def step_03_first_transfer(token: Token):
    step_header(3, "Your First Transfer",
        "transfer() moves value and returns the executed Transaction as a receipt.")

    print(f">>> receipt = token.transfer(DEPLOYER, RECEIVER, units({CONFIG.first_transfer}))")
    receipt = token.transfer(DEPLOYER, RECEIVER, units(CONFIG.first_transfer))

    section_header("Receipt")
    print(receipt)

    section_header("Balances")
    print_balances(token)

    wait_for_enter()
    return token


# ============================================================================
# PHASE 2: REJECTIONS (Steps 4-5)
# ============================================================================

def step_04_overdraft(token: Token):
    step_header(4, "Rejected Overdraft",
        "An operation that would overdraw an account changes nothing.")

    print(">>> token.transfer(RECEIVER, SPENDER, units(1_000_000))")
    before = token.ledger.get_balances()
    try:
        token.transfer(RECEIVER, SPENDER, units(1_000_000))
    except LedgerError as e:
        print(f"Rejected: {type(e).__name__}: {e}")

    print(f"\nState unchanged: {token.ledger.get_balances() == before}")

    wait_for_enter()
    return token


def step_05_zero_address(token: Token):
    step_header(5, "The Zero Address",
        "Tokens cannot be sent to, or approved for, the zero address.")

    for label, call in (
        ("transfer", lambda: token.transfer(DEPLOYER, ZERO_ADDRESS, 1)),
        ("approve", lambda: token.approve(DEPLOYER, ZERO_ADDRESS, 1)),
    ):
        try:
            call()
        except LedgerError as e:
            print(f"{label:<10} rejected: {e.reason}")

    wait_for_enter()
    return token


# ============================================================================
# PHASE 3: DELEGATION (Steps 6-7)
# ============================================================================

def step_06_approve(token: Token):
    step_header(6, "Approvals",
        "approve() SETS an allowance. A second approval replaces the first.")

    token.approve(DEPLOYER, SPENDER, units(CONFIG.approval))
    print(f"After approve({CONFIG.approval}):   "
          f"{show(token, token.allowance(DEPLOYER, SPENDER))}")
    token.approve(DEPLOYER, SPENDER, units(CONFIG.reapproval))
    print(f"After approve({CONFIG.reapproval}):   "
          f"{show(token, token.allowance(DEPLOYER, SPENDER))}")

    wait_for_enter()
    return token


def step_07_transfer_from(token: Token):
    step_header(7, "Delegated Transfers",
        "transfer_from() spends the caller's allowance over the owner's balance.")

    print(f">>> token.transfer_from(SPENDER, DEPLOYER, RECEIVER, units({CONFIG.delegated_spend}))")
    token.transfer_from(SPENDER, DEPLOYER, RECEIVER, units(CONFIG.delegated_spend))

    section_header("After")
    print_balances(token)
    print(f"\nRemaining allowance: {show(token, token.allowance(DEPLOYER, SPENDER))}")

    section_header("Overspending")
    try:
        token.transfer_from(SPENDER, DEPLOYER, RECEIVER, units(CONFIG.reapproval))
    except LedgerError as e:
        print(f"Rejected: {e}")

    wait_for_enter()
    return token


# ============================================================================
# PHASE 4: AUDIT (Steps 8-9)
# ============================================================================

def step_08_events(token: Token):
    step_header(8, "Events",
        "Every successful operation emits exactly one event, after it is applied.")

    for event in token.events:
        print(f"  {event}")

    section_header("Subscribing")
    print(">>> token.subscribe(print, EVENT_TRANSFER)")
    subscription = token.subscribe(print, EVENT_TRANSFER)
    token.transfer(RECEIVER, SPENDER, units(1))
    token.unsubscribe(subscription)

    wait_for_enter()
    return token


def step_09_replay(token: Token):
    step_header(9, "Replay and Conservation",
        "The transaction log reconstructs the exact state. Supply is conserved.")

    replayed = token.ledger.replay()
    print(f"Log entries:       {len(token.transaction_log)}")
    print(f"Replay matches:    {replayed.get_balances() == token.ledger.get_balances()}")

    result = token.ledger.verify_conservation()
    print(f"Sum of balances:   {result['sum_of_balances']}")
    print(f"Total supply:      {result['total_supply']}")
    print(f"Conservation:      {'VALID' if result['valid'] else 'BROKEN'}")

    wait_for_enter()
    return token


def main():
    token = step_01_deploy()
    for step in (
        step_02_base_units, step_03_first_transfer,
        step_04_overdraft, step_05_zero_address,
        step_06_approve, step_07_transfer_from,
        step_08_events, step_09_replay,
    ):
        token = step(token)
    print(f"\n{'='*70}\nTutorial complete.\n{'='*70}")


if __name__ == "__main__":
    main()
