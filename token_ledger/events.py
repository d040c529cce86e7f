"""
events.py - Transfer and Approval notifications

Events are just data, subscribers are just functions:
1. TransferEvent / ApprovalEvent: immutable notification payloads
2. EventNotifier: ordered subscriber registry plus an emission history

The ledger hands events to the notifier only after a transaction has been
applied in full. The core never reads events back; they exist for external
observers.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, List, Optional, Tuple, Union

from .core import Account, format_account


EVENT_TRANSFER = "Transfer"
EVENT_APPROVAL = "Approval"
EVENT_TYPES = frozenset({EVENT_TRANSFER, EVENT_APPROVAL})


# ============================================================================
# EVENT DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class TransferEvent:
    """
    Balance movement notification.

    For delegated transfers sender is the owner of the funds, not the
    spender that made the call.
    """
    sender: Account
    recipient: Account
    value: int

    event_type: ClassVar[str] = EVENT_TRANSFER

    def __repr__(self) -> str:
        return (f"Transfer(from={format_account(self.sender)}, "
                f"to={format_account(self.recipient)}, value={self.value})")


@dataclass(frozen=True, slots=True)
class ApprovalEvent:
    """Allowance set notification; value is the new absolute allowance."""
    owner: Account
    spender: Account
    value: int

    event_type: ClassVar[str] = EVENT_APPROVAL

    def __repr__(self) -> str:
        return (f"Approval(owner={format_account(self.owner)}, "
                f"spender={format_account(self.spender)}, value={self.value})")


TokenEvent = Union[TransferEvent, ApprovalEvent]

# Subscriber type: (event) -> None
Subscriber = Callable[[TokenEvent], None]


# ============================================================================
# NOTIFIER
# ============================================================================

class EventNotifier:
    """
    Delivers events to subscribers in subscription order.

    Design:
    - subscribe() returns an integer token used to unsubscribe
    - a subscriber may filter on one event type
    - every notified event is kept in history, in emission order
    - exceptions raised by subscribers propagate unchanged
    """

    def __init__(self):
        self._subscribers: Dict[int, Tuple[Optional[str], Subscriber]] = {}
        self._next_token: int = 0
        self.history: List[TokenEvent] = []

    def subscribe(self, callback: Subscriber, event_type: Optional[str] = None) -> int:
        """
        Register a callback for all events, or only for event_type.

        Returns the subscription token.

        Raises:
            ValueError: If event_type is not "Transfer" or "Approval"
        """
        if event_type is not None and event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type {event_type!r}")
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = (event_type, callback)
        return token

    def unsubscribe(self, token: int) -> None:
        """Remove a subscription. Raises ValueError for an unknown token."""
        if token not in self._subscribers:
            raise ValueError(f"Unknown subscription token {token}")
        del self._subscribers[token]

    def notify(self, event: TokenEvent) -> None:
        """Record event and deliver it to every matching subscriber."""
        self.history.append(event)
        # Snapshot so callbacks may unsubscribe while being notified
        for event_type, callback in list(self._subscribers.values()):
            if event_type is None or event_type == event.event_type:
                callback(event)
