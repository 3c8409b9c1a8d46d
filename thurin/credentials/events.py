"""
Notifications for external observers.

Events carry holder addresses and credential ids only. No event type has a
field for a nullifier, a claim value or proof bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialMinted:
    holder: bytes
    credential_id: int
    referrer_id: Optional[int] = None


@dataclass(frozen=True)
class CredentialRenewed:
    holder: bytes
    credential_id: int


@dataclass(frozen=True)
class CredentialBurned:
    holder: bytes
    credential_id: int


@dataclass(frozen=True)
class TrustRootChanged:
    root: bytes
    trusted: bool


@dataclass(frozen=True)
class OwnershipTransferred:
    previous_owner: bytes
    new_owner: bytes


Event = Union[
    CredentialMinted,
    CredentialRenewed,
    CredentialBurned,
    TrustRootChanged,
    OwnershipTransferred,
]
Subscriber = Callable[[Event], None]


class EventBus:
    """Synchronous fan-out of committed events to subscribers."""

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, event: Event) -> None:
        # Delivery happens after commit; a failing observer cannot undo state.
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("event subscriber failed for %s", type(event).__name__)
