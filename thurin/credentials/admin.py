"""
Administrative identity with two-step ownership transfer.

A single owner address gates every configuration change. Ownership moves
only when the proposed owner accepts, so a mistyped address cannot lock the
system out.
"""

from __future__ import annotations

import logging
from typing import Optional

from .events import OwnershipTransferred
from .exceptions import NotAdministrator, NotPendingOwner
from .ledger import Ledger
from .types import BytesLike, ZERO_ADDRESS, format_address, to_address

logger = logging.getLogger(__name__)


class Administrator:
    def __init__(self, ledger: Ledger, owner: BytesLike) -> None:
        owner_bytes = to_address(owner)
        if owner_bytes == ZERO_ADDRESS:
            raise NotAdministrator("owner cannot be the zero address")
        self._ledger = ledger
        self.owner: bytes = owner_bytes
        self.pending_owner: Optional[bytes] = None

    def is_owner(self, caller: BytesLike) -> bool:
        return to_address(caller) == self.owner

    def require_owner(self, caller: BytesLike) -> None:
        """
        Raises:
            NotAdministrator: If ``caller`` is not the current owner
        """
        if not self.is_owner(caller):
            raise NotAdministrator(f"{format_address(to_address(caller))} is not the administrator")

    def propose_owner(self, caller: BytesLike, new_owner: BytesLike) -> None:
        candidate = to_address(new_owner)
        with self._ledger.transaction() as txn:
            self.require_owner(caller)
            if candidate == ZERO_ADDRESS:
                raise NotAdministrator("cannot propose the zero address")
            txn.setattr(self, "pending_owner", candidate)
        logger.info("ownership transfer proposed to %s", format_address(candidate))

    def cancel_transfer(self, caller: BytesLike) -> None:
        with self._ledger.transaction() as txn:
            self.require_owner(caller)
            txn.setattr(self, "pending_owner", None)

    def accept_ownership(self, caller: BytesLike) -> None:
        """
        Raises:
            NotPendingOwner: If ``caller`` was not proposed
        """
        caller_bytes = to_address(caller)
        with self._ledger.transaction() as txn:
            if self.pending_owner is None or caller_bytes != self.pending_owner:
                raise NotPendingOwner(f"{format_address(caller_bytes)} is not the pending owner")
            previous = self.owner
            txn.setattr(self, "owner", caller_bytes)
            txn.setattr(self, "pending_owner", None)
            txn.emit(OwnershipTransferred(previous_owner=previous, new_owner=caller_bytes))
        logger.info("ownership transferred to %s", format_address(caller_bytes))
