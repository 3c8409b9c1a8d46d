"""
Points and referral ledger.

Increment-and-read only: balances grow when authorised writers (the
credential registry) credit mint and referral events. There is no spend
path.
"""

from __future__ import annotations

import logging
from typing import Dict, Set

from .admin import Administrator
from .exceptions import NotAuthorized
from .ledger import Ledger
from .types import BytesLike, format_address, to_address

logger = logging.getLogger(__name__)


class PointsLedger:
    def __init__(self, ledger: Ledger, admin: Administrator) -> None:
        self._ledger = ledger
        self._admin = admin
        self._balances: Dict[bytes, int] = {}
        self._writers: Set[bytes] = set()
        self.total_points = 0

    def authorize_writer(self, caller: BytesLike, writer: BytesLike) -> None:
        writer_bytes = to_address(writer)
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            txn.add(self._writers, writer_bytes)
        logger.info("points writer %s authorised", format_address(writer_bytes))

    def revoke_writer(self, caller: BytesLike, writer: BytesLike) -> None:
        writer_bytes = to_address(writer)
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            txn.discard(self._writers, writer_bytes)

    def is_writer(self, writer: BytesLike) -> bool:
        return to_address(writer) in self._writers

    def credit(self, caller: BytesLike, account: BytesLike, amount: int, reason: str = "") -> int:
        """
        Add ``amount`` points to ``account``.

        Returns:
            The account's new balance

        Raises:
            NotAuthorized: If ``caller`` is not an authorised writer
            ValueError: If ``amount`` is not positive
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValueError("amount must be a positive integer")
        account_bytes = to_address(account)
        with self._ledger.transaction() as txn:
            if to_address(caller) not in self._writers:
                raise NotAuthorized("caller may not credit points")
            balance = txn.increment(self._balances, account_bytes, amount)
            txn.setattr(self, "total_points", self.total_points + amount)
        logger.debug("credited %d points (%s)", amount, reason or "unspecified")
        return balance

    def balance_of(self, account: BytesLike) -> int:
        return self._balances.get(to_address(account), 0)
