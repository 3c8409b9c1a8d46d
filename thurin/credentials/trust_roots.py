"""
Trust Root Registry.

Administrator-gated set of accepted IACA (issuing authority) root hashes.
Consulted at mint and renewal time only; revoking a root never invalidates
credentials already issued under it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from .admin import Administrator
from .config import IACA_ROOT_BYTES
from .events import TrustRootChanged
from .ledger import Ledger
from .types import BytesLike, to_fixed_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrustRoot:
    trusted: bool
    label: str


class TrustRootRegistry:
    def __init__(self, ledger: Ledger, admin: Administrator) -> None:
        self._ledger = ledger
        self._admin = admin
        self._roots: Dict[bytes, TrustRoot] = {}

    def add_root(self, caller: BytesLike, root: BytesLike, label: str = "") -> None:
        root_bytes = to_fixed_bytes(root, IACA_ROOT_BYTES, "iaca_root")
        if not isinstance(label, str):
            raise TypeError("label must be str")
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            txn.put(self._roots, root_bytes, TrustRoot(trusted=True, label=label))
            txn.emit(TrustRootChanged(root=root_bytes, trusted=True))
        logger.info("trust root %s added (%s)", root_bytes.hex()[:16], label or "unlabelled")

    def remove_root(self, caller: BytesLike, root: BytesLike) -> None:
        root_bytes = to_fixed_bytes(root, IACA_ROOT_BYTES, "iaca_root")
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            existing = self._roots.get(root_bytes)
            label = existing.label if existing else ""
            txn.put(self._roots, root_bytes, TrustRoot(trusted=False, label=label))
            txn.emit(TrustRootChanged(root=root_bytes, trusted=False))
        logger.info("trust root %s revoked", root_bytes.hex()[:16])

    def is_trusted(self, root: bytes) -> bool:
        entry = self._roots.get(bytes(root))
        return entry is not None and entry.trusted

    def get(self, root: BytesLike) -> Optional[TrustRoot]:
        return self._roots.get(to_fixed_bytes(root, IACA_ROOT_BYTES, "iaca_root"))

    def roots(self) -> Iterator[Tuple[bytes, TrustRoot]]:
        return iter(list(self._roots.items()))
