"""
Verification Gateway.

Lets calling applications check a holder's claims. The only persisted side
effect is an anonymous per-application volume counter: two verifications of
the same holder by one application are indistinguishable in storage from
verifications of two different holders.
"""

from __future__ import annotations

import logging
from typing import Dict

from .codec import encode_public_inputs
from .exceptions import InvalidProof, NoValidCredential
from .freshness import check_proof_date
from .interfaces import ProofOracle
from .ledger import Ledger
from .registry import CredentialRegistry
from .types import BytesLike, ClaimAssertion, to_address

logger = logging.getLogger(__name__)


class VerificationGateway:
    def __init__(self, ledger: Ledger, registry: CredentialRegistry, oracle: ProofOracle) -> None:
        self._ledger = ledger
        self._registry = registry
        self._oracle = oracle
        self._counts: Dict[bytes, int] = {}
        self.total_verifications = 0

    def verify(self, caller: BytesLike, holder: BytesLike, claim: ClaimAssertion) -> bool:
        """
        Check ``claim`` for ``holder`` on behalf of application ``caller``.

        The holder's credential validity is checked before the proof is
        looked at; the proof is checked with its public inputs bound to
        ``holder``.

        Returns:
            True on success

        Raises:
            NoValidCredential: Holder has no credential or it has expired
            ProofDateFromFuture / ProofDateTooOld: Proof outside the window
            InvalidProof: Oracle rejected the proof
        """
        app = to_address(caller)
        holder_bytes = to_address(holder)
        claim.validate()

        with self._ledger.transaction() as txn:
            if not self._registry.is_valid(holder_bytes):
                raise NoValidCredential("holder has no valid credential")
            check_proof_date(claim.proof_date, self._ledger.now(), self._registry.config)
            public_inputs = encode_public_inputs(claim.bind_to(holder_bytes))
            if not self._oracle.verify(bytes(claim.proof), public_inputs):
                raise InvalidProof("proof rejected")
            txn.increment(self._counts, app)
            txn.setattr(self, "total_verifications", self.total_verifications + 1)

        logger.debug("verification recorded")
        return True

    def verification_count(self, app: BytesLike) -> int:
        return self._counts.get(to_address(app), 0)
