"""
Credential Registry.

Owns the sybil-resistance nullifier set and each holder's credential
lifecycle: mint -> valid -> expired -> renewed -> burned.

Mint preconditions are checked in a fixed order and the first failure wins:

1. caller holds no credential            (AlreadyHolder)
2. payment covers the current price      (StalePrice / InsufficientPayment)
3. proof date inside the window          (ProofDateFromFuture / ProofDateTooOld)
4. IACA root currently trusted           (UntrustedRoot)
5. nullifier never used                  (NullifierUsed)
6. oracle accepts the encoded inputs     (InvalidProof)

The registry never recomputes the address binding. It binds the public
inputs to the caller and forwards the asserted binding to the oracle, so a
proof made for another address fails at step 6.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Set

from .admin import Administrator
from .codec import encode_public_inputs
from .config import (
    MINT_POINTS,
    MIN_VALIDITY_PERIOD,
    MAX_PROOF_DATE_TOLERANCE_DAYS,
    NULLIFIER_BYTES,
    REFERRAL_POINTS,
    RegistryConfig,
)
from .events import CredentialBurned, CredentialMinted, CredentialRenewed
from .exceptions import (
    AlreadyHolder,
    InsufficientPayment,
    InvalidConfiguration,
    InvalidProof,
    NoCredentialToBurn,
    NoCredentialToRenew,
    NullifierUsed,
    UntrustedRoot,
    ValidityPeriodTooShort,
)
from .freshness import check_proof_date
from .interfaces import ProofOracle
from .ledger import Ledger
from .points import PointsLedger
from .pricing import PriceSource, fresh_quote, tier_index, to_wei, usd_cents_for
from .trust_roots import TrustRootRegistry
from .types import BytesLike, ClaimAssertion, Credential, format_address, to_address, to_fixed_bytes

logger = logging.getLogger(__name__)

# Identity the registry uses when crediting the points ledger
REGISTRY_ADDRESS = bytes.fromhex("7e" * 20)


class CredentialRegistry:
    def __init__(
        self,
        ledger: Ledger,
        admin: Administrator,
        trust_roots: TrustRootRegistry,
        oracle: ProofOracle,
        price_source: PriceSource,
        points: PointsLedger,
        config: Optional[RegistryConfig] = None,
        *,
        address: bytes = REGISTRY_ADDRESS,
    ) -> None:
        self._ledger = ledger
        self._admin = admin
        self._trust_roots = trust_roots
        self._oracle = oracle
        self._price_source = price_source
        self._points = points
        self.config = config or RegistryConfig()
        self.config.validate()
        self.address = to_address(address)

        self._nullifiers: Set[bytes] = set()
        self._credentials: Dict[bytes, Credential] = {}
        self._holders_by_id: Dict[int, bytes] = {}
        self._next_id = 1
        self.collected = 0

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def mint(
        self,
        caller: BytesLike,
        claim: ClaimAssertion,
        payment: int,
        referrer_id: Optional[int] = None,
    ) -> int:
        """
        Issue a credential to ``caller``.

        Args:
            caller: Minting address; the proof must be bound to it
            claim: Proof and public claims
            payment: Amount paid, in wei
            referrer_id: Credential id of the referrer; defaults to
                ``claim.referrer_id``. Unknown ids and self-referral are ignored.

        Returns:
            The new credential id
        """
        holder = to_address(caller)
        claim.validate()
        if referrer_id is None:
            referrer_id = claim.referrer_id

        with self._ledger.transaction() as txn:
            if holder in self._credentials:
                raise AlreadyHolder(f"{format_address(holder)} already holds a credential")
            now = self._ledger.now()
            self._require_payment(self._mint_price_at(now), payment)
            self._check_claim(claim, holder, now, check_nullifier=True)

            credential_id = self._next_id
            credential = Credential(
                id=credential_id,
                holder=holder,
                issued_at=now,
                tier=tier_index(self.config.price_tiers, self.total_issued),
            )
            txn.add(self._nullifiers, bytes(claim.nullifier))
            txn.setattr(self, "_next_id", credential_id + 1)
            txn.put(self._credentials, holder, credential)
            txn.put(self._holders_by_id, credential_id, holder)
            txn.setattr(self, "collected", self.collected + payment)
            self._points.credit(self.address, holder, MINT_POINTS, "mint")

            credited_referrer = self._apply_referral(credential, referrer_id)
            txn.emit(
                CredentialMinted(
                    holder=holder,
                    credential_id=credential_id,
                    referrer_id=referrer_id if credited_referrer else None,
                )
            )

        logger.info("credential %d minted for %s", credential_id, format_address(holder))
        return credential_id

    def renew(self, caller: BytesLike, claim: ClaimAssertion, payment: int) -> None:
        """
        Reset ``issued_at`` of the caller's credential to now.

        An expired but unburned credential can be renewed. The nullifier is
        not checked for uniqueness: the same document is expected again.
        """
        holder = to_address(caller)
        claim.validate()

        with self._ledger.transaction() as txn:
            credential = self._credentials.get(holder)
            if credential is None:
                raise NoCredentialToRenew(f"{format_address(holder)} has no credential")
            now = self._ledger.now()
            self._require_payment(self._renewal_price_at(now), payment)
            self._check_claim(claim, holder, now, check_nullifier=False)

            txn.setattr(credential, "issued_at", now)
            txn.setattr(self, "collected", self.collected + payment)
            txn.emit(CredentialRenewed(holder=holder, credential_id=credential.id))

        logger.info("credential %d renewed for %s", credential.id, format_address(holder))

    def burn(self, caller: BytesLike) -> None:
        """Permanently destroy the caller's credential; its id is retired."""
        holder = to_address(caller)
        with self._ledger.transaction() as txn:
            if holder not in self._credentials:
                raise NoCredentialToBurn(f"{format_address(holder)} has no credential")
            credential = txn.pop(self._credentials, holder)
            txn.pop(self._holders_by_id, credential.id)
            txn.emit(CredentialBurned(holder=holder, credential_id=credential.id))

        logger.info("credential %d burned by %s", credential.id, format_address(holder))

    # ========================================================================
    # READS
    # ========================================================================

    def is_valid(self, holder: BytesLike) -> bool:
        credential = self._credentials.get(to_address(holder))
        if credential is None:
            return False
        return credential.is_valid_at(self._ledger.now(), self.config.validity_period)

    def expiry_of(self, holder: BytesLike) -> int:
        """Expiry timestamp of the holder's credential, or 0 when there is none."""
        credential = self._credentials.get(to_address(holder))
        if credential is None:
            return 0
        return credential.expires_at(self.config.validity_period)

    def credential_of(self, holder: BytesLike) -> Optional[Credential]:
        credential = self._credentials.get(to_address(holder))
        if credential is None:
            return None
        return Credential(
            id=credential.id,
            holder=credential.holder,
            issued_at=credential.issued_at,
            tier=credential.tier,
            referred_by=credential.referred_by,
        )

    def holder_of(self, credential_id: int) -> Optional[bytes]:
        return self._holders_by_id.get(credential_id)

    @property
    def total_issued(self) -> int:
        return self._next_id - 1

    @property
    def live_count(self) -> int:
        return len(self._credentials)

    @property
    def nullifier_count(self) -> int:
        return len(self._nullifiers)

    def is_nullifier_used(self, nullifier: BytesLike) -> bool:
        return to_fixed_bytes(nullifier, NULLIFIER_BYTES, "nullifier") in self._nullifiers

    def current_tier(self) -> int:
        return tier_index(self.config.price_tiers, self.total_issued)

    def mint_price(self) -> int:
        """Current mint price in wei. Raises StalePrice if the feed is unusable."""
        return self._mint_price_at(self._ledger.now())

    def renewal_price(self) -> int:
        return self._renewal_price_at(self._ledger.now())

    # ========================================================================
    # ADMINISTRATION
    # ========================================================================

    def set_tier_price(self, caller: BytesLike, index: int, usd_cents: int) -> None:
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            if not 0 <= index < len(self.config.price_tiers):
                raise InvalidConfiguration(f"no price tier {index}")
            if usd_cents <= 0:
                raise InvalidConfiguration("tier price must be positive")
            txn.setattr(self.config.price_tiers[index], "usd_cents", usd_cents)
        logger.info("price tier %d set to %d cents", index, usd_cents)

    def set_renewal_price(self, caller: BytesLike, usd_cents: int) -> None:
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            if usd_cents <= 0:
                raise InvalidConfiguration("renewal price must be positive")
            txn.setattr(self.config, "renewal_price_cents", usd_cents)
        logger.info("renewal price set to %d cents", usd_cents)

    def set_validity_period(self, caller: BytesLike, seconds: int) -> None:
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            if seconds < MIN_VALIDITY_PERIOD:
                raise ValidityPeriodTooShort(
                    f"validity period {seconds}s below floor {MIN_VALIDITY_PERIOD}s"
                )
            txn.setattr(self.config, "validity_period", seconds)
        logger.info("validity period set to %ds", seconds)

    def set_proof_date_window(self, caller: BytesLike, past_days: int, future_days: int) -> None:
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            for value in (past_days, future_days):
                if not 0 <= value <= MAX_PROOF_DATE_TOLERANCE_DAYS:
                    raise InvalidConfiguration(f"proof date window {value} out of range")
            txn.setattr(self.config, "proof_date_past_days", past_days)
            txn.setattr(self.config, "proof_date_future_days", future_days)
        logger.info("proof date window set to -%d/+%d days", past_days, future_days)

    def set_max_price_age(self, caller: BytesLike, seconds: int) -> None:
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            if seconds <= 0:
                raise InvalidConfiguration("max price age must be positive")
            txn.setattr(self.config, "max_price_age", seconds)

    def withdraw(self, caller: BytesLike, amount: int) -> int:
        """Release collected payments to the administrator; returns the amount."""
        with self._ledger.transaction() as txn:
            self._admin.require_owner(caller)
            if amount <= 0 or amount > self.collected:
                raise InvalidConfiguration(f"cannot withdraw {amount} of {self.collected}")
            txn.setattr(self, "collected", self.collected - amount)
        logger.info("withdrew %d wei", amount)
        return amount

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _mint_price_at(self, now: int) -> int:
        quote = fresh_quote(self._price_source, now, self.config.max_price_age)
        return to_wei(usd_cents_for(self.config.price_tiers, self.total_issued), quote)

    def _renewal_price_at(self, now: int) -> int:
        quote = fresh_quote(self._price_source, now, self.config.max_price_age)
        return to_wei(self.config.renewal_price_cents, quote)

    @staticmethod
    def _require_payment(price: int, payment: int) -> None:
        if isinstance(payment, bool) or not isinstance(payment, int) or payment < price:
            raise InsufficientPayment(required=price, paid=payment if isinstance(payment, int) else 0)

    def _check_claim(
        self, claim: ClaimAssertion, holder: bytes, now: int, *, check_nullifier: bool
    ) -> None:
        check_proof_date(claim.proof_date, now, self.config)
        if not self._trust_roots.is_trusted(claim.iaca_root):
            raise UntrustedRoot("IACA root is not trusted")
        if check_nullifier and bytes(claim.nullifier) in self._nullifiers:
            raise NullifierUsed("nullifier already used")
        public_inputs = encode_public_inputs(claim.bind_to(holder))
        if not self._oracle.verify(bytes(claim.proof), public_inputs):
            raise InvalidProof("proof rejected")

    def _apply_referral(self, credential: Credential, referrer_id: Optional[int]) -> bool:
        if referrer_id is None:
            return False
        referrer = self._holders_by_id.get(referrer_id)
        if referrer is None or referrer == credential.holder:
            logger.debug("referral ignored")
            return False
        credential.referred_by = referrer
        self._points.credit(self.address, referrer, REFERRAL_POINTS, "referral")
        return True
