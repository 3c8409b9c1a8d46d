"""
Common types for credential issuance and verification.

This module provides:
1. Address helpers - normalise 20-byte addresses from bytes or hex text
2. ClaimAssertion - the public claim record submitted with a proof
3. Credential - one holder's soulbound credential record

ClaimAssertion is the wire contract shared by the registry, the gateway and
the network layer. It serialises to CBOR with a version field.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import cbor2

from .config import (
    ADDRESS_BINDING_BYTES,
    ADDRESS_BYTES,
    CLAIM_VERSION,
    EVENT_ID_BYTES,
    IACA_ROOT_BYTES,
    MAX_PROOF_BYTES,
    NULLIFIER_BYTES,
    STATE_CODE_BYTES,
)
from .exceptions import MalformedInput

BytesLike = Union[bytes, bytearray, str]

ZERO_ADDRESS = b"\x00" * ADDRESS_BYTES

_BYTE_FIELDS = (
    "proof",
    "nullifier",
    "address_binding",
    "event_id",
    "iaca_root",
    "bound_address",
    "proven_state",
)


# ============================================================================
# BYTE HELPERS
# ============================================================================


def to_fixed_bytes(value: BytesLike, size: int, field: str) -> bytes:
    """
    Normalise ``value`` to exactly ``size`` bytes.

    Accepts raw bytes or ``0x``-prefixed hex text of the exact width.

    Raises:
        MalformedInput: If the value has the wrong type or width
    """
    if isinstance(value, str):
        text = value[2:] if value.startswith(("0x", "0X")) else value
        if len(text) != size * 2:
            raise MalformedInput(f"{field} must be {size} bytes of hex")
        try:
            value = bytes.fromhex(text)
        except ValueError as exc:
            raise MalformedInput(f"{field} is not valid hex") from exc
    if not isinstance(value, (bytes, bytearray)):
        raise MalformedInput(f"{field} must be bytes, got {type(value).__name__}")
    if len(value) != size:
        raise MalformedInput(f"{field} must be {size} bytes, got {len(value)}")
    return bytes(value)


def to_address(value: BytesLike) -> bytes:
    return to_fixed_bytes(value, ADDRESS_BYTES, "address")


def format_address(address: bytes) -> str:
    return "0x" + bytes(address).hex()


# ============================================================================
# CLAIM ASSERTION
# ============================================================================


@dataclass(frozen=True)
class ClaimAssertion:
    """
    Public claims accompanying a proof.

    Attributes:
        proof: Opaque proof bytes for the Proof Oracle
        nullifier: Document-derived value that may be minted only once
        address_binding: Proof field tying the proof to ``bound_address``
        proof_date: UTC date the proof was generated, as YYYYMMDD
        event_id: Application scope hash (see ``codec.hash_event_id``)
        iaca_root: Hash of the issuing authority's public key
        bound_address: Address the proof is bound to
        prove_age_over_21: Whether the proof attests age over 21
        prove_age_over_18: Whether the proof attests age over 18
        prove_state: Whether the proof attests the issuing state
        proven_state: Two ASCII bytes of the state code (zeros if unused)
        referrer_id: Optional credential id of a referrer (mint only)

    Example:
        >>> claim = ClaimAssertion.from_dict(payload)
        >>> restored = ClaimAssertion.deserialize(claim.serialize())
    """

    proof: bytes
    nullifier: bytes
    address_binding: bytes
    proof_date: int
    event_id: bytes
    iaca_root: bytes
    bound_address: bytes
    prove_age_over_21: bool = False
    prove_age_over_18: bool = False
    prove_state: bool = False
    proven_state: bytes = b"\x00\x00"
    referrer_id: Optional[int] = None

    def __post_init__(self) -> None:
        # Hex text and bytearrays are stored as bytes; widths are left to validate().
        for name in _BYTE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str):
                text = value[2:] if value.startswith(("0x", "0X")) else value
                try:
                    value = bytes.fromhex(text)
                except ValueError as exc:
                    raise MalformedInput(f"{name} is not valid hex") from exc
            elif isinstance(value, bytearray):
                value = bytes(value)
            object.__setattr__(self, name, value)

    def validate(self) -> None:
        """
        Check widths and types.

        Raises:
            MalformedInput: On the first malformed field
        """
        if not isinstance(self.proof, (bytes, bytearray)):
            raise MalformedInput("proof must be bytes")
        if len(self.proof) > MAX_PROOF_BYTES:
            raise MalformedInput("proof too large")
        to_fixed_bytes(self.nullifier, NULLIFIER_BYTES, "nullifier")
        to_fixed_bytes(self.address_binding, ADDRESS_BINDING_BYTES, "address_binding")
        to_fixed_bytes(self.event_id, EVENT_ID_BYTES, "event_id")
        to_fixed_bytes(self.iaca_root, IACA_ROOT_BYTES, "iaca_root")
        to_fixed_bytes(self.bound_address, ADDRESS_BYTES, "bound_address")
        to_fixed_bytes(self.proven_state, STATE_CODE_BYTES, "proven_state")
        if isinstance(self.proof_date, bool) or not isinstance(self.proof_date, int):
            raise MalformedInput("proof_date must be an integer YYYYMMDD")
        for name in ("prove_age_over_21", "prove_age_over_18", "prove_state"):
            if not isinstance(getattr(self, name), bool):
                raise MalformedInput(f"{name} must be bool")
        if self.referrer_id is not None:
            if isinstance(self.referrer_id, bool) or not isinstance(self.referrer_id, int):
                raise MalformedInput("referrer_id must be an integer")
            if self.referrer_id < 0:
                raise MalformedInput("referrer_id must be non-negative")

    def bind_to(self, address: BytesLike) -> "ClaimAssertion":
        """Return a copy whose public ``bound_address`` is ``address``."""
        return dataclasses.replace(self, bound_address=to_address(address))

    @property
    def state_code(self) -> str:
        """Human-readable state code, empty when no state is proven."""
        if not self.prove_state:
            return ""
        return bytes(self.proven_state).decode("ascii", errors="replace")

    # ========================================================================
    # SERIALIZATION (CBOR)
    # ========================================================================

    def serialize(self) -> bytes:
        self.validate()
        data = {
            "v": CLAIM_VERSION,
            "proof": bytes(self.proof),
            "n": bytes(self.nullifier),
            "ab": bytes(self.address_binding),
            "d": self.proof_date,
            "e": bytes(self.event_id),
            "r": bytes(self.iaca_root),
            "a": bytes(self.bound_address),
            "a21": self.prove_age_over_21,
            "a18": self.prove_age_over_18,
            "ps": self.prove_state,
            "s": bytes(self.proven_state),
            "ref": self.referrer_id,
        }
        return cbor2.dumps(data)

    @classmethod
    def deserialize(cls, data: bytes) -> "ClaimAssertion":
        """
        Decode a CBOR claim.

        Raises:
            MalformedInput: If the blob is not a valid, current-version claim
        """
        try:
            obj = cbor2.loads(data)
        except Exception as e:
            raise MalformedInput(f"Failed to decode claim: {e}") from e

        if not isinstance(obj, dict):
            raise MalformedInput("Invalid claim format: expected a map")

        version = obj.get("v", 1)
        if version != CLAIM_VERSION:
            raise MalformedInput(
                f"Unsupported claim version: {version} (expected {CLAIM_VERSION})"
            )

        required = ("proof", "n", "ab", "d", "e", "r", "a")
        missing = [key for key in required if key not in obj]
        if missing:
            raise MalformedInput(f"Invalid claim format: missing {', '.join(missing)}")

        claim = cls(
            proof=obj["proof"],
            nullifier=obj["n"],
            address_binding=obj["ab"],
            proof_date=obj["d"],
            event_id=obj["e"],
            iaca_root=obj["r"],
            bound_address=obj["a"],
            prove_age_over_21=obj.get("a21", False),
            prove_age_over_18=obj.get("a18", False),
            prove_state=obj.get("ps", False),
            proven_state=obj.get("s", b"\x00\x00"),
            referrer_id=obj.get("ref"),
        )
        claim.validate()
        return claim

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form with hex-encoded byte fields."""
        return {
            "proof": "0x" + bytes(self.proof).hex(),
            "nullifier": "0x" + bytes(self.nullifier).hex(),
            "addressBinding": "0x" + bytes(self.address_binding).hex(),
            "proofDate": self.proof_date,
            "eventId": "0x" + bytes(self.event_id).hex(),
            "iacaRoot": "0x" + bytes(self.iaca_root).hex(),
            "boundAddress": format_address(self.bound_address),
            "proveAgeOver21": self.prove_age_over_21,
            "proveAgeOver18": self.prove_age_over_18,
            "proveState": self.prove_state,
            "provenState": "0x" + bytes(self.proven_state).hex(),
            "referrerId": self.referrer_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClaimAssertion":
        """
        Build a claim from the JSON form produced by ``to_dict`` or by the SDK.

        ``provenState`` may be hex (``0x5441``) or the two-letter code (``TX``).
        """
        if not isinstance(data, dict):
            raise MalformedInput("claim must be a mapping")
        try:
            proof_hex = data["proof"]
            proof_text = proof_hex[2:] if proof_hex.startswith("0x") else proof_hex
            state = data.get("provenState") or "0x0000"
            if len(state) == STATE_CODE_BYTES and not state.startswith("0x"):
                state_bytes = state.encode("ascii")
            else:
                state_bytes = to_fixed_bytes(state, STATE_CODE_BYTES, "proven_state")
            claim = cls(
                proof=bytes.fromhex(proof_text),
                nullifier=to_fixed_bytes(data["nullifier"], NULLIFIER_BYTES, "nullifier"),
                address_binding=to_fixed_bytes(
                    data["addressBinding"], ADDRESS_BINDING_BYTES, "address_binding"
                ),
                proof_date=data["proofDate"],
                event_id=to_fixed_bytes(data["eventId"], EVENT_ID_BYTES, "event_id"),
                iaca_root=to_fixed_bytes(data["iacaRoot"], IACA_ROOT_BYTES, "iaca_root"),
                bound_address=to_address(data["boundAddress"]),
                prove_age_over_21=data.get("proveAgeOver21", False),
                prove_age_over_18=data.get("proveAgeOver18", False),
                prove_state=data.get("proveState", False),
                proven_state=state_bytes,
                referrer_id=data.get("referrerId"),
            )
        except KeyError as exc:
            raise MalformedInput(f"claim missing field {exc.args[0]!r}") from exc
        except (AttributeError, UnicodeEncodeError, ValueError) as exc:
            if isinstance(exc, MalformedInput):
                raise
            raise MalformedInput(f"claim field malformed: {exc}") from exc
        claim.validate()
        return claim


# ============================================================================
# CREDENTIAL
# ============================================================================


@dataclass
class Credential:
    """
    A holder's soulbound credential.

    Validity is derived from ``issued_at`` and the registry's validity
    period; it is never stored.
    """

    id: int
    holder: bytes
    issued_at: int
    tier: int
    referred_by: Optional[bytes] = None

    def expires_at(self, validity_period: int) -> int:
        return self.issued_at + validity_period

    def is_valid_at(self, now: int, validity_period: int) -> bool:
        return now <= self.expires_at(validity_period)
