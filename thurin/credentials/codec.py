"""
Public-input codec.

Maps a ``ClaimAssertion`` to the ordered field elements the Proof Oracle
checks. Mint, renew and verify all go through ``encode_public_inputs``; the
field order is fixed by ``config.PUBLIC_INPUT_FIELDS``.
"""

from __future__ import annotations

import datetime
from typing import Tuple

from Crypto.Hash import keccak

from .config import (
    ADDRESS_BINDING_BYTES,
    ADDRESS_BYTES,
    BN254_MODULUS,
    EVENT_ID_BYTES,
    FIELD_ELEMENT_BYTES,
    IACA_ROOT_BYTES,
    NULLIFIER_BYTES,
    SECONDS_PER_DAY,
    STATE_CODE_BYTES,
)
from .exceptions import MalformedInput
from .types import ClaimAssertion, to_fixed_bytes

PublicInputs = Tuple[int, ...]


def _field_from_bytes(value: bytes, size: int, field: str) -> int:
    raw = to_fixed_bytes(value, size, field)
    element = int.from_bytes(raw, "big")
    if element >= BN254_MODULUS:
        raise MalformedInput(f"{field} is not a canonical field element")
    return element


def _flag(value: bool, field: str) -> int:
    if not isinstance(value, bool):
        raise MalformedInput(f"{field} must be bool")
    return 1 if value else 0


def yyyymmdd_to_date(value: int) -> datetime.date:
    """
    Parse a YYYYMMDD integer.

    Raises:
        MalformedInput: If the value is not a real calendar date
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise MalformedInput("proof_date must be a positive integer YYYYMMDD")
    year, rest = divmod(value, 10_000)
    month, day = divmod(rest, 100)
    try:
        return datetime.date(year, month, day)
    except ValueError as exc:
        raise MalformedInput(f"proof_date {value} is not a calendar date") from exc


def date_to_yyyymmdd(day: datetime.date) -> int:
    return day.year * 10_000 + day.month * 100 + day.day


def timestamp_to_date(timestamp: int) -> datetime.date:
    return datetime.date(1970, 1, 1) + datetime.timedelta(days=int(timestamp) // SECONDS_PER_DAY)


def timestamp_to_yyyymmdd(timestamp: int) -> int:
    """UTC calendar day of a unix timestamp as YYYYMMDD."""
    return date_to_yyyymmdd(timestamp_to_date(timestamp))


def encode_public_inputs(claim: ClaimAssertion) -> PublicInputs:
    """
    Encode a claim into the registry-wide public input sequence.

    Returns:
        Tuple of ``PUBLIC_INPUT_COUNT`` integers, each below the BN254 modulus

    Raises:
        MalformedInput: If any fixed-width input is malformed
    """
    if not isinstance(claim, ClaimAssertion):
        raise MalformedInput("claim must be a ClaimAssertion")

    yyyymmdd_to_date(claim.proof_date)
    state = to_fixed_bytes(claim.proven_state, STATE_CODE_BYTES, "proven_state")

    elements = (
        _field_from_bytes(claim.nullifier, NULLIFIER_BYTES, "nullifier"),
        _field_from_bytes(claim.address_binding, ADDRESS_BINDING_BYTES, "address_binding"),
        claim.proof_date,
        _field_from_bytes(claim.event_id, EVENT_ID_BYTES, "event_id"),
        _field_from_bytes(claim.iaca_root, IACA_ROOT_BYTES, "iaca_root"),
        _field_from_bytes(claim.bound_address, ADDRESS_BYTES, "bound_address"),
        _flag(claim.prove_age_over_21, "prove_age_over_21"),
        _flag(claim.prove_age_over_18, "prove_age_over_18"),
        _flag(claim.prove_state, "prove_state"),
        state[0],
        state[1],
    )
    return elements


def encode_public_inputs_bytes(claim: ClaimAssertion) -> bytes:
    """Public inputs as concatenated 32-byte big-endian words."""
    return b"".join(
        element.to_bytes(FIELD_ELEMENT_BYTES, "big")
        for element in encode_public_inputs(claim)
    )


def hash_event_id(event_id: str) -> bytes:
    """
    Hash an application event name to a 32-byte field element.

    keccak-256 of the UTF-8 text, reduced modulo the BN254 modulus since the
    digest may exceed it.
    """
    if not isinstance(event_id, str):
        raise MalformedInput("event_id must be str")
    digest = keccak.new(digest_bits=256, data=event_id.encode("utf-8")).digest()
    reduced = int.from_bytes(digest, "big") % BN254_MODULUS
    return reduced.to_bytes(FIELD_ELEMENT_BYTES, "big")
