from __future__ import annotations

import hashlib
import hmac
from typing import List, Sequence, Tuple

from ..config import BN254_MODULUS, FIELD_ELEMENT_BYTES, PUBLIC_INPUT_COUNT
from ..interfaces import ProofOracle

_DOMAIN_SEP = b"THURIN_MOCK_PROOF_V1"


class MockProofOracle(ProofOracle):
    """
    Deterministic stand-in for the proof system.

    A "proof" is a SHA-256 tag over the public inputs, so a proof made for one
    set of inputs (for example one bound address) fails for any other.

    Notes:
    - This oracle is for tests and demos.
    - It does NOT provide any cryptographic soundness.
    - With ``record=True`` every (proof, public inputs) pair is kept in
      ``calls``; tests only, since the inputs include nullifiers.
    """

    _BACKEND_NAME = "MockProofOracle"

    def __init__(self, *, accept_all: bool = False, record: bool = False) -> None:
        self._accept_all = accept_all
        self._record = record
        self.calls: List[Tuple[bytes, Tuple[int, ...]]] = []

    @property
    def backend_name(self) -> str:
        return self._BACKEND_NAME

    @staticmethod
    def prove(public_inputs: Sequence[int]) -> bytes:
        """Produce the proof bytes this oracle accepts for ``public_inputs``."""
        return hashlib.sha256(_DOMAIN_SEP + _pack(public_inputs)).digest()

    def verify(self, proof: bytes, public_inputs: Sequence[int]) -> bool:
        inputs = tuple(public_inputs)
        if self._record:
            self.calls.append((bytes(proof), inputs))
        if len(inputs) != PUBLIC_INPUT_COUNT:
            return False
        if any(not isinstance(x, int) or not 0 <= x < BN254_MODULUS for x in inputs):
            return False
        if self._accept_all:
            return True
        return hmac.compare_digest(bytes(proof), self.prove(inputs))


def _pack(public_inputs: Sequence[int]) -> bytes:
    return b"".join(int(x).to_bytes(FIELD_ELEMENT_BYTES, "big") for x in public_inputs)
