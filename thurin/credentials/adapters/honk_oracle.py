"""UltraHonk verification facade over native bindings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from ..config import BN254_MODULUS, FIELD_ELEMENT_BYTES, PUBLIC_INPUT_COUNT
from ..interfaces import ProofOracle

_MODULE_NAME = "thurin_honk"
_VERIFIER_FN = "verify_ultra_honk"
_VK_ENV_VAR = "THURIN_HONK_VK"


class HonkProofOracle(ProofOracle):
    """Verify UltraHonk proofs via the ``thurin_honk`` PyO3 bindings."""

    _BACKEND_NAME = "HonkProofOracle"

    def __init__(self, vk_path_or_bytes: str | Path | bytes | bytearray | None = None) -> None:
        if vk_path_or_bytes is None:
            vk_path_or_bytes = os.getenv(_VK_ENV_VAR, "")
        self._vk_source = vk_path_or_bytes

    @property
    def backend_name(self) -> str:
        return self._BACKEND_NAME

    def verify(self, proof: bytes, public_inputs: Sequence[int]) -> bool:
        inputs = tuple(public_inputs)
        if len(inputs) != PUBLIC_INPUT_COUNT:
            return False
        if any(not isinstance(x, int) or not 0 <= x < BN254_MODULUS for x in inputs):
            return False
        if not isinstance(proof, (bytes, bytearray)) or not proof:
            return False

        vk_bytes = _read_bytes(self._vk_source)
        if not vk_bytes:
            return False

        module = _load_module()
        if module is None:
            return False
        verifier = getattr(module, _VERIFIER_FN, None)
        if verifier is None:
            return False

        public_inputs_bytes = b"".join(
            x.to_bytes(FIELD_ELEMENT_BYTES, "big") for x in inputs
        )
        try:
            return bool(verifier(vk_bytes, public_inputs_bytes, bytes(proof)))
        except Exception:
            return False


def _read_bytes(value: str | Path | bytes | bytearray) -> bytes | None:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not value:
        return None
    try:
        return Path(value).read_bytes()
    except OSError:
        return None


def _load_module():
    try:
        return __import__(_MODULE_NAME)
    except ImportError:
        return None
