"""
Abstract interfaces for external collaborators.

The core treats the proof system and the price feed as opaque oracles:
deterministic, side-effect-free from the core's point of view.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence


class ProofOracle(ABC):
    """
    Verifier for proofs over an ordered list of public field elements.

    Implementations must return ``False`` (not raise) for any proof they
    cannot accept.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        ...

    @abstractmethod
    def verify(self, proof: bytes, public_inputs: Sequence[int]) -> bool:
        """Return True iff ``proof`` is valid for ``public_inputs``."""
