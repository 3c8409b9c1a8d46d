"""Shared builders for credential tests."""

from __future__ import annotations

import dataclasses
from typing import Optional

from thurin.credentials.adapters.mock_oracle import MockProofOracle
from thurin.credentials.codec import encode_public_inputs, timestamp_to_yyyymmdd
from thurin.credentials.deployment import Deployment, deploy
from thurin.credentials.pricing import StaticPriceSource
from thurin.credentials.types import ClaimAssertion

# 2026-02-05T00:00:00Z
START = 1_770_249_600
DAY = 86_400

OWNER = bytes.fromhex("0a" * 20)
ALICE = bytes.fromhex("a1" * 20)
BOB = bytes.fromhex("b0" * 20)
CAROL = bytes.fromhex("c0" * 20)
APP = bytes.fromhex("ee" * 20)
OTHER_APP = bytes.fromhex("ef" * 20)

ROOT = bytes.fromhex("10" * 32)
N1 = bytes.fromhex("01" * 32)
N2 = bytes.fromhex("02" * 32)
N3 = bytes.fromhex("03" * 32)

ETH_USD = 2_500.0


class FakeClock:
    def __init__(self, now: int = START) -> None:
        self.now = now

    def __call__(self) -> float:
        return float(self.now)

    def advance(self, seconds: int) -> None:
        self.now += seconds


def day_of(timestamp: int) -> int:
    return timestamp_to_yyyymmdd(timestamp)


def make_claim(
    holder: bytes,
    *,
    nullifier: bytes = N1,
    proof_date: int = 20260205,
    iaca_root: bytes = ROOT,
    prove_age_over_21: bool = True,
    prove_age_over_18: bool = True,
    prove_state: bool = False,
    proven_state: bytes = b"\x00\x00",
    referrer_id: Optional[int] = None,
    proof: Optional[bytes] = None,
) -> ClaimAssertion:
    """Claim with a mock proof bound to ``holder`` unless ``proof`` is given."""
    claim = ClaimAssertion(
        proof=b"",
        nullifier=nullifier,
        address_binding=bytes.fromhex("1b" * 32),
        proof_date=proof_date,
        event_id=bytes.fromhex("0e" * 32),
        iaca_root=iaca_root,
        bound_address=holder,
        prove_age_over_21=prove_age_over_21,
        prove_age_over_18=prove_age_over_18,
        prove_state=prove_state,
        proven_state=proven_state,
        referrer_id=referrer_id,
    )
    if proof is None:
        proof = MockProofOracle.prove(encode_public_inputs(claim))
    return dataclasses.replace(claim, proof=proof)


def make_system(clock: FakeClock, oracle: Optional[MockProofOracle] = None) -> Deployment:
    source = StaticPriceSource(ETH_USD, updated_at=clock.now)
    system = deploy(OWNER, source, oracle=oracle or MockProofOracle(), clock=clock)
    system.trust_roots.add_root(OWNER, ROOT, "Test DMV")
    return system
