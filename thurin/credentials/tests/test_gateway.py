"""Unit tests for the verification gateway."""

import pytest

from thurin.credentials.config import DEFAULT_VALIDITY_PERIOD
from thurin.credentials.exceptions import (
    FreshnessViolation,
    InvalidProof,
    NoValidCredential,
    ProofDateFromFuture,
    ProofDateTooOld,
)

from .helpers import (
    ALICE,
    APP,
    BOB,
    DAY,
    N2,
    OTHER_APP,
    OWNER,
    START,
    day_of,
    make_claim,
    make_system,
)


def _mint(system, holder, **kwargs):
    claim = make_claim(holder, **kwargs)
    system.registry.mint(holder, claim, system.registry.mint_price())
    return claim


def test_verify_without_credential_never_reaches_oracle(system, oracle):
    claim = make_claim(ALICE)
    with pytest.raises(NoValidCredential):
        system.gateway.verify(APP, ALICE, claim)
    assert oracle.calls == []
    assert system.gateway.verification_count(APP) == 0


def test_verify_expired_credential(system, oracle, clock):
    _mint(system, ALICE)
    clock.now = START + DEFAULT_VALIDITY_PERIOD + 1
    calls = len(oracle.calls)
    claim = make_claim(ALICE, proof_date=day_of(clock.now))
    with pytest.raises(NoValidCredential):
        system.gateway.verify(APP, ALICE, claim)
    assert len(oracle.calls) == calls


def test_verify_after_burn(system):
    claim = _mint(system, ALICE)
    system.registry.burn(ALICE)
    with pytest.raises(NoValidCredential):
        system.gateway.verify(APP, ALICE, claim)


def test_verify_success_counts_per_app(system):
    claim = _mint(system, ALICE)
    assert system.gateway.verify(APP, ALICE, claim) is True
    assert system.gateway.verify(APP, ALICE, claim) is True
    assert system.gateway.verify(OTHER_APP, ALICE, claim) is True

    assert system.gateway.verification_count(APP) == 2
    assert system.gateway.verification_count(OTHER_APP) == 1
    assert system.gateway.verification_count(BOB) == 0
    assert system.gateway.total_verifications == 3


def test_verify_checks_proof_date_window(system, clock):
    _mint(system, ALICE)
    with pytest.raises(ProofDateFromFuture) as excinfo:
        system.gateway.verify(APP, ALICE, make_claim(ALICE, proof_date=day_of(START + 2 * DAY)))
    assert isinstance(excinfo.value, FreshnessViolation)

    clock.advance(10 * DAY)
    with pytest.raises(ProofDateTooOld):
        system.gateway.verify(APP, ALICE, make_claim(ALICE))
    assert system.gateway.verification_count(APP) == 0


def test_fresh_proof_verifies_long_after_mint(system, clock):
    _mint(system, ALICE)
    clock.advance(100 * DAY)
    claim = make_claim(ALICE, proof_date=day_of(clock.now))
    assert system.gateway.verify(APP, ALICE, claim)


def test_proof_bound_to_other_holder_rejected(system):
    _mint(system, ALICE)
    _mint(system, BOB, nullifier=N2)
    alice_claim = make_claim(ALICE)
    with pytest.raises(InvalidProof):
        system.gateway.verify(APP, BOB, alice_claim)
    assert system.gateway.verification_count(APP) == 0


def test_forged_proof_rejected(system):
    _mint(system, ALICE)
    with pytest.raises(InvalidProof):
        system.gateway.verify(APP, ALICE, make_claim(ALICE, proof=b"\x01" * 64))


def test_claims_other_than_registered_ones_can_be_verified(system):
    _mint(system, ALICE, prove_age_over_21=False)
    claim = make_claim(ALICE, prove_state=True, proven_state=b"TX", prove_age_over_21=True)
    assert system.gateway.verify(APP, ALICE, claim)


def test_revoked_root_does_not_block_verification(system):
    claim = _mint(system, ALICE)
    system.trust_roots.remove_root(OWNER, claim.iaca_root)
    assert system.registry.is_valid(ALICE)
    assert system.gateway.verify(APP, ALICE, claim)


def test_verification_state_is_holder_agnostic(clock):
    same_holder = make_system(clock)
    different_holders = make_system(clock)
    for system in (same_holder, different_holders):
        _mint(system, ALICE)
        _mint(system, BOB, nullifier=N2)

    alice = make_claim(ALICE)
    bob = make_claim(BOB, nullifier=N2)
    same_holder.gateway.verify(APP, ALICE, alice)
    same_holder.gateway.verify(APP, ALICE, alice)
    different_holders.gateway.verify(APP, ALICE, alice)
    different_holders.gateway.verify(APP, BOB, bob)

    assert same_holder.gateway._counts == different_holders.gateway._counts
    assert same_holder.gateway.total_verifications == different_holders.gateway.total_verifications


def test_verify_emits_no_events(system):
    claim = _mint(system, ALICE)
    events = []
    system.events.subscribe(events.append)
    system.gateway.verify(APP, ALICE, claim)
    assert events == []
