"""
No nullifier, claim value or proof byte may reach an observable event or a
log record.
"""

import dataclasses
import logging

from thurin.credentials import events as events_module

from .helpers import ALICE, APP, BOB, N1, N2, OWNER, make_claim


def _event_values(event):
    return [getattr(event, field.name) for field in dataclasses.fields(event)]


def test_event_types_have_no_claim_fields():
    forbidden = {"nullifier", "proof", "proof_date", "event_id", "iaca_root", "address_binding"}
    for event_type in (
        events_module.CredentialMinted,
        events_module.CredentialRenewed,
        events_module.CredentialBurned,
        events_module.OwnershipTransferred,
    ):
        names = {field.name for field in dataclasses.fields(event_type)}
        assert not names & forbidden


def test_lifecycle_events_and_logs_carry_no_secrets(system, caplog):
    seen = []
    system.events.subscribe(seen.append)
    alice = make_claim(ALICE, prove_state=True, proven_state=b"TX")
    bob = make_claim(BOB, nullifier=N2, referrer_id=1)

    with caplog.at_level(logging.DEBUG, logger="thurin"):
        system.registry.mint(ALICE, alice, system.registry.mint_price())
        system.registry.mint(BOB, bob, system.registry.mint_price())
        system.gateway.verify(APP, ALICE, alice)
        system.registry.renew(ALICE, alice, system.registry.renewal_price())
        system.registry.burn(BOB)
        system.trust_roots.remove_root(OWNER, alice.iaca_root)

    secrets = [N1, N2, alice.proof, bob.proof, alice.address_binding, alice.event_id]
    for event in seen:
        for value in _event_values(event):
            assert value not in secrets

    text = caplog.text
    for secret in secrets:
        assert secret.hex() not in text
        assert secret.hex()[:16] not in text
    assert "TX" not in text
