"""
Credential Issuance Walkthrough.

This script walks one holder through the credential lifecycle and then
verifies their claims over TCP through the gateway wire protocol.

Each scenario is self-contained and includes:
1. Deployment with the mock proof oracle
2. Registry or gateway calls
3. Results and interpretation
"""
import dataclasses
import time

import trio

from thurin.credentials import deploy, encode_public_inputs, hash_event_id, timestamp_to_yyyymmdd
from thurin.credentials.adapters.mock_oracle import MockProofOracle
from thurin.credentials.exceptions import CredentialError
from thurin.credentials.pricing import StaticPriceSource
from thurin.credentials.types import ClaimAssertion
from thurin.network.verification import VerifyRequest, serve_gateway, verify_remote

# Timeout for the TCP round trip (in seconds)
SERVE_TIMEOUT = 10

OWNER = bytes.fromhex("a0" * 20)
ALICE = bytes.fromhex("a1" * 20)
BOB = bytes.fromhex("b0" * 20)
APP = bytes.fromhex("c0" * 20)
ROOT = hash_event_id("walkthrough-iaca-root")


def print_header(title: str):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def print_subheader(title: str):
    """Print a formatted subheader."""
    print("\n" + "-" * 70)
    print(f"  {title}")
    print("-" * 70)


def make_claim(holder: bytes, nullifier: bytes, now: int) -> ClaimAssertion:
    unsigned = ClaimAssertion(
        proof=b"",
        nullifier=nullifier,
        address_binding=b"\x02" * 32,
        proof_date=timestamp_to_yyyymmdd(now),
        event_id=hash_event_id("walkthrough"),
        iaca_root=ROOT,
        bound_address=holder,
        prove_age_over_18=True,
        prove_state=True,
        proven_state=b"TX",
    )
    return dataclasses.replace(unsigned, proof=MockProofOracle.prove(encode_public_inputs(unsigned)))


def build_system(now: int):
    system = deploy(OWNER, StaticPriceSource(3000.0, updated_at=now), oracle=MockProofOracle())
    system.trust_roots.add_root(OWNER, ROOT, "Walkthrough DMV")
    return system


def scenario_1_lifecycle():
    """
    Scenario 1: Mint, Sybil Attempt, Renew, Burn

    A holder mints once; a second address replaying the same document
    nullifier is refused.
    """
    print_header("SCENARIO 1: Credential Lifecycle")
    now = int(time.time())
    system = build_system(now)
    registry = system.registry
    system.events.subscribe(lambda event: print(f"   event: {type(event).__name__}"))

    print_subheader("Mint")
    nullifier = b"\x01" * 32
    credential_id = registry.mint(ALICE, make_claim(ALICE, nullifier, now), registry.mint_price())
    print(f"   Credential #{credential_id} issued, expires at {registry.expiry_of(ALICE)}")

    print_subheader("Sybil attempt with the same document")
    try:
        registry.mint(BOB, make_claim(BOB, nullifier, now), registry.mint_price())
    except CredentialError as e:
        print(f"   ✓ Rejected: {type(e).__name__}")

    print_subheader("Renew and burn")
    registry.renew(ALICE, make_claim(ALICE, nullifier, now), registry.renewal_price())
    registry.burn(ALICE)
    print(f"   Valid after burn: {registry.is_valid(ALICE)}")
    print(f"   Nullifiers recorded: {registry.nullifier_count}")


async def scenario_2_remote_verification():
    """
    Scenario 2: Verification over TCP

    An application asks the gateway to check a holder's state claim. Only
    the per-application counter changes.
    """
    print_header("SCENARIO 2: Remote Verification")
    now = int(time.time())
    system = build_system(now)
    claim = make_claim(ALICE, b"\x03" * 32, now)
    system.registry.mint(ALICE, claim, system.registry.mint_price())

    with trio.fail_after(SERVE_TIMEOUT):
        async with trio.open_nursery() as nursery:
            listeners = await nursery.start(serve_gateway, system.gateway, 0)
            port = listeners[0].socket.getsockname()[1]
            print(f"   Gateway listening on 127.0.0.1:{port}")

            for holder in (ALICE, BOB):
                req = VerifyRequest(msg_v=1, app=APP, holder=holder, claim=claim.serialize())
                response = await verify_remote("127.0.0.1", port, req)
                outcome = "ok" if response.ok else f"{response.err_kind} ({response.err})"
                print(f"   0x{holder.hex()[:8]}…: {outcome}")

            nursery.cancel_scope.cancel()

    print(f"\n   Verifications counted for app: {system.gateway.verification_count(APP)}")


def main():
    scenario_1_lifecycle()
    trio.run(scenario_2_remote_verification)


if __name__ == "__main__":
    main()
