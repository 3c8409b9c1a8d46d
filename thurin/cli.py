"""
Command-Line Interface for Thurin credentials

Helpers for integrators: hash event ids, encode public inputs, quote prices,
check deployment config, and run an end-to-end demo against the mock oracle.
"""

import dataclasses
import json
import sys
import time
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from thurin import __version__
from thurin.credentials.codec import encode_public_inputs, hash_event_id, timestamp_to_yyyymmdd
from thurin.credentials.config import RegistryConfig, load_registry_config
from thurin.credentials.exceptions import CredentialError
from thurin.credentials.pricing import (
    StaticPriceSource,
    describe_schedule,
    fresh_quote,
    tier_index,
    to_wei,
    usd_cents_for,
)
from thurin.credentials.types import ClaimAssertion


@click.group()
@click.version_option(version=__version__)
def main():
    """
    Thurin credential tools.

    Issue and verify sybil-resistant "verified human" credentials backed by
    zero-knowledge proofs over a mobile driver's licence.
    """
    pass


@main.command("event-id")
@click.argument("name")
def event_id(name):
    """Hash an application event NAME to its field element."""
    click.echo("0x" + hash_event_id(name).hex())


@main.command()
@click.argument("claim_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--bind", "bind_to", type=str, help="Override boundAddress before encoding")
def encode(claim_file, bind_to):
    """
    Print the ordered public inputs for the claim in CLAIM_FILE (JSON).

    Examples:

        thurin encode claim.json

        thurin encode claim.json --bind 0x1234567890123456789012345678901234567890
    """
    try:
        data = json.loads(Path(claim_file).read_text(encoding="utf-8"))
        claim = ClaimAssertion.from_dict(data)
        if bind_to:
            claim = claim.bind_to(bind_to)
        inputs = encode_public_inputs(claim)
    except (ValueError, CredentialError) as e:
        click.echo(click.style(f"✗ {e}", fg="red"), err=True)
        sys.exit(1)
    for element in inputs:
        click.echo(f"0x{element:064x}")


@main.command()
@click.option("--issued", type=int, default=0, help="Credentials issued so far")
@click.option("--eth-usd", type=float, required=True, help="USD per ETH")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Registry YAML")
def price(issued, eth_usd, config_path):
    """Quote mint and renewal prices in wei."""
    now = int(time.time())
    try:
        config = load_registry_config(config_path) if config_path else RegistryConfig()
        quote = fresh_quote(StaticPriceSource(eth_usd, updated_at=now), now, config.max_price_age)
    except CredentialError as e:
        click.echo(click.style(f"✗ {e}", fg="red"), err=True)
        sys.exit(1)
    mint_cents = usd_cents_for(config.price_tiers, issued)
    click.echo(f"tier:    {tier_index(config.price_tiers, issued)}")
    click.echo(f"mint:    {to_wei(mint_cents, quote)} wei (${mint_cents / 100:.2f})")
    click.echo(
        f"renewal: {to_wei(config.renewal_price_cents, quote)} wei "
        f"(${config.renewal_price_cents / 100:.2f})"
    )


@main.command("check-config")
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False))
def check_config(config_path):
    """Validate a registry YAML file and print the effective settings."""
    try:
        config = load_registry_config(config_path)
    except CredentialError as e:
        click.echo(click.style(f"✗ {e}", fg="red"), err=True)
        sys.exit(1)
    click.echo(click.style("✓ Configuration valid", fg="green"))
    click.echo(f"  Validity: {config.validity_period // 86400} days")
    click.echo(
        f"  Proof date window: -{config.proof_date_past_days}/+{config.proof_date_future_days} days"
    )
    for line in describe_schedule(config.price_tiers):
        click.echo(f"  {line}")


@main.command()
@click.option("--verbose", is_flag=True, help="Print lifecycle events as they happen")
def demo(verbose):
    """Run mint, verify, renew and burn against the mock oracle."""
    from thurin.credentials.adapters.mock_oracle import MockProofOracle
    from thurin.credentials.deployment import deploy

    now = int(time.time())
    owner = bytes.fromhex("a0" * 20)
    alice = bytes.fromhex("a1" * 20)
    bob = bytes.fromhex("b0" * 20)
    app = bytes.fromhex("c0" * 20)
    root = hash_event_id("demo-iaca-root")

    system = deploy(
        owner,
        StaticPriceSource(3000.0, updated_at=now),
        oracle=MockProofOracle(),
        clock=lambda: now,
    )
    if verbose:
        system.events.subscribe(lambda event: click.echo(f"  event: {type(event).__name__}"))
    system.trust_roots.add_root(owner, root, "Demo DMV")

    def claim_for(address, proof_date, nullifier=b"\x01" * 32):
        unsigned = ClaimAssertion(
            proof=b"",
            nullifier=nullifier,
            address_binding=b"\x02" * 32,
            proof_date=proof_date,
            event_id=hash_event_id("demo-app"),
            iaca_root=root,
            bound_address=address,
            prove_age_over_21=True,
        )
        proof = MockProofOracle.prove(encode_public_inputs(unsigned))
        return dataclasses.replace(unsigned, proof=proof)

    today = timestamp_to_yyyymmdd(now)
    in_two_days = timestamp_to_yyyymmdd(now + 2 * 86400)
    rows = []

    def step(name, action):
        try:
            result = action()
            rows.append((name, "ok", "" if result is None else str(result)))
        except CredentialError as e:
            rows.append((name, "rejected", type(e).__name__))

    registry, gateway = system.registry, system.gateway
    step("verify before mint", lambda: gateway.verify(app, alice, claim_for(alice, today)))
    step("mint (alice)", lambda: registry.mint(alice, claim_for(alice, today), registry.mint_price()))
    step("is_valid (alice)", lambda: registry.is_valid(alice))
    step("mint reusing nullifier (bob)", lambda: registry.mint(bob, claim_for(bob, today), registry.mint_price()))
    step("verify (alice)", lambda: gateway.verify(app, alice, claim_for(alice, today)))
    step(
        "verify with future date",
        lambda: gateway.verify(app, alice, claim_for(alice, in_two_days)),
    )
    step("renew (alice)", lambda: registry.renew(alice, claim_for(alice, today), registry.renewal_price()))
    step("burn (alice)", lambda: registry.burn(alice))

    table = Table(title="Thurin demo")
    table.add_column("Step")
    table.add_column("Outcome")
    table.add_column("Detail")
    for name, outcome, detail in rows:
        style = "green" if outcome == "ok" else "yellow"
        table.add_row(name, f"[{style}]{outcome}[/{style}]", detail)
    Console().print(table)
    click.echo(f"Nullifiers used: {registry.nullifier_count}")
    click.echo(f"Verifications by app: {gateway.verification_count(app)}")


@main.command()
def version():
    """Show version information."""
    click.echo(f"\nThurin credentials v{__version__}\n")


if __name__ == "__main__":
    main()
