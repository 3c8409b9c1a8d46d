"""
Wiring for a complete credential system.

``deploy`` builds one ledger shared by every component, authorises the
registry to credit points, and returns the components together.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .admin import Administrator
from .config import RegistryConfig
from .events import EventBus
from .factory import get_proof_oracle
from .gateway import VerificationGateway
from .interfaces import ProofOracle
from .ledger import Clock, Ledger
from .points import PointsLedger
from .pricing import PriceSource
from .registry import CredentialRegistry
from .trust_roots import TrustRootRegistry
from .types import BytesLike


@dataclass
class Deployment:
    ledger: Ledger
    admin: Administrator
    trust_roots: TrustRootRegistry
    points: PointsLedger
    registry: CredentialRegistry
    gateway: VerificationGateway
    price_source: PriceSource

    @property
    def events(self) -> EventBus:
        return self.ledger.events


def deploy(
    owner: BytesLike,
    price_source: PriceSource,
    *,
    oracle: Optional[ProofOracle] = None,
    config: Optional[RegistryConfig] = None,
    clock: Optional[Clock] = None,
) -> Deployment:
    """
    Args:
        owner: Administrator address
        price_source: USD/ETH feed used for mint and renewal prices
        oracle: Proof Oracle; resolved from feature flags when omitted
        config: Registry settings; defaults from ``config.py`` when omitted
        clock: Unix-seconds clock; ``time.time`` when omitted
    """
    ledger = Ledger(clock=clock)
    admin = Administrator(ledger, owner)
    trust_roots = TrustRootRegistry(ledger, admin)
    points = PointsLedger(ledger, admin)
    oracle = oracle or get_proof_oracle()
    registry = CredentialRegistry(
        ledger, admin, trust_roots, oracle, price_source, points, config
    )
    points.authorize_writer(owner, registry.address)
    gateway = VerificationGateway(ledger, registry, oracle)
    return Deployment(
        ledger=ledger,
        admin=admin,
        trust_roots=trust_roots,
        points=points,
        registry=registry,
        gateway=gateway,
        price_source=price_source,
    )
