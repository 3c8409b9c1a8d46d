"""
Protocol configuration for Thurin credentials.

Constants shared by the registry, the verification gateway and the
public-input codec. Values that an administrator may change at runtime live
in ``RegistryConfig``; everything here is a protocol constant or a default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .exceptions import InvalidConfiguration

# ============================================================================
# FIELD PARAMETERS
# ============================================================================

# BN254 scalar field modulus (the Noir circuit's native Field)
BN254_MODULUS = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)
FIELD_ELEMENT_BYTES = 32

# ============================================================================
# PUBLIC INPUT LAYOUT
# ============================================================================

# Order is a protocol constant: changing it invalidates every issued proof.
PUBLIC_INPUT_FIELDS: Tuple[str, ...] = (
    "nullifier",
    "address_binding",
    "proof_date",
    "event_id",
    "iaca_root",
    "bound_address",
    "prove_age_over_21",
    "prove_age_over_18",
    "prove_state",
    "proven_state_0",
    "proven_state_1",
)
PUBLIC_INPUT_COUNT = len(PUBLIC_INPUT_FIELDS)

NULLIFIER_BYTES = 32
ADDRESS_BINDING_BYTES = 32
EVENT_ID_BYTES = 32
IACA_ROOT_BYTES = 32
ADDRESS_BYTES = 20
STATE_CODE_BYTES = 2

CLAIM_VERSION = 1
MAX_PROOF_BYTES = 16 * 1024

# ============================================================================
# LIFECYCLE
# ============================================================================

SECONDS_PER_DAY = 86_400

DEFAULT_VALIDITY_PERIOD = 365 * SECONDS_PER_DAY
MIN_VALIDITY_PERIOD = 30 * SECONDS_PER_DAY

# Proof date window in whole UTC days: [today - past, today + future]
PROOF_DATE_TOLERANCE_DAYS = 1
PROOF_DATE_FUTURE_DAYS = 0
MAX_PROOF_DATE_TOLERANCE_DAYS = 30

# ============================================================================
# PRICING AND POINTS
# ============================================================================

# (supply_cap, usd_cents); the last tier has no cap
DEFAULT_PRICE_TIERS: Tuple[Tuple[Optional[int], int], ...] = (
    (500, 200),
    (10_000, 500),
    (None, 1_000),
)
DEFAULT_RENEWAL_PRICE_CENTS = 500
DEFAULT_MAX_PRICE_AGE = 3_600
WEI_PER_ETH = 10**18

MINT_POINTS = 100
REFERRAL_POINTS = 50


# ============================================================================
# RUNTIME CONFIGURATION
# ============================================================================


@dataclass
class PriceTier:
    """One step of the mint price schedule."""

    supply_cap: Optional[int]
    usd_cents: int


@dataclass
class RegistryConfig:
    """
    Administrator-owned settings passed by reference into the registry and
    gateway. Mutate only through the registry's gated setters.

    Attributes:
        validity_period: Seconds a credential stays valid after issuance
        proof_date_past_days: Days a proof date may lag behind today
        proof_date_future_days: Days a proof date may run ahead of today
        price_tiers: Mint price schedule keyed by total issued count
        renewal_price_cents: Flat renewal price in USD cents
        max_price_age: Seconds before a price quote counts as stale
    """

    validity_period: int = DEFAULT_VALIDITY_PERIOD
    proof_date_past_days: int = PROOF_DATE_TOLERANCE_DAYS
    proof_date_future_days: int = PROOF_DATE_FUTURE_DAYS
    price_tiers: List[PriceTier] = field(
        default_factory=lambda: [PriceTier(cap, cents) for cap, cents in DEFAULT_PRICE_TIERS]
    )
    renewal_price_cents: int = DEFAULT_RENEWAL_PRICE_CENTS
    max_price_age: int = DEFAULT_MAX_PRICE_AGE

    def validate(self) -> None:
        if self.validity_period < MIN_VALIDITY_PERIOD:
            raise InvalidConfiguration(
                f"validity_period {self.validity_period} below floor {MIN_VALIDITY_PERIOD}"
            )
        for name in ("proof_date_past_days", "proof_date_future_days"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= MAX_PROOF_DATE_TOLERANCE_DAYS:
                raise InvalidConfiguration(f"{name} out of range: {value!r}")
        if not self.price_tiers:
            raise InvalidConfiguration("price schedule must have at least one tier")
        previous_cap = 0
        for index, tier in enumerate(self.price_tiers):
            last = index == len(self.price_tiers) - 1
            if tier.usd_cents <= 0:
                raise InvalidConfiguration(f"tier {index} price must be positive")
            if last:
                if tier.supply_cap is not None:
                    raise InvalidConfiguration("last tier must be open-ended")
            elif tier.supply_cap is None or tier.supply_cap <= previous_cap:
                raise InvalidConfiguration(f"tier {index} cap must increase")
            else:
                previous_cap = tier.supply_cap
        if self.renewal_price_cents <= 0:
            raise InvalidConfiguration("renewal price must be positive")
        if self.max_price_age <= 0:
            raise InvalidConfiguration("max_price_age must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryConfig":
        if not isinstance(data, dict):
            raise InvalidConfiguration("registry config must be a mapping")
        config = cls()
        if "validity_days" in data:
            config.validity_period = int(data["validity_days"]) * SECONDS_PER_DAY
        window = data.get("proof_date_window", {}) or {}
        if "past_days" in window:
            config.proof_date_past_days = int(window["past_days"])
        if "future_days" in window:
            config.proof_date_future_days = int(window["future_days"])
        pricing = data.get("pricing", {}) or {}
        if "tiers" in pricing:
            config.price_tiers = [
                PriceTier(
                    supply_cap=None if tier.get("cap") is None else int(tier["cap"]),
                    usd_cents=int(tier["usd_cents"]),
                )
                for tier in pricing["tiers"]
            ]
        if "renewal_usd_cents" in pricing:
            config.renewal_price_cents = int(pricing["renewal_usd_cents"])
        if "max_price_age" in pricing:
            config.max_price_age = int(pricing["max_price_age"])
        config.validate()
        return config


def load_registry_config(path: Union[str, Path]) -> RegistryConfig:
    """
    Load a deployment YAML file into a validated ``RegistryConfig``.

    Example file::

        validity_days: 365
        proof_date_window:
          past_days: 1
          future_days: 0
        pricing:
          renewal_usd_cents: 500
          tiers:
            - {cap: 500, usd_cents: 200}
            - {usd_cents: 1000}
    """
    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise InvalidConfiguration(f"cannot read registry config {path}: {exc}") from exc
    return RegistryConfig.from_dict(data)


# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate protocol constants.

    Raises:
        AssertionError: If a constant is inconsistent
    """
    assert PUBLIC_INPUT_COUNT == 11, "public input layout must have 11 elements"
    assert BN254_MODULUS < 2 ** (8 * FIELD_ELEMENT_BYTES), "modulus exceeds field width"
    assert MIN_VALIDITY_PERIOD <= DEFAULT_VALIDITY_PERIOD, "default below floor"
    assert PROOF_DATE_TOLERANCE_DAYS <= MAX_PROOF_DATE_TOLERANCE_DAYS
    assert DEFAULT_PRICE_TIERS[-1][0] is None, "last price tier must be open-ended"
    assert MINT_POINTS > 0 and REFERRAL_POINTS > 0
    return True


# Auto-validate on import
validate_config()
