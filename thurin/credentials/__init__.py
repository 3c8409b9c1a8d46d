"""Public API for thurin.credentials."""
from __future__ import annotations

from importlib import import_module

from .codec import encode_public_inputs, hash_event_id, timestamp_to_yyyymmdd
from .config import RegistryConfig, load_registry_config
from .deployment import Deployment, deploy
from .factory import get_proof_oracle
from .feature_flags import get_backend_type, set_backend_type
from .gateway import VerificationGateway
from .interfaces import ProofOracle
from .registry import CredentialRegistry
from .types import ClaimAssertion, Credential

__all__ = [
    "ClaimAssertion",
    "Credential",
    "CredentialRegistry",
    "Deployment",
    "ProofOracle",
    "RegistryConfig",
    "VerificationGateway",
    "deploy",
    "encode_public_inputs",
    "get_backend_type",
    "get_proof_oracle",
    "hash_event_id",
    "load_registry_config",
    "set_backend_type",
    "timestamp_to_yyyymmdd",
    "HonkProofOracle",
    "MockProofOracle",
]

_LAZY_EXPORTS = {
    "HonkProofOracle": "adapters.honk_oracle",
    "MockProofOracle": "adapters.mock_oracle",
}


def __getattr__(name: str):
    if name in _LAZY_EXPORTS:
        module = import_module(f"{__name__}.{_LAZY_EXPORTS[name]}")
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
