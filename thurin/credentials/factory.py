"""
Backend factory for Proof Oracles.

Backends are imported only when selected, so the native ``honk`` bindings
are never loaded by deployments that run the mock.

WARNING: The mock backend is for testing only and must not be used in
production.
"""

from __future__ import annotations

import importlib

from .feature_flags import get_backend_type, parse_backend
from .interfaces import ProofOracle

# backend name -> "module:Class"
BACKEND_REGISTRY: dict[str, str] = {
    "mock": "thurin.credentials.adapters.mock_oracle:MockProofOracle",
    "honk": "thurin.credentials.adapters.honk_oracle:HonkProofOracle",
}


def _load_backend_class(backend_name: str) -> type[ProofOracle]:
    module_path, sep, class_name = BACKEND_REGISTRY[backend_name].partition(":")
    if not sep:
        module_path, _, class_name = module_path.rpartition(".")

    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as exc:
        raise ImportError(
            f"Cannot import module {module_path!r} for oracle backend {backend_name!r}"
        ) from exc

    backend_cls = getattr(module, class_name, None)
    if backend_cls is None:
        raise ImportError(f"{module_path!r} has no attribute {class_name!r}")
    if not (isinstance(backend_cls, type) and issubclass(backend_cls, ProofOracle)):
        raise TypeError(f"{module_path}.{class_name} is not a ProofOracle")
    return backend_cls


def get_proof_oracle(
    *, prefer: str | None = None, override: str | None = None
) -> ProofOracle:
    """
    Instantiate the selected Proof Oracle.

    ``override`` wins over everything, including an invalid ``prefer``;
    otherwise the name comes from ``get_backend_type(prefer)``.

    Raises:
        ValueError: If a backend name is unknown.
        ImportError: If the backend module or class cannot be found.
        TypeError: If the registered class does not implement ProofOracle.
    """
    backend_name = parse_backend(override, "override")
    if backend_name is None:
        backend_name = get_backend_type(prefer)
    return _load_backend_class(backend_name)()
