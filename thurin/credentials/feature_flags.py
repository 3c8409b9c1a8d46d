"""
Proof Oracle backend selection.

The backend is taken from the first of these that is set: an explicit
``prefer`` argument, the in-process override, the ``THURIN_ORACLE_BACKEND``
environment variable. ``mock`` is used when none is.

WARNING: the mock backend accepts self-made tags and has no soundness; use it
for tests and demos only.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Final, Iterator

BACKENDS: Final[frozenset[str]] = frozenset({"mock", "honk"})
DEFAULT_BACKEND: Final[str] = "mock"
ENV_VAR: Final[str] = "THURIN_ORACLE_BACKEND"

_override: str | None = None


def parse_backend(value: object, origin: str = "argument") -> str | None:
    """Canonical backend name for ``value``; None when it is unset or blank."""
    if value is None:
        return None
    name = value.strip().lower() if isinstance(value, str) else value
    if name == "":
        return None
    if not isinstance(name, str) or name not in BACKENDS:
        raise ValueError(
            f"Unknown oracle backend {value!r} from {origin}; "
            f"choose from {', '.join(sorted(BACKENDS))}"
        )
    return name


def get_backend_type(prefer: str | None = None) -> str:
    """
    Resolve the backend name.

    Raises:
        ValueError: If the first configured source names an unknown backend.
    """
    sources = (
        ("prefer", prefer),
        ("override", _override),
        (ENV_VAR, os.environ.get(ENV_VAR)),
    )
    for origin, value in sources:
        name = parse_backend(value, origin)
        if name is not None:
            return name
    return DEFAULT_BACKEND


def set_backend_type(value: str | None) -> None:
    """Force a backend for this process, or clear the override with None."""
    global _override
    _override = parse_backend(value, "override")


@contextmanager
def backend_override(value: str | None) -> Iterator[None]:
    """Apply ``set_backend_type`` for the duration of a ``with`` block."""
    previous = _override
    set_backend_type(value)
    try:
        yield
    finally:
        set_backend_type(previous)
