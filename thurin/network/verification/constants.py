"""Protocol constants for the verification gateway wire format."""

from __future__ import annotations

from ...credentials.config import MAX_PROOF_BYTES

PROTOCOL_ID = "/thurin/verify/1.0.0"
MSG_V = 1
ADDRESS_BYTES = 20

MAX_CLAIM_BYTES = MAX_PROOF_BYTES + 1024
MAX_ERR_CHARS = 128

# Kinds a response may report; integrators branch on these
ERROR_KINDS = frozenset(
    {
        "PreconditionViolation",
        "FreshnessViolation",
        "TrustViolation",
        "ProofInvalid",
        "StalePrice",
        "AdministrativeViolation",
        "MalformedInput",
        "ProtocolError",
        "InternalError",
    }
)


def is_valid_error_kind(kind: str) -> bool:
    return kind in ERROR_KINDS
