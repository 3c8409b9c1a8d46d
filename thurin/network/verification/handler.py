"""Pure request/response handler for gateway verification."""

from __future__ import annotations

import logging
from typing import Optional

from ...credentials.exceptions import (
    AdministrativeViolation,
    CredentialError,
    FreshnessViolation,
    MalformedInput,
    PreconditionViolation,
    ProofInvalid,
    StalePrice,
    TrustViolation,
)
from ...credentials.gateway import VerificationGateway
from ...credentials.types import ClaimAssertion, to_address
from .constants import MSG_V
from .errors import AppMismatch, ProtocolError
from .messages import VerifyResponse, decode_request, encode_response

logger = logging.getLogger(__name__)

_KIND_ORDER = (
    (MalformedInput, "MalformedInput"),
    (PreconditionViolation, "PreconditionViolation"),
    (FreshnessViolation, "FreshnessViolation"),
    (TrustViolation, "TrustViolation"),
    (ProofInvalid, "ProofInvalid"),
    (StalePrice, "StalePrice"),
    (AdministrativeViolation, "AdministrativeViolation"),
)


def error_kind(exc: BaseException) -> str:
    for cls, kind in _KIND_ORDER:
        if isinstance(exc, cls):
            return kind
    if isinstance(exc, ProtocolError):
        return "ProtocolError"
    return "InternalError"


def error_response(exc: BaseException) -> VerifyResponse:
    # Class name only: messages could echo request content.
    return VerifyResponse(msg_v=MSG_V, ok=False, err_kind=error_kind(exc), err=type(exc).__name__)


def handle_verify_request_bytes(
    request_blob: bytes, gateway: VerificationGateway, app: Optional[bytes] = None
) -> bytes:
    """
    Decode one request, run it through ``gateway`` and encode the response.

    The ``app`` field of a request is not authenticated. Pass ``app`` to pin
    the counter key; requests naming any other app are refused before the
    gateway is called.
    """
    try:
        req = decode_request(request_blob)
        claim = ClaimAssertion.deserialize(req.claim)
    except (ProtocolError, MalformedInput) as exc:
        return encode_response(error_response(exc))

    if app is not None and req.app != to_address(app):
        logger.debug("request for unserved app refused")
        return encode_response(error_response(AppMismatch()))

    try:
        gateway.verify(req.app, req.holder, claim)
    except CredentialError as exc:
        logger.debug("verification rejected: %s", type(exc).__name__)
        return encode_response(error_response(exc))
    except Exception as exc:
        logger.exception("gateway error")
        return encode_response(error_response(exc))

    return encode_response(VerifyResponse(msg_v=MSG_V, ok=True))
