"""CBOR message schemas for gateway verification requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import cbor2

from .constants import ADDRESS_BYTES, MAX_CLAIM_BYTES, MAX_ERR_CHARS, MSG_V, is_valid_error_kind
from .errors import SchemaError, SizeLimitError

REQUEST_MAX_BYTES = MAX_CLAIM_BYTES + 256
RESPONSE_MAX_BYTES = 1024


def _require_bytes(value: Any, field: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise SchemaError(f"{field} must be bytes")
    return bytes(value)


def _require_address(value: Any, field: str) -> bytes:
    raw = _require_bytes(value, field)
    if len(raw) != ADDRESS_BYTES:
        raise SchemaError(f"{field} must be {ADDRESS_BYTES} bytes")
    return raw


def _load_map(blob: Any, max_bytes: int, what: str) -> dict:
    if not isinstance(blob, (bytes, bytearray)):
        raise SchemaError(f"{what} blob must be bytes")
    if len(blob) > max_bytes:
        raise SizeLimitError(f"{what} too large")
    try:
        payload = cbor2.loads(bytes(blob))
    except Exception as exc:
        raise SchemaError(f"{what} is not valid CBOR") from exc
    if not isinstance(payload, dict):
        raise SchemaError(f"{what} payload must be a dict")
    return payload


@dataclass(frozen=True)
class VerifyRequest:
    """
    Attributes:
        msg_v: Message version
        app: Calling application address (the counter key)
        holder: Address whose credential and claims are checked
        claim: CBOR-encoded ``ClaimAssertion``
    """

    msg_v: int
    app: bytes
    holder: bytes
    claim: bytes

    def validate(self) -> None:
        if self.msg_v != MSG_V:
            raise SchemaError("unsupported msg_v")
        _require_address(self.app, "app")
        _require_address(self.holder, "holder")
        claim = _require_bytes(self.claim, "claim")
        if not claim:
            raise SchemaError("claim required")
        if len(claim) > MAX_CLAIM_BYTES:
            raise SizeLimitError("claim too large")


@dataclass(frozen=True)
class VerifyResponse:
    msg_v: int
    ok: bool
    err_kind: Optional[str] = None
    err: Optional[str] = None

    def validate(self) -> None:
        if self.msg_v != MSG_V:
            raise SchemaError("unsupported msg_v")
        if self.ok:
            if self.err_kind is not None or self.err not in (None, ""):
                raise SchemaError("err must be empty when ok=True")
            return
        if not isinstance(self.err_kind, str) or not is_valid_error_kind(self.err_kind):
            raise SchemaError("unknown err_kind")
        if not isinstance(self.err, str) or not self.err:
            raise SchemaError("err required when ok=False")
        if len(self.err) > MAX_ERR_CHARS:
            raise SchemaError("err too long")


def encode_request(req: VerifyRequest) -> bytes:
    req.validate()
    blob = cbor2.dumps(
        {
            "msg_v": req.msg_v,
            "app": bytes(req.app),
            "holder": bytes(req.holder),
            "claim": bytes(req.claim),
        }
    )
    if len(blob) > REQUEST_MAX_BYTES:
        raise SizeLimitError("request too large")
    return blob


def decode_request(blob: bytes) -> VerifyRequest:
    payload = _load_map(blob, REQUEST_MAX_BYTES, "request")
    try:
        msg_v = int(payload.get("msg_v", -1))
    except (TypeError, ValueError) as exc:
        raise SchemaError("msg_v must be an integer") from exc
    req = VerifyRequest(
        msg_v=msg_v,
        app=_require_address(payload.get("app", b""), "app"),
        holder=_require_address(payload.get("holder", b""), "holder"),
        claim=_require_bytes(payload.get("claim", b""), "claim"),
    )
    req.validate()
    return req


def encode_response(resp: VerifyResponse) -> bytes:
    resp.validate()
    blob = cbor2.dumps(
        {
            "msg_v": resp.msg_v,
            "ok": resp.ok,
            "err_kind": resp.err_kind,
            "err": resp.err,
        }
    )
    if len(blob) > RESPONSE_MAX_BYTES:
        raise SizeLimitError("response too large")
    return blob


def decode_response(blob: bytes) -> VerifyResponse:
    payload = _load_map(blob, RESPONSE_MAX_BYTES, "response")
    err_kind = payload.get("err_kind")
    err = payload.get("err")
    if err_kind is not None and not isinstance(err_kind, str):
        raise SchemaError("err_kind must be a string")
    if err is not None and not isinstance(err, str):
        raise SchemaError("err must be a string")
    try:
        msg_v = int(payload.get("msg_v", -1))
    except (TypeError, ValueError) as exc:
        raise SchemaError("msg_v must be an integer") from exc
    resp = VerifyResponse(
        msg_v=msg_v,
        ok=bool(payload.get("ok", False)),
        err_kind=err_kind,
        err=err,
    )
    resp.validate()
    return resp
