"""Verification gateway wire protocol."""

from .client import request_verification, verify_remote
from .constants import PROTOCOL_ID
from .errors import AppMismatch, ProtocolError, SchemaError, SizeLimitError
from .handler import handle_verify_request_bytes
from .messages import VerifyRequest, VerifyResponse
from .protocol import handle_verify_stream, serve_gateway

__all__ = [
    "AppMismatch",
    "PROTOCOL_ID",
    "ProtocolError",
    "SchemaError",
    "SizeLimitError",
    "VerifyRequest",
    "VerifyResponse",
    "handle_verify_request_bytes",
    "handle_verify_stream",
    "request_verification",
    "serve_gateway",
    "verify_remote",
]
