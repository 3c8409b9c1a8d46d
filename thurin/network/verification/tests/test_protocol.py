"""Stream-level tests for gateway framing, serving and the client."""

from __future__ import annotations

import struct
from functools import partial

import pytest
import trio
import trio.testing

from thurin.credentials.tests.helpers import ALICE, APP, OTHER_APP, make_claim
from thurin.network.verification.client import request_verification, verify_remote
from thurin.network.verification.constants import MSG_V
from thurin.network.verification.errors import SchemaError, SizeLimitError
from thurin.network.verification.limits import MAX_FRAME_BYTES, read_frame, write_frame
from thurin.network.verification.messages import VerifyRequest, decode_response, encode_request
from thurin.network.verification.protocol import handle_verify_stream, serve_gateway


def _req(claim_blob: bytes) -> VerifyRequest:
    return VerifyRequest(msg_v=MSG_V, app=APP, holder=ALICE, claim=claim_blob)


@pytest.mark.trio
async def test_frame_roundtrip() -> None:
    left, right = trio.testing.memory_stream_pair()
    await write_frame(left, b"payload")
    assert await read_frame(right) == b"payload"


@pytest.mark.trio
async def test_write_frame_rejects_oversized() -> None:
    left, _ = trio.testing.memory_stream_pair()
    with pytest.raises(SizeLimitError):
        await write_frame(left, b"x" * (MAX_FRAME_BYTES + 1))


@pytest.mark.trio
async def test_read_frame_rejects_oversized_header() -> None:
    left, right = trio.testing.memory_stream_pair()
    await left.send_all(struct.pack(">I", MAX_FRAME_BYTES + 1))
    with pytest.raises(SizeLimitError):
        await read_frame(right)


@pytest.mark.trio
async def test_read_frame_rejects_truncated_payload() -> None:
    left, right = trio.testing.memory_stream_pair()
    await left.send_all(struct.pack(">I", 10) + b"short")
    await left.aclose()
    with pytest.raises(SchemaError, match="EOF"):
        await read_frame(right)


@pytest.mark.trio
async def test_read_frame_times_out() -> None:
    _, right = trio.testing.memory_stream_pair()
    with pytest.raises(trio.TooSlowError):
        await read_frame(right, timeout=0.05)


@pytest.mark.trio
async def test_client_and_stream_handler(minted) -> None:
    system, claim = minted
    client_stream, server_stream = trio.testing.memory_stream_pair()

    async with trio.open_nursery() as nursery:
        nursery.start_soon(handle_verify_stream, server_stream, system.gateway)
        response = await request_verification(client_stream, _req(claim.serialize()))

    assert response.ok is True
    assert system.gateway.verification_count(APP) == 1


@pytest.mark.trio
async def test_stream_handler_answers_oversized_frame(system) -> None:
    client_stream, server_stream = trio.testing.memory_stream_pair()
    await client_stream.send_all(struct.pack(">I", MAX_FRAME_BYTES + 1))

    async with trio.open_nursery() as nursery:
        nursery.start_soon(handle_verify_stream, server_stream, system.gateway)
        response = decode_response(await read_frame(client_stream))

    assert response.ok is False
    assert response.err_kind == "ProtocolError"
    assert response.err == "SizeLimitError"


@pytest.mark.trio
async def test_stream_handler_reports_rejection(system) -> None:
    client_stream, server_stream = trio.testing.memory_stream_pair()
    await write_frame(client_stream, encode_request(_req(make_claim(ALICE).serialize())))

    async with trio.open_nursery() as nursery:
        nursery.start_soon(handle_verify_stream, server_stream, system.gateway)
        response = decode_response(await read_frame(client_stream))

    assert response.err_kind == "PreconditionViolation"


@pytest.mark.trio
async def test_serve_gateway_over_tcp(minted) -> None:
    system, claim = minted
    async with trio.open_nursery() as nursery:
        listeners = await nursery.start(serve_gateway, system.gateway, 0)
        port = listeners[0].socket.getsockname()[1]
        response = await verify_remote("127.0.0.1", port, _req(claim.serialize()))
        nursery.cancel_scope.cancel()

    assert response.ok is True


@pytest.mark.trio
async def test_serve_gateway_pinned_to_one_app(minted) -> None:
    system, claim = minted
    async with trio.open_nursery() as nursery:
        listeners = await nursery.start(partial(serve_gateway, system.gateway, 0, app=OTHER_APP))
        port = listeners[0].socket.getsockname()[1]
        response = await verify_remote("127.0.0.1", port, _req(claim.serialize()))
        nursery.cancel_scope.cancel()

    assert response.ok is False
    assert response.err == "AppMismatch"
    assert system.gateway.verification_count(APP) == 0
