"""Client utilities for the verification gateway."""

from __future__ import annotations

import trio

from .limits import READ_TIMEOUT, WRITE_TIMEOUT, read_frame, write_frame
from .messages import VerifyRequest, VerifyResponse, decode_response, encode_request


async def request_verification(
    stream: trio.abc.Stream, req: VerifyRequest, *, timeout: float | None = None
) -> VerifyResponse:
    frame_timeout = READ_TIMEOUT if timeout is None else timeout
    write_timeout = WRITE_TIMEOUT if timeout is None else timeout
    try:
        await write_frame(stream, encode_request(req), timeout=write_timeout)
        return decode_response(await read_frame(stream, timeout=frame_timeout))
    finally:
        await stream.aclose()


async def verify_remote(
    host: str, port: int, req: VerifyRequest, *, timeout: float | None = None
) -> VerifyResponse:
    stream = await trio.open_tcp_stream(host, port)
    return await request_verification(stream, req, timeout=timeout)
