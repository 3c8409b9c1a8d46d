"""
Wire framing for the verification protocol.

Every message travels as a 4-byte big-endian length followed by that many
bytes of CBOR. Frames above ``MAX_FRAME_BYTES`` are refused on both sides,
and each read or write must finish within its timeout.
"""

from __future__ import annotations

import trio

from .errors import SchemaError, SizeLimitError

MAX_FRAME_BYTES = 32 * 1024
READ_TIMEOUT = 5.0
WRITE_TIMEOUT = 5.0

LENGTH_PREFIX_BYTES = 4


async def receive_exact(stream: trio.abc.ReceiveStream, size: int) -> bytes:
    """Read exactly ``size`` bytes; a closed stream before then is a SchemaError."""
    if size < 0:
        raise SchemaError(f"negative read of {size} bytes")
    buf = bytearray()
    while len(buf) < size:
        chunk = await stream.receive_some(size - len(buf))
        if not chunk:
            raise SchemaError(f"EOF after {len(buf)} of {size} bytes")
        buf += chunk
    return bytes(buf)


def _check_size(length: int, max_bytes: int) -> None:
    if length > max_bytes:
        raise SizeLimitError(f"frame of {length} bytes exceeds limit {max_bytes}")


async def read_frame(
    stream: trio.abc.ReceiveStream,
    max_bytes: int = MAX_FRAME_BYTES,
    timeout: float = READ_TIMEOUT,
) -> bytes:
    with trio.fail_after(timeout):
        prefix = await receive_exact(stream, LENGTH_PREFIX_BYTES)
        length = int.from_bytes(prefix, "big")
        _check_size(length, max_bytes)
        return await receive_exact(stream, length)


async def write_frame(
    stream: trio.abc.SendStream,
    payload: bytes,
    max_bytes: int = MAX_FRAME_BYTES,
    timeout: float = WRITE_TIMEOUT,
) -> None:
    _check_size(len(payload), max_bytes)
    frame = len(payload).to_bytes(LENGTH_PREFIX_BYTES, "big") + payload
    with trio.fail_after(timeout):
        await stream.send_all(frame)
