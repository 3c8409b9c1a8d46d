"""Stream serving for the verification gateway."""

from __future__ import annotations

import logging
from functools import partial
from typing import Optional

import trio

from ...credentials.gateway import VerificationGateway
from .errors import ProtocolError
from .handler import error_response, handle_verify_request_bytes
from .limits import read_frame, write_frame
from .messages import encode_response

logger = logging.getLogger(__name__)

TOTAL_TIMEOUT = 30.0


async def handle_verify_stream(
    stream: trio.abc.Stream, gateway: VerificationGateway, app: Optional[bytes] = None
) -> None:
    """Serve one framed request on ``stream`` and close it."""
    try:
        with trio.fail_after(TOTAL_TIMEOUT):
            request_blob = await read_frame(stream)
            response_blob = handle_verify_request_bytes(request_blob, gateway, app)
            await write_frame(stream, response_blob)
    except (ProtocolError, trio.TooSlowError) as exc:
        logger.debug("protocol error: %s", type(exc).__name__)
        try:
            await write_frame(stream, encode_response(error_response(exc)))
        except (ProtocolError, trio.BrokenResourceError, trio.ClosedResourceError, trio.TooSlowError):
            pass
    except (trio.BrokenResourceError, trio.ClosedResourceError):
        logger.debug("peer went away")
    finally:
        await stream.aclose()


async def serve_gateway(
    gateway: VerificationGateway,
    port: int,
    *,
    host: Optional[str] = "127.0.0.1",
    app: Optional[bytes] = None,
    task_status=trio.TASK_STATUS_IGNORED,
) -> None:
    """
    Accept TCP connections forever, one request per connection.

    Clients choose the app key they are counted under. Give ``app`` to serve
    a single application and refuse requests naming any other.
    """
    logger.info("verification gateway listening on %s:%d", host, port)
    await trio.serve_tcp(
        partial(handle_verify_stream, gateway=gateway, app=app),
        port,
        host=host,
        task_status=task_status,
    )
