"""Funko Client - single request per connection over the line-delimited protocol.

Invariants:
    - One connection carries exactly one request and one response, then closes
    - The first complete frame received is the response; anything after it is ignored
    - A connection closed before a full frame raises ConnectionClosedError
    - An unparseable or invalid response raises FrameDecodeError

Design Decisions:
    - Request builders mirror the five operations so callers never assemble
      wire dicts by hand
    - update_request targets funko.id: the stored record and the existence check
      always refer to the same file
"""

import asyncio
import logging

from pydantic import ValidationError

from funko_store.config import DEFAULT_PORT
from funko_store.core.domain_types import RequestKind
from funko_store.core.errors import ConnectionClosedError, FrameDecodeError
from funko_store.core.framing import FrameBuffer, decode_frame, encode_message
from funko_store.schemas.funko import Funko
from funko_store.schemas.messages import FunkoRequest, FunkoResponse

logger = logging.getLogger(__name__)


async def send_request(
    request: FunkoRequest, host: str = "localhost", port: int = DEFAULT_PORT,
    read_chunk_size: int = 65_536,
) -> FunkoResponse:
    """Open a connection, send `request`, return the first response, disconnect."""
    reader, writer = await asyncio.open_connection(host, port)
    frames = FrameBuffer()
    try:
        writer.write(encode_message(request.to_wire()))
        await writer.drain()
        while True:
            data = await reader.read(read_chunk_size)
            if not data:
                raise ConnectionClosedError()
            complete = frames.feed(data)
            if complete:
                return _parse_response(complete[0])
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing connection: {e}")


def _parse_response(frame: bytes) -> FunkoResponse:
    payload = decode_frame(frame)
    try:
        return FunkoResponse.model_validate(payload)
    except ValidationError as e:
        raise FrameDecodeError(f"Invalid response: {e}") from e


# ─── Request builders ───────────────────────────────────────────

def add_request(user: str, funko: Funko) -> FunkoRequest:
    return FunkoRequest(kind=RequestKind.ADD, user=user, funko=funko)


def update_request(user: str, funko: Funko) -> FunkoRequest:
    return FunkoRequest(kind=RequestKind.UPDATE, user=user, funko=funko, id=funko.id)


def remove_request(user: str, funko_id: int) -> FunkoRequest:
    return FunkoRequest(kind=RequestKind.REMOVE, user=user, id=funko_id)


def list_request(user: str) -> FunkoRequest:
    return FunkoRequest(kind=RequestKind.LIST, user=user)


def read_request(user: str, funko_id: int) -> FunkoRequest:
    return FunkoRequest(kind=RequestKind.READ, user=user, id=funko_id)
