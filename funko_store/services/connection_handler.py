"""Connection Handler - one TCP connection bound to one FrameBuffer and one dispatcher.

Invariants:
    - Frames are extracted in arrival order and each one gets exactly one response
    - Each frame is processed in its own task: responses on one connection may be
      written out of order when storage calls overlap
    - A frame that fails to decode is answered with a failure response using the
      configured malformed-request kind; the dispatcher is not invoked and the
      connection stays open
    - Response writes are serialized per connection so frames never interleave
    - The connection stays open across many requests until the peer closes it or
      a socket error occurs; in-flight requests are awaited before closing

Design Decisions:
    - Catch-all around dispatch: an unexpected bug answers one request with a
      generic failure and is logged with traceback, other requests carry on
    - No read timeout and no frame size limit, matching the framing contract
    - Peer address bound to the logger once per connection
"""

import asyncio
import logging

from funko_store.core.errors import FrameDecodeError
from funko_store.core.framing import FrameBuffer, decode_frame, encode_message
from funko_store.infrastructure.observability import ContextLogger, bind
from funko_store.schemas.messages import FunkoResponse
from funko_store.services.request_dispatch import RequestDispatch

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """Server-side per-connection loop: read, frame, dispatch, respond."""

    def __init__(
        self, dispatch: RequestDispatch, malformed_kind: str = "list",
        read_chunk_size: int = 65_536,
    ):
        self._dispatch = dispatch
        self._malformed_kind = malformed_kind
        self._read_chunk_size = read_chunk_size

    async def handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
    ) -> None:
        """asyncio.start_server callback."""
        log = bind(logger, peer=_peer_name(writer))
        log.info("Client connected")
        frames = FrameBuffer()
        write_lock = asyncio.Lock()
        in_flight: set[asyncio.Task] = set()
        try:
            while True:
                data = await reader.read(self._read_chunk_size)
                if not data:
                    break
                for frame in frames.feed(data):
                    task = asyncio.create_task(
                        self._process(frame, writer, write_lock, log),
                    )
                    in_flight.add(task)
                    task.add_done_callback(in_flight.discard)
        except OSError as e:
            log.warning(f"Connection error: {e}")
        finally:
            if in_flight:
                await asyncio.gather(*in_flight, return_exceptions=True)
            if frames.pending:
                log.info(f"Discarding {frames.pending} bytes of unterminated frame")
            await _close(writer, log)
            log.info("Client disconnected")

    async def _process(
        self, frame: bytes, writer: asyncio.StreamWriter,
        write_lock: asyncio.Lock, log: ContextLogger,
    ) -> None:
        try:
            payload = decode_frame(frame)
        except FrameDecodeError as e:
            log.warning(
                f"Malformed request: {e.message}", extra={"error_code": e.code},
            )
            response = FunkoResponse.failure(self._malformed_kind, e.user_message)
        else:
            response = await self._dispatch_safely(payload, log)

        async with write_lock:
            try:
                writer.write(encode_message(response.to_wire()))
                await writer.drain()
            except OSError as e:
                log.warning(
                    f"Could not send response: {e}", extra={"tipo": response.kind},
                )

    async def _dispatch_safely(
        self, payload: dict, log: ContextLogger,
    ) -> FunkoResponse:
        try:
            return await self._dispatch.execute(payload)
        except Exception as e:
            log.error(f"Unhandled exception while dispatching: {e}", exc_info=True)
            kind = payload.get("tipo")
            return FunkoResponse.failure(
                kind if isinstance(kind, str) else self._malformed_kind,
                "An unexpected error occurred.",
            )


def _peer_name(writer: asyncio.StreamWriter) -> str:
    peer = writer.get_extra_info("peername")
    if isinstance(peer, tuple) and len(peer) >= 2:
        return f"{peer[0]}:{peer[1]}"
    return str(peer)


async def _close(writer: asyncio.StreamWriter, log: ContextLogger) -> None:
    writer.close()
    try:
        await writer.wait_closed()
    except OSError as e:
        log.debug(f"Error while closing connection: {e}")
