"""Funko Server - asyncio TCP entry point.

Invariants:
    - Components wired explicitly here (no auto-discovery): storage -> dispatch ->
      connection handler -> asyncio server
    - Logging configured once on startup via lifespan
    - Every connection is handled independently on one event loop

Design Decisions:
    - Lifespan as an async context manager: startup/shutdown logging lives in one
      place, same shape whether serving forever or embedded in tests
    - create_server() returns the asyncio.Server without serving: tests bind
      port 0 and drive it directly
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from funko_store.config import Settings, get_settings
from funko_store.infrastructure.funko_storage import FunkoStorage
from funko_store.infrastructure.observability import setup_logging
from funko_store.services.connection_handler import ConnectionHandler
from funko_store.services.request_dispatch import RequestDispatch
from funko_store.services.user_locks import UserLocks

logger = logging.getLogger(__name__)


async def create_server(settings: Settings) -> asyncio.Server:
    """Bind the listening socket with a fully wired connection handler."""
    storage = FunkoStorage(settings.storage_root)
    dispatch = RequestDispatch(
        storage,
        UserLocks(enabled=settings.serialize_user_writes),
        fallback_kind=settings.malformed_request_kind,
    )
    handler = ConnectionHandler(
        dispatch,
        malformed_kind=settings.malformed_request_kind,
        read_chunk_size=settings.read_chunk_size,
    )
    return await asyncio.start_server(handler.handle, settings.host, settings.port)


@asynccontextmanager
async def lifespan(settings: Settings):
    """Startup/shutdown lifecycle."""
    setup_logging(settings.log_level, settings.log_format)
    server = await create_server(settings)
    addresses = ", ".join(str(sock.getsockname()) for sock in server.sockets)
    logger.info(
        f"Funko server listening on {addresses}, storage at {settings.storage_root}",
    )
    try:
        async with server:
            yield server
    finally:
        logger.info("Funko server shutting down")


async def serve(settings: Settings | None = None) -> None:
    async with lifespan(settings or get_settings()) as server:
        await server.serve_forever()


def run() -> None:
    """Console-script entry point."""
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass
