"""Request Dispatch - explicit routing from request kind to storage operations.

Invariants:
    - Every kind->handler mapping is visible - no getattr magic, no auto-discovery
    - execute() never raises for request-level failures: every FunkoStoreError
      becomes a failure response echoing the request kind
    - Unknown kinds answer "Unsupported operation" with the raw kind echoed
    - add/update check existence with load_all() before save(); remove goes
      straight to delete(); list/read never write
    - Each request is independent: no state carried between calls

Design Decisions:
    - Explicit dict over getattr: every mapping visible in one place
    - Handlers raise typed errors, execute() renders them: one place decides
      what the client sees and what gets logged
    - Check-then-write wrapped in UserLocks: a no-op unless serialize_user_writes
      is enabled, so the historical race stays reproducible by default
    - Log context bound per request (tipo, then usuario once parsed) so every
      line for the request carries it
"""

import logging

from pydantic import ValidationError

from funko_store.core.domain_types import RequestKind
from funko_store.core.errors import (
    ErrorContext,
    ErrorSeverity,
    FunkoConflictError,
    FunkoNotFoundError,
    FunkoStoreError,
    RequestValidationError,
    StorageWriteError,
    UnsupportedOperationError,
)
from funko_store.infrastructure.funko_storage import FunkoStorage
from funko_store.infrastructure.observability import ContextLogger, bind
from funko_store.schemas.funko import Funko
from funko_store.schemas.messages import FunkoRequest, FunkoResponse
from funko_store.services.user_locks import UserLocks

logger = logging.getLogger(__name__)

_KIND_VALUES = frozenset(kind.value for kind in RequestKind)


class RequestDispatch:
    """Routes request kind -> handler. Explicit registration, no auto-discovery."""

    def __init__(
        self, storage: FunkoStorage, locks: UserLocks | None = None,
        fallback_kind: str = RequestKind.LIST.value,
    ):
        self._storage = storage
        self._locks = locks or UserLocks()
        self._fallback_kind = fallback_kind

        # ADR: every mapping explicit - adding an operation requires editing this dict
        self._handlers = {
            RequestKind.ADD: self._add,
            RequestKind.UPDATE: self._update,
            RequestKind.REMOVE: self._remove,
            RequestKind.LIST: self._list,
            RequestKind.READ: self._read,
        }

    async def execute(self, payload: dict) -> FunkoResponse:
        """Process one decoded request and build its response."""
        kind = self._echo_kind(payload)
        log = bind(logger, tipo=kind)
        try:
            request = self._parse(payload)
            log = log.bind(usuario=request.user)
            log.info(f"Processing '{request.kind.value}' for '{request.user}'")
            return await self._handlers[request.kind](request)
        except FunkoStoreError as e:
            _log_failure(log, e)
            return FunkoResponse.failure(kind, e.user_message)

    # ─── Handlers ───────────────────────────────────────────────

    async def _add(self, request: FunkoRequest) -> FunkoResponse:
        funko = request.funko
        if funko is None:
            raise RequestValidationError("No Funko received to add.", "funko")
        async with self._locks.for_user(request.user):
            existing = await self._storage.load_all(request.user)
            if _find(existing, funko.id) is not None:
                raise FunkoConflictError(request.user, funko.id)
            if not await self._storage.save(request.user, funko):
                raise StorageWriteError(
                    "Could not save the Funko.",
                    ErrorContext(user=request.user, funko_id=funko.id),
                )
        return FunkoResponse.ok(
            RequestKind.ADD, f"Funko ID {funko.id} added to {request.user}.",
        )

    async def _update(self, request: FunkoRequest) -> FunkoResponse:
        funko, funko_id = request.funko, request.id
        if funko is None or funko_id is None:
            raise RequestValidationError(
                "Incomplete data to update Funko.",
                "funko" if funko is None else "id",
            )
        async with self._locks.for_user(request.user):
            existing = await self._storage.load_all(request.user)
            if _find(existing, funko_id) is None:
                raise FunkoNotFoundError(request.user, funko_id)
            if not await self._storage.save(request.user, funko):
                raise StorageWriteError(
                    "Could not update the Funko.",
                    ErrorContext(user=request.user, funko_id=funko_id),
                )
        return FunkoResponse.ok(
            RequestKind.UPDATE, f"Funko ID {funko_id} updated for {request.user}.",
        )

    async def _remove(self, request: FunkoRequest) -> FunkoResponse:
        funko_id = request.id
        if funko_id is None:
            raise RequestValidationError("No ID given to remove.", "id")
        async with self._locks.for_user(request.user):
            removed = await self._storage.delete(request.user, funko_id)
        if not removed:
            raise FunkoNotFoundError(
                request.user, funko_id,
                message=f"Could not remove (or does not exist) Funko with ID {funko_id}.",
            )
        return FunkoResponse.ok(
            RequestKind.REMOVE, f"Funko ID {funko_id} removed from {request.user}.",
        )

    async def _list(self, request: FunkoRequest) -> FunkoResponse:
        funkos = await self._storage.load_all(request.user)
        return FunkoResponse.ok(
            RequestKind.LIST, f"Funkos listed for {request.user}.", funkos,
        )

    async def _read(self, request: FunkoRequest) -> FunkoResponse:
        funko_id = request.id
        if funko_id is None:
            raise RequestValidationError("No ID given to read.", "id")
        funko = _find(await self._storage.load_all(request.user), funko_id)
        if funko is None:
            raise FunkoNotFoundError(request.user, funko_id)
        return FunkoResponse.ok(
            RequestKind.READ, f"Funko ID {funko_id} found for {request.user}.", [funko],
        )

    # ─── Helpers ────────────────────────────────────────────────

    def _echo_kind(self, payload: dict) -> str:
        kind = payload.get("tipo")
        return kind if isinstance(kind, str) else self._fallback_kind

    def _parse(self, payload: dict) -> FunkoRequest:
        kind = payload.get("tipo")
        if not isinstance(kind, str) or kind not in _KIND_VALUES:
            raise UnsupportedOperationError(kind)
        try:
            return FunkoRequest.model_validate(payload)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(loc) for loc in error["loc"])
            raise RequestValidationError(
                f"Invalid field '{field}': {error['msg']}.", field,
            ) from e

def _log_failure(log: ContextLogger, error: FunkoStoreError) -> None:
    if error.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING):
        log.warning(f"Request rejected: {error.message}", extra=error.log_extra())
    else:
        log.error(f"Request failed: {error.message}", extra=error.log_extra())


def _find(funkos: list[Funko], funko_id: int) -> Funko | None:
    return next((f for f in funkos if f.id == funko_id), None)
