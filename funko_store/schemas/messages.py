"""Wire Messages - request and response envelopes exchanged over TCP.

Invariants:
    - Request: tipo, usuario, optional funko, optional id
    - Response: tipo (echoed), exito, mensaje, funkos only for list/read
    - to_wire() omits absent optional fields instead of sending null

Design Decisions:
    - Response.kind is a plain str: unsupported kinds are echoed back verbatim
      so a client can still correlate the failure
    - Per-kind required fields checked by the dispatcher, not here: the failure
      message depends on the operation
"""

from pydantic import BaseModel, ConfigDict, Field

from funko_store.core.domain_types import RequestKind
from funko_store.schemas.funko import Funko


class FunkoRequest(BaseModel):
    """Client -> server request."""

    model_config = ConfigDict(populate_by_name=True)

    kind: RequestKind = Field(alias="tipo")
    user: str = Field(alias="usuario")
    funko: Funko | None = None
    id: int | None = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class FunkoResponse(BaseModel):
    """Server -> client response."""

    model_config = ConfigDict(populate_by_name=True)

    kind: str = Field(alias="tipo")
    success: bool = Field(alias="exito")
    message: str = Field(alias="mensaje")
    funkos: list[Funko] | None = None

    @classmethod
    def ok(
        cls, kind: RequestKind, message: str, funkos: list[Funko] | None = None,
    ) -> "FunkoResponse":
        return cls(kind=kind.value, success=True, message=message, funkos=funkos)

    @classmethod
    def failure(cls, kind: str, message: str) -> "FunkoResponse":
        return cls(kind=kind, success=False, message=message)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
