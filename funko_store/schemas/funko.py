"""Funko Schema - the persisted collectible record and its single validation rule.

Invariants:
    - market_value is strictly positive; nothing else is validated beyond type
    - Fields are copied verbatim (no stripping, no normalization)
    - Serialized with wire aliases both on the socket and on disk

Design Decisions:
    - Pydantic model over dataclass: the same class validates wire payloads,
      decodes record files and renders JSON, so the three never drift apart
    - create_funko returns None instead of raising: callers building records
      from user input treat a rejected record as "nothing to send"
"""

from pydantic import BaseModel, ConfigDict, Field

from funko_store.core.domain_types import FunkoGenre, FunkoType


class Funko(BaseModel):
    """A collectible item owned by one user."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str = Field(alias="nombre")
    description: str = Field(alias="descripcion")
    funko_type: FunkoType = Field(alias="tipo")
    genre: FunkoGenre = Field(alias="genero")
    franchise: str = Field(alias="franquicia")
    number: int = Field(alias="numero")
    exclusive: bool = Field(alias="exclusivo")
    special_features: str = Field(alias="caracteristicasEspeciales")
    market_value: float = Field(alias="valorMercado", gt=0, allow_inf_nan=False)

    def to_wire(self) -> dict:
        """JSON-ready dict using the wire/disk field names."""
        return self.model_dump(by_alias=True, mode="json")


def create_funko(
    id: int,
    name: str,
    description: str,
    funko_type: FunkoType,
    genre: FunkoGenre,
    franchise: str,
    number: int,
    exclusive: bool,
    special_features: str,
    market_value: float,
) -> Funko | None:
    """Build a Funko, or return None when market_value is not strictly positive (NaN included)."""
    if not market_value > 0:
        return None
    return Funko(
        id=id,
        name=name,
        description=description,
        funko_type=funko_type,
        genre=genre,
        franchise=franchise,
        number=number,
        exclusive=exclusive,
        special_features=special_features,
        market_value=market_value,
    )
