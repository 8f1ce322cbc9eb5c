"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - FunkoType has exactly 4 members, FunkoGenre exactly 6
    - All valid request kinds encoded as an Enum - no raw string matching

Design Decisions:
    - str Enums: serialize to JSON without custom encoders, values match the
      strings already stored on disk by existing collections
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class FunkoType(str, Enum):
    """Product line of a Funko."""
    POP = "Pop!"
    POP_RIDES = "Pop! Rides"
    VYNIL_SODA = "Vynil Soda"
    VYNIL_GOLD = "Vynil Gold"


class FunkoGenre(str, Enum):
    """Theme a Funko belongs to."""
    ANIMATION = "Animación"
    MOVIES_TV = "Películas y TV"
    VIDEOGAMES = "Videojuegos"
    SPORTS = "Deportes"
    MUSIC = "Música"
    ANIME = "Ánime"


class RequestKind(str, Enum):
    """The 5 operations a client may request. Echoed back in every response."""
    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
    LIST = "list"
    READ = "read"

