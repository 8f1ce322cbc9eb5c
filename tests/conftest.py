"""Root conftest - shared test configuration and fixtures.

Invariants:
    - Every test gets its own storage root under tmp_path; ./datos is never touched
    - running_server binds 127.0.0.1 on an ephemeral port and is closed after the test
"""

import os

import pytest

from funko_store.config import Settings
from funko_store.core.domain_types import FunkoGenre, FunkoType
from funko_store.infrastructure.funko_storage import FunkoStorage
from funko_store.main import create_server
from funko_store.schemas.funko import Funko

# Ensure a stray .env or shell export never points tests at real data
os.environ.pop("FUNKO_STORAGE_ROOT", None)


@pytest.fixture
def make_funko():
    """Factory for valid Funkos; keyword overrides use Python field names."""
    def _make(funko_id: int = 1, **overrides) -> Funko:
        fields = {
            "id": funko_id,
            "name": f"Funko {funko_id}",
            "description": "Test description",
            "funko_type": FunkoType.POP,
            "genre": FunkoGenre.ANIMATION,
            "franchise": "The Big Bang Theory",
            "number": funko_id,
            "exclusive": False,
            "special_features": "Glows in the dark",
            "market_value": 15.5,
        }
        fields.update(overrides)
        return Funko(**fields)
    return _make


@pytest.fixture
def storage_root(tmp_path):
    return tmp_path / "datos"


@pytest.fixture
def storage(storage_root):
    return FunkoStorage(storage_root)


@pytest.fixture
def server_settings(storage_root):
    return Settings(host="127.0.0.1", port=0, storage_root=storage_root)


@pytest.fixture
async def running_server(server_settings):
    """Live server; yields (host, port)."""
    server = await create_server(server_settings)
    host, port = server.sockets[0].getsockname()[:2]
    async with server:
        yield host, port
