"""
Pytest fixtures for the vote token backend tests.
"""

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("KEYS_STORAGE_ROOT", tempfile.mkdtemp(prefix="votaciones-keys-"))


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture(scope="session")
def key_pair():
    """RSA key pair shared by the whole session (generation is slow)."""
    from core.keystore import generate_key_pair

    return generate_key_pair()


@pytest.fixture(scope="session")
def other_key_pair():
    """A second, unrelated key pair."""
    from core.keystore import generate_key_pair

    return generate_key_pair()


@pytest.fixture
def keys_dir(tmp_path: Path) -> Path:
    return tmp_path / "keys"


@pytest.fixture
def empty_key_store(request, keys_dir: Path, tmp_path: Path):
    """KeyStore pointing at a directory with no keys."""
    from core.keystore import KeyStore, KeyStoreConfig

    # When a provisioned store is also in use, keep this one in its own directory.
    directory = tmp_path / "empty-keys" if "key_store" in request.fixturenames else keys_dir
    return KeyStore(KeyStoreConfig.for_directory(directory))


@pytest.fixture
def key_store(keys_dir: Path, key_pair):
    """KeyStore with the session key pair provisioned."""
    from core.keystore import KeyStore, KeyStoreConfig

    store = KeyStore(KeyStoreConfig.for_directory(keys_dir))
    store.store_key_pair(key_pair)
    return store


@pytest.fixture
def token_service(key_store):
    from services.token_service import TokenService

    return TokenService(key_store)


@pytest.fixture
def token_verifier(key_store):
    from services.token_verifier import TokenVerifier

    return TokenVerifier(key_store)


@pytest.fixture
def votacion_repository():
    """In-memory repository holding one votacion (id 42)."""
    from datetime import datetime, timezone

    from repositories.votacion_repository import InMemoryVotacionRepository
    from schemas.votacion import VotacionSummary

    return InMemoryVotacionRepository(
        [
            VotacionSummary(
                id=42,
                titulo="Elección de junta directiva",
                descripcion="Votación anual",
                categoria="Asamblea",
                formulario_config=[{"id": "q1", "title": "¿Aprueba el informe?", "type": "radio"}],
                fecha_inicio=datetime(2024, 1, 1, tzinfo=timezone.utc),
                fecha_fin=datetime(2024, 1, 2, tzinfo=timezone.utc),
                estado="activa",
            )
        ]
    )


@pytest.fixture
async def app(key_store, votacion_repository) -> Any:
    """Create FastAPI application wired to the test key store."""
    from core.keystore import get_key_store
    from main import app as fastapi_app
    from repositories.votacion_repository import get_votacion_repository
    from services.token_verifier import TokenVerifier, get_token_verifier

    fastapi_app.dependency_overrides[get_key_store] = lambda: key_store
    fastapi_app.dependency_overrides[get_token_verifier] = lambda: TokenVerifier(key_store)
    fastapi_app.dependency_overrides[get_votacion_repository] = lambda: votacion_repository
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def sample_respuestas() -> dict[str, Any]:
    """Answers as submitted from a ballot form."""
    return {
        "q1": "yes",
        "q2": ["opción A", "opción C"],
        "q3": {"texto": "Más información en https://example.org/acta"},
    }
