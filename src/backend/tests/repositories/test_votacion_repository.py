"""
Tests for the in-memory votacion repository.
"""

from datetime import datetime, timezone

import pytest


@pytest.mark.unit
class TestInMemoryVotacionRepository:
    """Test InMemoryVotacionRepository lookups."""

    async def test_get_by_id(self, votacion_repository) -> None:
        votacion = await votacion_repository.get_by_id(42)

        assert votacion is not None
        assert votacion.id == 42

    async def test_unknown_id_returns_none(self, votacion_repository) -> None:
        assert await votacion_repository.get_by_id(7) is None

    @pytest.mark.parametrize("votacion_id", ["42", None, True])
    async def test_non_integer_id_returns_none(self, votacion_repository, votacion_id) -> None:
        assert await votacion_repository.get_by_id(votacion_id) is None

    async def test_add(self) -> None:
        from repositories.votacion_repository import InMemoryVotacionRepository
        from schemas.votacion import VotacionSummary

        repo = InMemoryVotacionRepository()
        repo.add(
            VotacionSummary(
                id=1,
                titulo="Presupuesto 2025",
                fecha_inicio=datetime(2025, 1, 1, tzinfo=timezone.utc),
                fecha_fin=datetime(2025, 1, 31, tzinfo=timezone.utc),
            )
        )

        votacion = await repo.get_by_id(1)
        assert votacion.titulo == "Presupuesto 2025"
        assert votacion.formulario_config == []

    def test_satisfies_protocol(self, votacion_repository) -> None:
        from repositories.votacion_repository import VotacionRepositoryProtocol

        assert isinstance(votacion_repository, VotacionRepositoryProtocol)
