"""
Votacion repository.

Token verification only needs to look a votacion up by id. Real persistence
belongs to the surrounding application; this module defines the interface
it must satisfy and an in-memory implementation used by default.
"""

from typing import Optional, Protocol, runtime_checkable

from schemas.votacion import VotacionSummary


@runtime_checkable
class VotacionRepositoryProtocol(Protocol):
    """Protocol defining votacion lookup operations."""

    async def get_by_id(self, votacion_id: int) -> Optional[VotacionSummary]: ...


class InMemoryVotacionRepository:
    """Repository holding votaciones in process memory."""

    def __init__(self, votaciones: Optional[list[VotacionSummary]] = None):
        self._votaciones: dict[int, VotacionSummary] = {}
        for votacion in votaciones or []:
            self.add(votacion)

    def add(self, votacion: VotacionSummary) -> None:
        self._votaciones[votacion.id] = votacion

    async def get_by_id(self, votacion_id: int) -> Optional[VotacionSummary]:
        """Get a votacion by id, or None if unknown."""
        if isinstance(votacion_id, bool) or not isinstance(votacion_id, int):
            return None
        return self._votaciones.get(votacion_id)


_default_repository = InMemoryVotacionRepository()


async def get_votacion_repository() -> VotacionRepositoryProtocol:
    """FastAPI dependency returning the configured votacion repository."""
    return _default_repository
