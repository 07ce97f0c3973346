"""Repository modules for data access."""

from repositories.votacion_repository import (
    InMemoryVotacionRepository,
    VotacionRepositoryProtocol,
)

__all__ = [
    "InMemoryVotacionRepository",
    "VotacionRepositoryProtocol",
]
