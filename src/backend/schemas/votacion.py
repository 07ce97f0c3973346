"""
Votacion-related Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class VotacionSummary(BaseModel):
    """Public summary of a votacion, shown next to a verified token."""

    id: int
    titulo: str
    descripcion: Optional[str] = None
    categoria: Optional[str] = None
    formulario_config: list[dict[str, Any]] = Field(
        default_factory=list, description="Question definitions of the ballot form"
    )
    fecha_inicio: datetime
    fecha_fin: datetime
    estado: str = "activa"

    model_config = {"from_attributes": True}
