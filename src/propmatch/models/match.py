"""
Modelo de Match

Asociación (usuario, propiedad, score) persistida en la tabla ``matches``.
"""

from pydantic import BaseModel, Field


class Match(BaseModel):
    """Candidato a recomendación para un usuario."""

    user_id: str = Field(..., description="FK al perfil")
    property_id: str = Field(..., description="FK a la propiedad")
    match_score: int = Field(..., ge=0, le=100, description="Score 0-100")

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        return self.model_dump()
