"""
Modelo de Propiedad

Solo los campos que usa el matching; el resto de columnas
de ``properties`` se ignoran.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Property(BaseModel):
    """Propiedad publicada en el marketplace."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., description="UUID de la propiedad")
    price: Optional[float] = Field(None, description="Precio publicado")
    location: Optional[str] = Field(None, description="Ubicación como texto")
    property_type: Optional[str] = Field(
        None, alias="type", description="apartment, villa, office, land, ..."
    )
    bedrooms: Optional[int] = Field(None, description="Cantidad de dormitorios")
    bathrooms: Optional[int] = Field(None, description="Cantidad de baños")
    status: str = Field(
        default="available", description="available, sold, pending, rented, inactive"
    )

    # Completado al leer los matches persistidos de un usuario
    match_percentage: Optional[int] = Field(None, ge=0, le=100)
