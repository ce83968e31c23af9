"""
Modelo de Preferencias del Usuario

Criterios de búsqueda guardados en el perfil (tabla ``profiles``).
Los campos ausentes no participan del score.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Budget(BaseModel):
    """Rango de precio aceptable."""

    min: float = Field(..., description="Precio mínimo")
    max: float = Field(..., description="Precio máximo")


class UserPreferenceProfile(BaseModel):
    """
    Perfil de preferencias de un usuario.

    ``None`` significa "sin preferencia": el factor se excluye del
    denominador del score en lugar de penalizar.
    """

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = Field(None, description="UUID del perfil")
    budget: Optional[Budget] = Field(None, description="Rango de precio")
    location: Optional[str] = Field(None, description="Ubicación preferida, texto libre")
    property_preference_types: Optional[list[str]] = Field(
        None, description="Intenciones del usuario: buy, rent, invest"
    )
    bedrooms: Optional[int] = Field(None, description="Dormitorios deseados")
    bathrooms: Optional[int] = Field(None, description="Baños deseados")

    @classmethod
    def from_profile_row(cls, row: dict[str, Any]) -> "UserPreferenceProfile":
        """
        Construye el perfil desde una fila de ``profiles``.

        Acepta las dos formas en que la app guarda preferencias:
        columnas planas (``property_budget_min``, ``property_types``, ...)
        o el objeto anidado ``propertyPreferences``.
        """
        nested = row.get("propertyPreferences")
        if isinstance(nested, dict):
            budget = nested.get("budget")
            if not isinstance(budget, dict):
                budget = {}
            budget_min = budget.get("min")
            budget_max = budget.get("max")
            types = nested.get("types")
            bedrooms = nested.get("bedrooms")
            bathrooms = nested.get("bathrooms")
        else:
            budget_min = row.get("property_budget_min")
            budget_max = row.get("property_budget_max")
            types = row.get("property_types")
            bedrooms = row.get("property_bedrooms")
            bathrooms = row.get("property_bathrooms")

        return cls(
            id=row.get("id"),
            budget=(
                Budget(min=budget_min, max=budget_max)
                if budget_min is not None and budget_max is not None
                else None
            ),
            location=row.get("location"),
            property_preference_types=types,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
        )
