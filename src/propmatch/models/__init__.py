"""
Modelos de datos del sistema.

- UserPreferenceProfile: criterios de búsqueda del usuario
- Property: propiedad candidata
- Match: resultado persistido del matching
"""

from propmatch.models.preferences import Budget, UserPreferenceProfile
from propmatch.models.property import Property
from propmatch.models.match import Match

__all__ = [
    # Usuario
    "Budget",
    "UserPreferenceProfile",
    # Propiedades
    "Property",
    # Matching
    "Match",
]
