"""
Cálculo del score de match entre preferencias y propiedad.

Suma ponderada de factores independientes. Un factor entra al
denominador solo si el usuario expresó esa preferencia, así que una
preferencia ausente no penaliza: simplemente no se evalúa.

    Precio      30
    Ubicación   25
    Tipo        20
    Dormitorios 15
    Baños       10
"""

import math
from typing import Optional

from propmatch.models import Budget, Property, UserPreferenceProfile

PRICE_WEIGHT = 30
LOCATION_WEIGHT = 25
TYPE_WEIGHT = 20
BEDROOMS_WEIGHT = 15
BATHROOMS_WEIGHT = 10

LOCATION_PARTIAL_POINTS = 15
OVER_BUDGET_PENALTY = 0.7

# Puntos según la diferencia absoluta (0, 1, 2); 3 o más no suma
BEDROOM_POINTS = (15, 10, 5)
BATHROOM_POINTS = (10, 7, 3)

_RESIDENTIAL_TYPES = ["apartment", "villa", "townhouse", "penthouse", "duplex"]

PREFERENCE_TYPE_MAPPING: dict[str, list[str]] = {
    "buy": _RESIDENTIAL_TYPES,
    "rent": _RESIDENTIAL_TYPES,
    "invest": ["apartment", "commercial", "land", "retail", "office"],
}

MATCH_SCORE_THRESHOLD = 40


def calculate_score(preferences: UserPreferenceProfile, property: Property) -> int:
    """
    Calcula el score de match entre un perfil y una propiedad.

    Args:
        preferences: Preferencias del usuario
        property: Propiedad a evaluar

    Returns:
        Entero entre 0 y 100. 0 si no hay ningún factor aplicable.
    """
    score = 0.0
    total_factors = 0

    if preferences.budget is not None:
        total_factors += PRICE_WEIGHT
        score += _price_points(preferences.budget, property.price)

    if preferences.location and property.location:
        total_factors += LOCATION_WEIGHT
        score += _location_points(preferences.location, property.location)

    if preferences.property_preference_types is not None and property.property_type:
        total_factors += TYPE_WEIGHT
        score += _type_points(preferences.property_preference_types, property.property_type)

    if preferences.bedrooms is not None and property.bedrooms is not None:
        total_factors += BEDROOMS_WEIGHT
        score += _proximity_points(preferences.bedrooms, property.bedrooms, BEDROOM_POINTS)

    if preferences.bathrooms is not None and property.bathrooms is not None:
        total_factors += BATHROOMS_WEIGHT
        score += _proximity_points(preferences.bathrooms, property.bathrooms, BATHROOM_POINTS)

    if total_factors == 0:
        return 0

    normalized = (score / total_factors) * 100
    # Redondeo half-up (round() de Python redondea al par)
    return int(math.floor(normalized + 0.5))


def _price_points(budget: Budget, price: Optional[float]) -> float:
    if price is None:
        return 0.0

    if budget.min <= price <= budget.max:
        return float(PRICE_WEIGHT)

    if price < budget.min:
        # Cuanto más lejos del mínimo, menos puntos
        if budget.min <= 0:
            return 0.0
        ratio = 1 - (budget.min - price) / budget.min
        return PRICE_WEIGHT * max(0.0, ratio)

    if budget.max <= 0:
        return 0.0
    ratio = 1 - (price - budget.max) / budget.max
    return PRICE_WEIGHT * max(0.0, ratio) * OVER_BUDGET_PENALTY


def _location_points(preferred: str, actual: str) -> float:
    preferred = preferred.lower()
    actual = actual.lower()

    if preferred in actual or actual in preferred:
        return float(LOCATION_WEIGHT)

    # Solo se busca la ciudad del usuario dentro de la ubicación de la propiedad
    city = preferred.split(",")[0].strip()
    if city in actual:
        return float(LOCATION_PARTIAL_POINTS)

    return 0.0


def expand_preference_types(preference_types: list[str]) -> set[str]:
    """Traduce intenciones (buy/rent/invest) a tipos concretos de propiedad."""
    expanded: set[str] = set()
    for preference in preference_types:
        expanded.update(PREFERENCE_TYPE_MAPPING.get(preference, []))
    return expanded


def _type_points(preference_types: list[str], property_type: str) -> float:
    if property_type.lower() in expand_preference_types(preference_types):
        return float(TYPE_WEIGHT)
    return 0.0


def _proximity_points(preferred: int, actual: int, points: tuple[int, ...]) -> float:
    difference = abs(actual - preferred)
    if difference < len(points):
        return float(points[difference])
    return 0.0
