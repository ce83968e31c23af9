"""
Motor de matching.

Puntúa propiedades contra las preferencias de cada usuario
y mantiene actualizada la tabla de matches.
"""

from propmatch.matching.engine import MatchingEngine
from propmatch.matching.scoring import MATCH_SCORE_THRESHOLD, calculate_score

__all__ = [
    "MatchingEngine",
    "MATCH_SCORE_THRESHOLD",
    "calculate_score",
]
