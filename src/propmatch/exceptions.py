"""
Excepciones propias del sistema.
"""

from typing import Optional


class DataAccessError(Exception):
    """
    Falla de una operación contra la base de datos (error o timeout).

    ``applied`` solo se conoce para escrituras que excedieron el timeout:
    True si la operación terminó igual, False si terminó con error.
    """

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        original_error: Optional[Exception] = None,
        timed_out: bool = False,
        applied: Optional[bool] = None,
    ):
        self.message = message
        self.operation = operation
        self.original_error = original_error
        self.timed_out = timed_out
        self.applied = applied
        super().__init__(message)
