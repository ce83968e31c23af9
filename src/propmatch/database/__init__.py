"""
Módulo de base de datos.

Provee acceso a Supabase y operaciones CRUD.
"""

from propmatch.database.supabase_client import get_supabase_client, SupabaseClient
from propmatch.database.repositories import (
    ProfileRepository,
    PropertyRepository,
    MatchRepository,
)

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "ProfileRepository",
    "PropertyRepository",
    "MatchRepository",
]
