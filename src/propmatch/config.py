"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> propmatch/ -> src/ -> raíz del proyecto
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase
    supabase_url: str = Field(..., description="URL del proyecto Supabase")
    supabase_key: str = Field(..., description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )

    # Acceso a datos
    request_timeout_seconds: float = Field(
        10.0, gt=0, description="Timeout por request contra Supabase (segundos)"
    )
    fetch_retry_attempts: int = Field(
        3, ge=1, description="Intentos máximos para lecturas (1 = sin reintentos)"
    )

    # Matching
    match_score_threshold: int = Field(
        40, ge=0, le=100, description="Score mínimo para persistir un match"
    )
    available_status: str = Field(
        "available", description="Status de las propiedades candidatas"
    )
    matches_replace_rpc: Optional[str] = Field(
        None,
        description="Función RPC que reemplaza los matches de un usuario en una transacción",
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()

