"""
Cliente de Supabase.

Singleton para conexión a la base de datos.
"""

import asyncio
from functools import lru_cache
from typing import Any, Optional

import structlog
from supabase import create_client, Client
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from propmatch.config import get_settings
from propmatch.exceptions import DataAccessError

logger = structlog.get_logger()


class SupabaseClient:
    """
    Wrapper del cliente de Supabase con métodos de utilidad.

    supabase-py es bloqueante: cada request se ejecuta en un thread
    aparte y se corta con ``request_timeout`` para no trabar el event loop.
    Un thread no se puede cancelar, así que las escrituras que exceden el
    timeout se esperan hasta que terminan antes de reportar el error.
    """

    def __init__(
        self,
        client: Client,
        request_timeout: float = 10.0,
        retry_attempts: int = 3,
    ):
        self._client = client
        self.request_timeout = request_timeout
        self.retry_attempts = retry_attempts

    @property
    def client(self) -> Client:
        """Acceso directo al cliente de Supabase."""
        return self._client

    def table(self, name: str):
        """Acceso a una tabla específica."""
        return self._client.table(name)

    async def execute(self, query: Any, operation: str, retry: bool = False) -> Any:
        """
        Ejecuta un query builder de PostgREST.

        Args:
            query: Builder ya armado (select/insert/delete/rpc)
            operation: Nombre de la operación, para logs y errores
            retry: Reintentar con backoff exponencial (solo lecturas).
                Sin retry la operación se trata como escritura.

        Returns:
            La respuesta de Supabase

        Raises:
            DataAccessError: Si la operación falla o excede el timeout
        """
        attempts = self.retry_attempts if retry else 1

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(DataAccessError),
            reraise=True,
        ):
            with attempt:
                return await self._execute_once(
                    query, operation, settle_on_timeout=not retry
                )

    async def _execute_once(
        self, query: Any, operation: str, settle_on_timeout: bool
    ) -> Any:
        worker = asyncio.ensure_future(asyncio.to_thread(query.execute))
        try:
            return await asyncio.wait_for(
                asyncio.shield(worker),
                timeout=self.request_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(
                "Timeout en operación de Supabase",
                operation=operation,
                timeout=self.request_timeout,
            )
            applied = None
            if settle_on_timeout:
                applied = await self._settle(worker, operation)
            else:
                # Lectura abandonada: consumir el resultado para no dejar
                # excepciones sin recuperar
                worker.add_done_callback(lambda f: f.cancelled() or f.exception())
            raise DataAccessError(
                f"Timeout tras {self.request_timeout}s",
                operation=operation,
                original_error=e,
                timed_out=True,
                applied=applied,
            ) from e
        except Exception as e:
            logger.warning(
                "Error en operación de Supabase",
                operation=operation,
                error=str(e),
            )
            raise DataAccessError(str(e), operation=operation, original_error=e) from e

    async def _settle(self, worker: asyncio.Future, operation: str) -> bool:
        """Espera una escritura que excedió el timeout; True si se aplicó."""
        try:
            await worker
        except Exception as e:
            logger.warning(
                "Escritura fallida tras el timeout",
                operation=operation,
                error=str(e),
            )
            return False
        logger.warning("Escritura aplicada tras el timeout", operation=operation)
        return True

    async def execute_rpc(
        self, function_name: str, params: Optional[dict] = None
    ) -> list:
        """
        Ejecuta una función RPC de PostgreSQL.

        Args:
            function_name: Nombre de la función en Supabase
            params: Parámetros de la función

        Returns:
            Lista de resultados
        """
        try:
            response = await self.execute(
                self._client.rpc(function_name, params or {}),
                operation=f"rpc:{function_name}",
            )
            return response.data
        except DataAccessError as e:
            logger.error(
                "Error ejecutando RPC",
                function=function_name,
                error=e.message,
            )
            raise


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """
    Obtiene el cliente de Supabase (singleton cacheado).

    Returns:
        SupabaseClient configurado

    Raises:
        ValueError: Si las credenciales no están configuradas
    """
    settings = get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY son requeridos. "
            "Configura las variables de entorno."
        )

    # Usar service key si está disponible para operaciones admin
    key = settings.supabase_service_key or settings.supabase_key

    client = create_client(settings.supabase_url, key)
    logger.info("Cliente de Supabase inicializado", url=settings.supabase_url)

    return SupabaseClient(
        client,
        request_timeout=settings.request_timeout_seconds,
        retry_attempts=settings.fetch_retry_attempts,
    )
