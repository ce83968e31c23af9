"""
Repositorios para operaciones CRUD en Supabase.

Cada repositorio maneja una tabla/entidad específica. Los errores y
timeouts llegan como DataAccessError; decidir qué hacer con ellos
es responsabilidad del llamador.
"""

from typing import Callable, Optional

import structlog

from propmatch.database.supabase_client import get_supabase_client, SupabaseClient

logger = structlog.get_logger()


class BaseRepository:
    """Clase base para repositorios."""

    # PostgREST corta cada respuesta en max_rows (1000 por defecto en Supabase)
    PAGE_SIZE = 1000

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client

    async def _fetch_all(self, build_query: Callable, operation: str) -> list[dict]:
        """
        Lee todas las filas de un select, página por página.

        Args:
            build_query: Arma el select ya ordenado; se llama una vez por
                página porque los builders de PostgREST se mutan al usarlos
            operation: Nombre de la operación, para logs y errores

        Returns:
            Todas las filas, en el orden del query
        """
        rows: list[dict] = []
        start = 0
        while True:
            response = await self.client.execute(
                build_query().range(start, start + self.PAGE_SIZE - 1),
                operation=operation,
                retry=True,
            )
            page = response.data or []
            rows.extend(page)
            if len(page) < self.PAGE_SIZE:
                break
            start += self.PAGE_SIZE

        if start:
            logger.debug("Lectura paginada", operation=operation, rows=len(rows))
        return rows


class ProfileRepository(BaseRepository):
    """Repositorio para perfiles de usuario (preferencias)."""

    TABLE = "profiles"

    async def get_by_id(self, user_id: str) -> Optional[dict]:
        """Obtiene un perfil por su UUID."""
        response = await self.client.execute(
            self.client.table(self.TABLE)
            .select("*")
            .eq("id", user_id)
            .limit(1),
            operation="profiles.get_by_id",
            retry=True,
        )
        return response.data[0] if response.data else None

    async def get_all_ids(self) -> list[str]:
        """Obtiene los UUID de todos los usuarios."""
        rows = await self._fetch_all(
            lambda: self.client.table(self.TABLE).select("id").order("id"),
            operation="profiles.get_all_ids",
        )
        return [row["id"] for row in rows]


class PropertyRepository(BaseRepository):
    """Repositorio para propiedades."""

    TABLE = "properties"

    async def get_by_status(self, status: str) -> list[dict]:
        """Obtiene todas las propiedades con un status dado, ordenadas por id."""
        return await self._fetch_all(
            lambda: self.client.table(self.TABLE)
            .select("*")
            .eq("status", status)
            .order("id"),
            operation="properties.get_by_status",
        )

    async def get_by_ids(self, property_ids: list[str]) -> list[dict]:
        """Obtiene propiedades por una lista de UUID."""
        if not property_ids:
            return []

        return await self._fetch_all(
            lambda: self.client.table(self.TABLE)
            .select("*")
            .in_("id", property_ids)
            .order("id"),
            operation="properties.get_by_ids",
        )


class MatchRepository(BaseRepository):
    """Repositorio para matches usuario-propiedad."""

    TABLE = "matches"

    async def get_by_user(self, user_id: str) -> list[dict]:
        """Obtiene los matches de un usuario, mejor score primero."""
        return await self._fetch_all(
            lambda: self.client.table(self.TABLE)
            .select("user_id, property_id, match_score")
            .eq("user_id", user_id)
            .order("match_score", desc=True)
            .order("property_id"),
            operation="matches.get_by_user",
        )

    async def delete_by_user(self, user_id: str) -> None:
        """Borra todos los matches de un usuario."""
        await self.client.execute(
            self.client.table(self.TABLE).delete().eq("user_id", user_id),
            operation="matches.delete_by_user",
        )
        logger.debug("Matches borrados", user_id=user_id)

    async def insert_many(self, rows: list[dict]) -> None:
        """Inserta matches en bloque."""
        if not rows:
            return

        await self.client.execute(
            self.client.table(self.TABLE).insert(rows),
            operation="matches.insert_many",
        )
        logger.debug("Matches insertados", count=len(rows))

    async def replace_for_user(
        self, function_name: str, user_id: str, rows: list[dict]
    ) -> None:
        """
        Reemplaza los matches de un usuario en una sola transacción.

        Requiere una función PostgreSQL con parámetros
        ``(p_user_id uuid, p_matches jsonb)`` que haga delete + insert.
        """
        await self.client.execute_rpc(
            function_name,
            {"p_user_id": user_id, "p_matches": rows},
        )
        logger.debug("Matches reemplazados via RPC", user_id=user_id, count=len(rows))
